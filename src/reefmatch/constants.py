GRID_SIZE = 8
MATCH_MIN = 3

# Scoring: every cleared tile is worth POINTS_PER_TILE times the combo multiplier.
POINTS_PER_TILE = 10
COMBO_CAP = 5

# Initial-board repair sweeps before the residual grid is accepted as is.
REPAIR_MAX_ITERATIONS = 100

DEFAULT_LEVEL = 1
DEFAULT_SKIN = "orange"

# Six fish colors; the name doubles as the tile type.
DEFAULT_PALETTE = {
    'red':    (255, 71, 87),    # #FF4757
    'blue':   (52, 152, 219),   # #3498DB
    'green':  (46, 204, 113),   # #2ECC71
    'yellow': (241, 196, 15),   # #F1C40F
    'purple': (155, 89, 182),   # #9B59B6
    'orange': (230, 126, 34),   # #E67E22
}
