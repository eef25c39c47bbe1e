from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems alive even when nobody holds the system.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)

    def clear(self):
        """Disconnect every receiver; later emits are silently dropped."""
        for sig in self._signals.values():
            for receiver in list(sig.receivers_for(self)):
                sig.disconnect(receiver)
        self._signals.clear()


# ============================================================================
# LEVEL LIFECYCLE
# ============================================================================
EVENT_LEVEL_STARTED = "level_started"          # payload: level=int, moves=int, target_score=int, skin=str
EVENT_PHASE_CHANGED = "phase_changed"          # payload: previous=Phase|None, new=Phase
EVENT_LEVEL_COMPLETE = "level_complete"        # payload: level=int, score=int, is_final_level=bool
EVENT_GAME_OVER = "game_over"                  # payload: level=int, score=int
EVENT_RUN_COMPLETE = "run_complete"            # payload: level=int, score=int


# ============================================================================
# SCORE & MOVES
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"          # payload: score=int, delta=int, combo=int
EVENT_MOVES_CHANGED = "moves_changed"          # payload: moves_left=int


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_BOARD_READY = "board_ready"                  # payload: rows=int, cols=int, repaired=bool
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=str
EVENT_TILE_SWAP_FINALIZE = "tile_swap_finalize"    # payload: src=(r,c), dst=(r,c)
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], size=int, combo=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], types=[(r,c,type_name),...]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=list[GravityMove]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: spawns=list[RefillSpawn]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...], points=int
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, batches=list[int]
