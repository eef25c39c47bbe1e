from dataclasses import dataclass

@dataclass(slots=True)
class TileType:
    """Per-cell color assignment.

    Stores only the palette name. Occupancy is handled by ActiveSwitch and the
    RGB lookup lives on the singleton entity with TileTypeRegistry + TileTypes.
    """
    type_name: str
