"""Run state resource describing the level currently being played."""
from dataclasses import dataclass
from enum import Enum, auto


class Phase(Enum):
    """Level state machine phases."""
    IDLE = auto()
    AWAITING_INPUT = auto()
    RESOLVING = auto()
    LEVEL_COMPLETE = auto()
    GAME_OVER = auto()


@dataclass(slots=True)
class RunState:
    """Singleton component holding score, moves and combo for one level attempt."""
    level: int = 1
    target_score: int = 0
    score: int = 0
    moves_left: int = 0
    combo: int = 0
    cascade_depth: int = 0
    phase: Phase = Phase.IDLE
