"""Per-level move budget and target score."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LevelConfig:
    level: int
    moves_allowed: int
    target_score: int

    def __post_init__(self) -> None:
        if self.moves_allowed <= 0:
            raise ValueError(f"level {self.level}: moves_allowed must be positive")
        if self.target_score < 0:
            raise ValueError(f"level {self.level}: target_score must not be negative")
