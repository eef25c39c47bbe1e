from __future__ import annotations

import random
from typing import Iterable, Protocol, Sequence


class TileSource(Protocol):
    def choose(self, exclude: Iterable[str] = ()) -> str:
        ...


class RandomTileSource:
    """Draws tile colors from a palette, optionally avoiding some colors.

    When every palette color is excluded the constraint is dropped and any
    color may be returned.
    """

    def __init__(self, palette: Sequence[str], rng: random.Random | None = None) -> None:
        if not palette:
            raise ValueError("palette must not be empty")
        self.palette = list(palette)
        self.rng = rng or random.Random()

    def choose(self, exclude: Iterable[str] = ()) -> str:
        excluded = set(exclude)
        available = [name for name in self.palette if name not in excluded]
        return self.rng.choice(available or self.palette)
