from __future__ import annotations

from collections import deque
from typing import Iterable, List, Optional, Sequence

from reefmatch.components.level_config import LevelConfig
from reefmatch.components.run_state import Phase, RunState
from reefmatch.components.skin import SKINS
from reefmatch.engine import MatchEngine
from reefmatch.events.bus import EventBus
from reefmatch.systems.board import BoardSystem
from reefmatch.systems.board_ops import apply_layout
from reefmatch.world import create_world


class ScriptedTileSource:
    """Hands out queued colors first, then colors that never match anything."""

    def __init__(self, colors: Iterable[str] = ()):
        self._queue = deque(colors)
        self._counter = 0

    def push(self, *colors: str) -> None:
        self._queue.extend(colors)

    def choose(self, exclude: Iterable[str] = ()) -> str:
        if self._queue:
            return self._queue.popleft()
        self._counter += 1
        return f"u{self._counter}"


def unique_layout(rows: int, cols: int) -> List[List[Optional[str]]]:
    """A board where no two cells share a color."""
    return [[f"x{r}_{c}" for c in range(cols)] for r in range(rows)]


def layout_with(rows: int, cols: int, cells: dict) -> List[List[Optional[str]]]:
    layout = unique_layout(rows, cols)
    for (r, c), type_name in cells.items():
        layout[r][c] = type_name
    return layout


def build_board(rows: int, cols: int, layout: Sequence[Sequence[Optional[str]]] | None = None,
                source: ScriptedTileSource | None = None):
    bus = EventBus()
    config = LevelConfig(level=1, moves_allowed=30, target_score=500)
    world = create_world(config, SKINS['orange'])
    source = source or ScriptedTileSource()
    board = BoardSystem(world, bus, source, rows, cols)
    if layout is not None:
        apply_layout(world, layout)
    # Board-level tests drive systems directly, so input starts unlocked.
    next(comp for _, comp in world.get_component(RunState)).phase = Phase.AWAITING_INPUT
    return bus, world, board, source


class Recorder:
    """Collects host callback invocations in order."""

    def __init__(self):
        self.calls: list[tuple] = []

    def score(self, score):
        self.calls.append(('score', score))

    def moves(self, moves_left):
        self.calls.append(('moves', moves_left))

    def level_complete(self, level, score, is_final_level):
        self.calls.append(('level_complete', level, score, is_final_level))

    def game_over(self, score):
        self.calls.append(('game_over', score))

    def run_complete(self, level, score):
        self.calls.append(('run_complete', level, score))

    def of(self, kind: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == kind]


def started_engine(layout=None, *, level: int = 1, levels=None, grid_size: int = 8,
                   recorder: Recorder | None = None):
    recorder = recorder or Recorder()
    source = ScriptedTileSource()
    engine = MatchEngine(
        recorder.score,
        recorder.moves,
        recorder.level_complete,
        recorder.game_over,
        levels=levels,
        grid_size=grid_size,
        tile_source=source,
        on_run_complete=recorder.run_complete,
    )
    engine.start_level(level, 'orange')
    if layout is not None:
        apply_layout(engine.world, layout)
    engine.ready()
    return engine, recorder, source
