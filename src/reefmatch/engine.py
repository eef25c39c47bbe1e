"""Engine facade: composes board, validation, cascade and level systems.

The host drives the engine with ``start_level``, ``ready``, ``submit_move``,
``retry``, ``next_level`` and ``teardown``. Everything observable comes back
through the four host callbacks (score, moves, level complete, game over) or,
for hosts that animate the board, through the finer-grained bus events.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from esper import World

from reefmatch.components.level_config import LevelConfig
from reefmatch.components.run_state import Phase, RunState
from reefmatch.components.skin import SKINS, Skin
from reefmatch.constants import DEFAULT_LEVEL, DEFAULT_PALETTE, DEFAULT_SKIN, GRID_SIZE
from reefmatch.events.bus import (
    EVENT_GAME_OVER,
    EVENT_LEVEL_COMPLETE,
    EVENT_MOVES_CHANGED,
    EVENT_RUN_COMPLETE,
    EVENT_SCORE_CHANGED,
    EVENT_TILE_SWAP_REQUEST,
    EventBus,
)
from reefmatch.levels import LevelTable, default_level_table, final_level, resolve_level
from reefmatch.systems.board import BoardSystem
from reefmatch.systems.board_ops import get_tile_registry
from reefmatch.systems.level_system import LevelSystem
from reefmatch.systems.match import MatchSystem
from reefmatch.systems.match_resolution import MatchResolutionSystem
from reefmatch.utils.run_state import get_or_create_run_state
from reefmatch.utils.tile_source import RandomTileSource, TileSource
from reefmatch.world import create_world

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
Palette = Mapping[str, Tuple[int, int, int]] | Sequence[str]

_FALLBACK_COLOR = (128, 128, 128)


def resolve_skin(skin_id: str | None) -> Skin:
    skin = SKINS.get(skin_id or DEFAULT_SKIN)
    if skin is None:
        logger.info("unknown skin %r, using %s", skin_id, DEFAULT_SKIN)
        skin = SKINS[DEFAULT_SKIN]
    return skin


def _palette_dict(palette: Palette | None) -> Dict[str, Tuple[int, int, int]]:
    if palette is None:
        return dict(DEFAULT_PALETTE)
    if isinstance(palette, Mapping):
        result = dict(palette)
    else:
        result = {}
        for name in palette:
            if name not in DEFAULT_PALETTE:
                logger.debug("palette color %r has no default RGB, using grey", name)
            result[name] = DEFAULT_PALETTE.get(name, _FALLBACK_COLOR)
    if not result:
        raise ValueError("palette must define at least one tile type")
    return result


class MatchEngine:
    """Match-3 engine for one host. Owns its bus and world exclusively."""

    def __init__(
        self,
        on_score_update: Optional[Callable[[int], None]] = None,
        on_moves_update: Optional[Callable[[int], None]] = None,
        on_level_complete: Optional[Callable[[int, int, bool], None]] = None,
        on_game_over: Optional[Callable[[int], None]] = None,
        *,
        levels: LevelTable | None = None,
        grid_size: int = GRID_SIZE,
        palette: Palette | None = None,
        rng: random.Random | None = None,
        tile_source: TileSource | None = None,
        on_run_complete: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        if grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {grid_size}")
        self.levels: Dict[int, LevelConfig] = dict(levels) if levels is not None else default_level_table()
        if DEFAULT_LEVEL not in self.levels:
            raise ValueError(f"level table must define level {DEFAULT_LEVEL}")
        self.grid_size = grid_size
        self.palette = _palette_dict(palette)
        self.rng = rng or random.Random()
        self._tile_source = tile_source
        self._callbacks = {
            'score': on_score_update,
            'moves': on_moves_update,
            'level_complete': on_level_complete,
            'game_over': on_game_over,
            'run_complete': on_run_complete,
        }
        self._host_subscriptions: List[Tuple[str, Callable]] = []
        self.event_bus: EventBus | None = None
        self.world: World | None = None
        self.board_system: BoardSystem | None = None
        self.level_system: LevelSystem | None = None
        self.tile_source: TileSource | None = None
        self.config: LevelConfig | None = None
        self._skin: Skin = SKINS[DEFAULT_SKIN]
        self._run_completed = False

    # ------------------------------------------------------------------
    # Host inputs
    # ------------------------------------------------------------------
    def subscribe(self, name: str, fn: Callable) -> None:
        """Listen to a bus event on the current and every future level."""
        self._host_subscriptions.append((name, fn))
        if self.event_bus is not None:
            self.event_bus.subscribe(name, fn)

    def start_level(self, level_number: int = DEFAULT_LEVEL, skin_id: str = DEFAULT_SKIN) -> LevelConfig:
        """Build a fresh, match-free board and reset the run. Input stays locked until ready()."""
        self._release()
        self._run_completed = False
        config = resolve_level(self.levels, level_number)
        skin = resolve_skin(skin_id)
        self.config = config
        self._skin = skin

        self.event_bus = EventBus()
        self._wire_callbacks(self.event_bus)
        self.world = create_world(config, skin, palette=self.palette, rng=self.rng)
        registry = get_tile_registry(self.world)
        self.tile_source = self._tile_source or RandomTileSource(
            registry.spawnable_types(), getattr(self.world, "random")
        )

        self.board_system = BoardSystem(
            self.world, self.event_bus, self.tile_source, self.grid_size, self.grid_size
        )
        MatchSystem(self.world, self.event_bus)
        MatchResolutionSystem(self.world, self.event_bus, self.tile_source)
        self.level_system = LevelSystem(self.world, self.event_bus, final_level=final_level(self.levels))
        self.level_system.begin_level(config, skin)
        return config

    def ready(self) -> bool:
        """Open the ready gate; returns False when there is no level waiting for it."""
        if self.level_system is None:
            return False
        return self.level_system.open_gate()

    def submit_move(self, src: Position, dst: Position) -> None:
        if self.level_system is None or not self.level_system.accepts_input():
            logger.debug("move %s <-> %s ignored in phase %s", src, dst, self.phase)
            return
        self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=tuple(src), dst=tuple(dst))

    def retry(self) -> LevelConfig | None:
        if self.config is None:
            return None
        return self.start_level(self.config.level, self._skin.name)

    def next_level(self) -> LevelConfig | None:
        """Advance after LEVEL_COMPLETE; past the last level signal run completion instead."""
        if self.config is None or self.phase != Phase.LEVEL_COMPLETE:
            return None
        upcoming = next((level for level in sorted(self.levels) if level > self.config.level), None)
        if upcoming is None:
            if self._run_completed:
                return None
            self._run_completed = True
            state = self._run_state()
            self.event_bus.emit(EVENT_RUN_COMPLETE, level=state.level, score=state.score)
            return None
        return self.start_level(upcoming, self._skin.name)

    def teardown(self) -> None:
        """Release every engine-owned resource. Safe to call repeatedly."""
        self._release()
        self.config = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def phase(self) -> Phase | None:
        state = self._run_state()
        return state.phase if state is not None else None

    @property
    def score(self) -> int:
        state = self._run_state()
        return state.score if state is not None else 0

    @property
    def moves_left(self) -> int:
        state = self._run_state()
        return state.moves_left if state is not None else 0

    @property
    def combo(self) -> int:
        state = self._run_state()
        return state.combo if state is not None else 0

    @property
    def level(self) -> int | None:
        return self.config.level if self.config is not None else None

    @property
    def target_score(self) -> int | None:
        return self.config.target_score if self.config is not None else None

    @property
    def skin(self) -> Skin:
        return self._skin

    def grid(self) -> List[List[Optional[str]]]:
        if self.board_system is None:
            return []
        return self.board_system.snapshot()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _run_state(self) -> RunState | None:
        if self.world is None:
            return None
        return get_or_create_run_state(self.world)

    def _wire_callbacks(self, bus: EventBus) -> None:
        callbacks = self._callbacks
        if callbacks['score']:
            bus.subscribe(EVENT_SCORE_CHANGED, lambda sender, **k: callbacks['score'](k['score']))
        if callbacks['moves']:
            bus.subscribe(EVENT_MOVES_CHANGED, lambda sender, **k: callbacks['moves'](k['moves_left']))
        if callbacks['level_complete']:
            bus.subscribe(
                EVENT_LEVEL_COMPLETE,
                lambda sender, **k: callbacks['level_complete'](k['level'], k['score'], k['is_final_level']),
            )
        if callbacks['game_over']:
            bus.subscribe(EVENT_GAME_OVER, lambda sender, **k: callbacks['game_over'](k['score']))
        if callbacks['run_complete']:
            bus.subscribe(EVENT_RUN_COMPLETE, lambda sender, **k: callbacks['run_complete'](k['level'], k['score']))
        elif callbacks['level_complete']:
            # Without a run-complete listener, report the finished run as a final level completion.
            bus.subscribe(
                EVENT_RUN_COMPLETE,
                lambda sender, **k: callbacks['level_complete'](k['level'], k['score'], True),
            )
        for name, fn in self._host_subscriptions:
            bus.subscribe(name, fn)

    def _release(self) -> None:
        if self.event_bus is not None:
            self.event_bus.clear()
        if self.world is not None:
            self.world.clear_database()
        self.event_bus = None
        self.world = None
        self.board_system = None
        self.level_system = None
        self.tile_source = None
