"""Level state machine: move budget, ready gate and terminal transitions."""
from __future__ import annotations

import logging

from esper import World

from reefmatch.components.level_config import LevelConfig
from reefmatch.components.run_state import Phase, RunState
from reefmatch.components.skin import Skin
from reefmatch.events.bus import (
    EVENT_CASCADE_COMPLETE,
    EVENT_GAME_OVER,
    EVENT_LEVEL_COMPLETE,
    EVENT_LEVEL_STARTED,
    EVENT_MOVES_CHANGED,
    EVENT_SCORE_CHANGED,
    EVENT_TILE_SWAP_FINALIZE,
    EVENT_TILE_SWAP_VALID,
    EventBus,
)
from reefmatch.utils.run_state import get_or_create_run_state, set_phase

logger = logging.getLogger(__name__)


class LevelSystem:
    """Tracks one level attempt from the ready gate to LEVEL_COMPLETE or GAME_OVER.

    Flow:
      - begin_level resets the run and parks it in IDLE until open_gate.
      - A valid swap arrives already RESOLVING; it resets the combo, consumes
        a move and hands over to the cascade loop.
      - When the cascade settles the target score is checked before the move
        budget, so a last-move completion still counts as a win.
    """

    def __init__(self, world: World, event_bus: EventBus, *, final_level: int):
        self.world = world
        self.event_bus = event_bus
        self.final_level = final_level
        self.event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_valid)
        self.event_bus.subscribe(EVENT_CASCADE_COMPLETE, self.on_cascade_complete)

    def _state(self) -> RunState:
        return get_or_create_run_state(self.world)

    def begin_level(self, config: LevelConfig, skin: Skin) -> None:
        state = self._state()
        state.level = config.level
        state.target_score = config.target_score
        state.score = 0
        state.combo = 0
        state.cascade_depth = 0
        state.moves_left = config.moves_allowed
        set_phase(self.world, self.event_bus, Phase.IDLE)
        logger.info(
            "level %d started: %d moves, target %d, skin %s",
            config.level, config.moves_allowed, config.target_score, skin.name,
        )
        self.event_bus.emit(
            EVENT_LEVEL_STARTED,
            level=config.level,
            moves=config.moves_allowed,
            target_score=config.target_score,
            skin=skin.name,
        )
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=0, combo=0)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_left=state.moves_left)

    def open_gate(self) -> bool:
        if self._state().phase != Phase.IDLE:
            return False
        set_phase(self.world, self.event_bus, Phase.AWAITING_INPUT)
        return True

    def accepts_input(self) -> bool:
        return self._state().phase == Phase.AWAITING_INPUT

    def on_swap_valid(self, sender, **payload):
        state = self._state()
        # MatchSystem has already locked input for this move.
        if state.phase != Phase.RESOLVING:
            return
        state.combo = 0
        state.moves_left = max(0, state.moves_left - 1)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_left=state.moves_left)
        self.event_bus.emit(EVENT_TILE_SWAP_FINALIZE, src=payload.get('src'), dst=payload.get('dst'))

    def on_cascade_complete(self, sender, **payload):
        state = self._state()
        if state.phase != Phase.RESOLVING:
            return
        if state.score >= state.target_score:
            set_phase(self.world, self.event_bus, Phase.LEVEL_COMPLETE)
            is_final = state.level >= self.final_level
            logger.info("level %d complete with %d points", state.level, state.score)
            self.event_bus.emit(EVENT_LEVEL_COMPLETE, level=state.level, score=state.score, is_final_level=is_final)
        elif state.moves_left <= 0:
            set_phase(self.world, self.event_bus, Phase.GAME_OVER)
            logger.info("level %d failed with %d/%d points", state.level, state.score, state.target_score)
            self.event_bus.emit(EVENT_GAME_OVER, level=state.level, score=state.score)
        else:
            set_phase(self.world, self.event_bus, Phase.AWAITING_INPUT)
