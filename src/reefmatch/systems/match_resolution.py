import logging
from typing import List

from esper import World

from reefmatch.constants import COMBO_CAP, POINTS_PER_TILE
from reefmatch.events.bus import (EventBus, EVENT_TILE_SWAP_FINALIZE, EVENT_MATCH_FOUND,
                                  EVENT_MATCH_CLEARED, EVENT_GRAVITY_APPLIED, EVENT_REFILL_COMPLETED,
                                  EVENT_CASCADE_STEP, EVENT_CASCADE_COMPLETE, EVENT_SCORE_CHANGED)
from reefmatch.systems.board_ops import apply_gravity, clear_tiles, find_all_matches, refill_empty_tiles
from reefmatch.utils.run_state import get_or_create_run_state
from reefmatch.utils.tile_source import TileSource

logger = logging.getLogger(__name__)


def batch_points(size: int, combo: int) -> int:
    return size * POINTS_PER_TILE * min(combo, COMBO_CAP)


class MatchResolutionSystem:
    """Runs the cascade loop after an accepted swap.

    Each pass clears every live match, scores it with the current combo,
    drops the remaining tiles and refills the gaps. The loop only stops on a
    board with no matches; refill-driven chains are never capped.
    """

    def __init__(self, world: World, event_bus: EventBus, tile_source: TileSource):
        self.world = world
        self.event_bus = event_bus
        self.tile_source = tile_source
        self.event_bus.subscribe(EVENT_TILE_SWAP_FINALIZE, self.on_swap_finalize)

    def on_swap_finalize(self, sender, **kwargs):
        self.resolve()

    def resolve(self) -> List[int]:
        """Resolve to a stable board; returns the size of every cleared batch in order."""
        state = get_or_create_run_state(self.world)
        state.cascade_depth = 0
        batches: List[int] = []
        while True:
            matched = find_all_matches(self.world)
            if not matched:
                break
            state.combo += 1
            state.cascade_depth += 1
            positions = sorted(matched)
            points = batch_points(len(positions), state.combo)
            state.score += points
            batches.append(len(positions))
            self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), combo=state.combo)
            self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=points, combo=state.combo)

            cleared = clear_tiles(self.world, positions)
            self.event_bus.emit(EVENT_MATCH_CLEARED, positions=positions, types=cleared)
            moves = apply_gravity(self.world)
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=moves)
            spawns = refill_empty_tiles(self.world, self.tile_source)
            self.event_bus.emit(EVENT_REFILL_COMPLETED, spawns=spawns)
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=state.cascade_depth, positions=positions, points=points)
        if batches:
            logger.debug("cascade settled after %d batch(es): %s", len(batches), batches)
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=state.cascade_depth, batches=batches)
        return batches
