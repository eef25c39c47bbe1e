import logging
from typing import Tuple

from esper import World

from reefmatch.components.run_state import Phase
from reefmatch.events.bus import EventBus, EVENT_TILE_SWAP_REQUEST, EVENT_TILE_SWAP_VALID, EVENT_TILE_SWAP_INVALID
from reefmatch.systems.board_ops import is_adjacent, matches_at, swap_tile_types
from reefmatch.utils.run_state import get_or_create_run_state, set_phase

logger = logging.getLogger(__name__)


class MatchSystem:
    """Validates swap requests: adjacent, and the swap leaves a match at either end."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        # Input is locked outside AWAITING_INPUT.
        if get_or_create_run_state(self.world).phase != Phase.AWAITING_INPUT:
            return
        src, dst = tuple(src), tuple(dst)
        if not is_adjacent(src, dst):
            self._reject(src, dst, 'not_adjacent')
            return
        if not swap_tile_types(self.world, src, dst):
            self._reject(src, dst, 'off_board')
            return
        if self.creates_match(src, dst):
            # Lock input before anyone hears about the move.
            set_phase(self.world, self.event_bus, Phase.RESOLVING)
            self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
            return
        # Revert; a rejected move leaves the board untouched.
        swap_tile_types(self.world, src, dst)
        self._reject(src, dst, 'no_match')

    def creates_match(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        return bool(matches_at(self.world, a) or matches_at(self.world, b))

    def _reject(self, src, dst, reason: str):
        logger.debug("swap %s <-> %s rejected: %s", src, dst, reason)
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=reason)
