from typing import List, Optional

from esper import World

from reefmatch.components.active_switch import ActiveSwitch
from reefmatch.components.board import Board
from reefmatch.components.board_position import BoardPosition
from reefmatch.components.tile import TileType
from reefmatch.constants import GRID_SIZE, REPAIR_MAX_ITERATIONS
from reefmatch.events.bus import EventBus, EVENT_BOARD_READY
from reefmatch.systems.board_ops import repair_no_matches, tile_type_grid
from reefmatch.utils.tile_source import TileSource


class BoardSystem:
    """Builds the cell entities for a fresh board and repairs it match-free."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        tile_source: TileSource,
        rows: int = GRID_SIZE,
        cols: int = GRID_SIZE,
        *,
        repair_iterations: int = REPAIR_MAX_ITERATIONS,
    ):
        if rows <= 0 or cols <= 0:
            raise ValueError(f"board dimensions must be positive, got {rows}x{cols}")
        self.world = world
        self.event_bus = event_bus
        self.tile_source = tile_source
        self.board_entity = self.world.create_entity(Board(rows=rows, cols=cols))
        self._init_board()
        self.repaired = repair_no_matches(self.world, self.tile_source, max_iterations=repair_iterations)
        self.event_bus.emit(EVENT_BOARD_READY, rows=rows, cols=cols, repaired=self.repaired)

    def _init_board(self):
        board: Board = self.world.component_for_entity(self.board_entity, Board)
        for r in range(board.rows):
            for c in range(board.cols):
                self.world.create_entity(
                    BoardPosition(row=r, col=c),
                    TileType(type_name=self.tile_source.choose()),
                    ActiveSwitch(active=True),
                )

    def snapshot(self) -> List[List[Optional[str]]]:
        return tile_type_grid(self.world)
