from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from esper import World

from reefmatch.components.active_switch import ActiveSwitch
from reefmatch.components.board import Board
from reefmatch.components.board_position import BoardPosition
from reefmatch.components.tile import TileType
from reefmatch.components.tile_type_registry import TileTypeRegistry
from reefmatch.components.tile_types import TileTypes
from reefmatch.constants import MATCH_MIN, REPAIR_MAX_ITERATIONS
from reefmatch.utils.tile_source import TileSource

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
TypeEntry = Tuple[int, int, str]
Cell = Tuple[TileType, ActiveSwitch]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    type_name: str


@dataclass(slots=True)
class RefillSpawn:
    """A tile created by refill.

    entry_offset counts tile heights above the board the tile starts from:
    1 for the lowest new tile of a column, growing upwards.
    """
    position: Position
    type_name: str
    entry_offset: int


def get_tile_registry(world: World) -> TileTypes:
    for entity, _ in world.get_component(TileTypeRegistry):
        return world.component_for_entity(entity, TileTypes)
    raise RuntimeError("TileTypes definitions not found")


def board_dimensions(world: World) -> Tuple[int, int]:
    for _, board in world.get_component(Board):
        return board.rows, board.cols
    raise RuntimeError("Board not found")


def _cells(world: World) -> Dict[Position, Cell]:
    return {
        (position.row, position.col): (tile, switch)
        for _, (position, tile, switch) in world.get_components(BoardPosition, TileType, ActiveSwitch)
    }


def is_adjacent(a: Position, b: Position) -> bool:
    """True iff the Manhattan distance between a and b is exactly 1."""
    ar, ac = a
    br, bc = b
    return abs(ar - br) + abs(ac - bc) == 1


def active_tile_type_map(world: World) -> Dict[Position, str]:
    """Return mapping of occupied positions to their type names."""
    return {pos: tile.type_name for pos, (tile, switch) in _cells(world).items() if switch.active}


def tile_type_grid(world: World) -> List[List[Optional[str]]]:
    """Snapshot the board as rows of type names, None for empty cells."""
    rows, cols = board_dimensions(world)
    types = active_tile_type_map(world)
    return [[types.get((r, c)) for c in range(cols)] for r in range(rows)]


def apply_layout(world: World, layout: Sequence[Sequence[Optional[str]]]) -> None:
    """Overwrite the board with ``layout`` (rows of type names, None leaves a cell empty)."""
    rows, cols = board_dimensions(world)
    if len(layout) != rows or any(len(line) != cols for line in layout):
        raise ValueError(f"layout shape does not match {rows}x{cols} board")
    cells = _cells(world)
    for r, line in enumerate(layout):
        for c, type_name in enumerate(line):
            tile, switch = cells[(r, c)]
            if type_name is None:
                switch.active = False
            else:
                tile.type_name = type_name
                switch.active = True


def _matches_in(types: Dict[Position, str], pos: Position) -> Set[Position]:
    row, col = pos
    tval = types.get(pos)
    if tval is None:
        return set()
    # Horizontal sweep
    h_run = [(row, col)]
    c_left = col - 1
    while types.get((row, c_left)) == tval:
        h_run.append((row, c_left))
        c_left -= 1
    c_right = col + 1
    while types.get((row, c_right)) == tval:
        h_run.append((row, c_right))
        c_right += 1
    # Vertical sweep
    v_run = [(row, col)]
    r_up = row - 1
    while types.get((r_up, col)) == tval:
        v_run.append((r_up, col))
        r_up -= 1
    r_down = row + 1
    while types.get((r_down, col)) == tval:
        v_run.append((r_down, col))
        r_down += 1
    # Either direction qualifying pulls in both runs (L/T/+ shapes).
    if len(h_run) >= MATCH_MIN or len(v_run) >= MATCH_MIN:
        return set(h_run) | set(v_run)
    return set()


def matches_at(world: World, pos: Position) -> Set[Position]:
    """Positions of the horizontal and vertical runs through pos, if either has length >= 3."""
    return _matches_in(active_tile_type_map(world), pos)


def _all_matches_in(types: Dict[Position, str]) -> Set[Position]:
    matched: Set[Position] = set()
    for pos in types:
        matched |= _matches_in(types, pos)
    return matched


def find_all_matches(world: World) -> Set[Position]:
    """Union of matches_at over every occupied cell."""
    return _all_matches_in(active_tile_type_map(world))


def swap_tile_types(world: World, src: Position, dst: Position) -> bool:
    """Swap the TileType values for two occupied cells. No match validation."""
    cells = _cells(world)
    if src not in cells or dst not in cells:
        return False
    src_tile, src_switch = cells[src]
    dst_tile, dst_switch = cells[dst]
    if not (src_switch.active and dst_switch.active):
        return False
    src_tile.type_name, dst_tile.type_name = dst_tile.type_name, src_tile.type_name
    return True


def clear_tiles(world: World, positions: Iterable[Position]) -> List[TypeEntry]:
    """Mark cells empty and return (row, col, type_name) for every tile removed."""
    cells = _cells(world)
    cleared: List[TypeEntry] = []
    for pos in sorted(positions):
        cell = cells.get(pos)
        if cell is None:
            continue
        tile, switch = cell
        if not switch.active:
            continue
        switch.active = False
        cleared.append((pos[0], pos[1], tile.type_name))
    return cleared


def apply_gravity(world: World) -> List[GravityMove]:
    """Compact each column towards the bottom row, preserving tile order."""
    rows, cols = board_dimensions(world)
    cells = _cells(world)
    moves: List[GravityMove] = []
    for col in range(cols):
        target_row = rows - 1
        for row in range(rows - 1, -1, -1):
            tile, switch = cells[(row, col)]
            if not switch.active:
                continue
            if row != target_row:
                dst_tile, dst_switch = cells[(target_row, col)]
                dst_tile.type_name = tile.type_name
                dst_switch.active = True
                switch.active = False
                moves.append(GravityMove(source=(row, col), target=(target_row, col), type_name=tile.type_name))
            target_row -= 1
    return moves


def refill_empty_tiles(world: World, source: TileSource) -> List[RefillSpawn]:
    """Fill every empty cell with an unconstrained color, bottom-up within each column."""
    rows, cols = board_dimensions(world)
    cells = _cells(world)
    spawned: List[RefillSpawn] = []
    for col in range(cols):
        offset = 0
        for row in range(rows - 1, -1, -1):
            tile, switch = cells[(row, col)]
            if switch.active:
                continue
            offset += 1
            tile.type_name = source.choose()
            switch.active = True
            spawned.append(RefillSpawn(position=(row, col), type_name=tile.type_name, entry_offset=offset))
    return spawned


def _neighbour_types(types: Dict[Position, str], pos: Position) -> Set[str]:
    row, col = pos
    around = ((row, col - 1), (row, col + 1), (row - 1, col), (row + 1, col))
    return {types[p] for p in around if p in types}


def repair_no_matches(
    world: World,
    source: TileSource,
    *,
    max_iterations: int = REPAIR_MAX_ITERATIONS,
) -> bool:
    """Recolor matched cells until the board holds no match or the sweep cap is hit.

    Each matched cell gets a color absent from its four direct neighbours when
    one exists. Returns True if the board ended match-free; on cap exhaustion
    the residual board is kept.
    """
    rows, cols = board_dimensions(world)
    cells = _cells(world)
    types = active_tile_type_map(world)
    for _ in range(max_iterations):
        changed = False
        for row in range(rows):
            for col in range(cols):
                pos = (row, col)
                if not _matches_in(types, pos):
                    continue
                new_type = source.choose(exclude=_neighbour_types(types, pos))
                cells[pos][0].type_name = new_type
                types[pos] = new_type
                changed = True
        if not changed:
            return True
    if _all_matches_in(types):
        logger.warning("board repair hit %d sweeps; accepting residual matches", max_iterations)
        return False
    return True
