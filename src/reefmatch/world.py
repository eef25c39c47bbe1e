import random
from typing import Dict, Tuple

from esper import World

from reefmatch.components.level_config import LevelConfig
from reefmatch.components.run_state import RunState
from reefmatch.components.skin import Skin
from reefmatch.components.tile_type_registry import TileTypeRegistry
from reefmatch.components.tile_types import TileTypes
from reefmatch.constants import DEFAULT_PALETTE


def create_world(
    config: LevelConfig,
    skin: Skin,
    *,
    palette: Dict[str, Tuple[int, int, int]] | None = None,
    rng: random.Random | None = None,
) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())

    # Run resource: one entity carrying the level attempt's state and settings.
    world.create_entity(
        RunState(
            level=config.level,
            target_score=config.target_score,
            moves_left=config.moves_allowed,
        ),
        config,
        skin,
    )

    # Single registry entity holding the palette
    world.create_entity(
        TileTypeRegistry(),
        TileTypes(types=dict(palette or DEFAULT_PALETTE)),
    )
    return world
