"""Match-3 grid engine: swap validation, cascade resolution, scoring and level progression."""
from reefmatch.components.level_config import LevelConfig
from reefmatch.components.run_state import Phase, RunState
from reefmatch.components.skin import SKINS, Skin
from reefmatch.engine import MatchEngine
from reefmatch.levels import default_level_table, load_level_table
from reefmatch.utils.tile_source import RandomTileSource

__all__ = [
    "LevelConfig",
    "MatchEngine",
    "Phase",
    "RandomTileSource",
    "RunState",
    "SKINS",
    "Skin",
    "default_level_table",
    "load_level_table",
]
