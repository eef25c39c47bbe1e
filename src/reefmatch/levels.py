"""Level table: move budget and target score for each level number."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Mapping

from reefmatch.components.level_config import LevelConfig
from reefmatch.constants import DEFAULT_LEVEL

logger = logging.getLogger(__name__)

LevelTable = Mapping[int, LevelConfig]

# level -> (moves, target score)
_DEFAULT_LEVELS = {
    1: (30, 500),
    2: (28, 800),
    3: (26, 1200),
    4: (24, 1600),
    5: (22, 2000),
    6: (20, 2500),
    7: (18, 3000),
    8: (16, 3500),
    9: (14, 4000),
    10: (12, 5000),
}


def default_level_table() -> Dict[int, LevelConfig]:
    return {
        level: LevelConfig(level=level, moves_allowed=moves, target_score=target)
        for level, (moves, target) in _DEFAULT_LEVELS.items()
    }


def build_level_table(entries: Mapping) -> Dict[int, LevelConfig]:
    """Build a table from ``{level: {"moves": int, "targetScore": int}}`` style data.

    Keys may be strings (as they are in JSON). ``moves_allowed`` and
    ``target_score`` are accepted as aliases.
    """
    if not entries:
        raise ValueError("level table must contain at least one level")
    table: Dict[int, LevelConfig] = {}
    for key, raw in entries.items():
        try:
            level = int(key)
            moves = int(raw.get("moves", raw.get("moves_allowed")))
            target = int(raw.get("targetScore", raw.get("target_score")))
        except (AttributeError, TypeError, ValueError) as exc:
            raise ValueError(f"malformed level entry {key!r}: {raw!r}") from exc
        table[level] = LevelConfig(level=level, moves_allowed=moves, target_score=target)
    if DEFAULT_LEVEL not in table:
        raise ValueError(f"level table must define level {DEFAULT_LEVEL}")
    return dict(sorted(table.items()))


def load_level_table(path: Path | str) -> Dict[int, LevelConfig]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path}: not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: expected an object keyed by level number")
    return build_level_table(payload)


def resolve_level(table: LevelTable, level: int) -> LevelConfig:
    """Return the config for ``level``, falling back to level 1 when it is missing."""
    config = table.get(level)
    if config is not None:
        return config
    logger.info("no config for level %r, falling back to level %d", level, DEFAULT_LEVEL)
    return table[DEFAULT_LEVEL]


def final_level(table: LevelTable) -> int:
    return max(table)
