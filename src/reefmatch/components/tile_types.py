from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple, List

@dataclass(slots=True)
class TileTypes:
    """Palette definitions stored on a single entity.

    types maps a color name to its RGB triple; spawnable is the ordered subset
    the tile source may draw from.
    """
    types: Dict[str, Tuple[int,int,int]]
    spawnable: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.types:
            raise ValueError("palette must define at least one tile type")
        if self.spawnable:
            self.set_spawnable(self.spawnable)
        else:
            self.spawnable = list(self.types.keys())

    def spawnable_types(self) -> List[str]:
        return list(self.spawnable)

    def set_spawnable(self, type_names: Iterable[str]) -> None:
        # Preserve order while filtering unknown and duplicate names.
        seen: set[str] = set()
        filtered: List[str] = []
        for name in type_names:
            if name in self.types and name not in seen:
                filtered.append(name)
                seen.add(name)
        self.spawnable = filtered or list(self.types.keys())
