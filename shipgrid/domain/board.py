from dataclasses import dataclass, field
from typing import List, Set, Tuple

from .geometry import Pos2, Vec2
from .ship import Ship

PlacedShip = Tuple[Pos2, Ship]


@dataclass
class Board:
    """A placed layout: ships at positions, the playable cells, and the shots fired.

    Nothing is validated here; overlap and bounds checks belong to the builder.
    """

    ships: List[PlacedShip] = field(default_factory=list)
    shape: List[Pos2] = field(default_factory=list)
    shots: List[Pos2] = field(default_factory=list)

    def size(self) -> Vec2:
        max_x = 0
        max_y = 0
        for pos in self.shape:
            if pos.x > max_x:
                max_x = pos.x
            if pos.y > max_y:
                max_y = pos.y
        return Vec2(max_x, max_y)

    def get_grid(self) -> List[Pos2]:
        """Every occupied cell; overlapping ships yield the cell more than once."""
        return [pos.offset(vec) for pos, ship in self.ships for vec in ship.shape]

    def occupied_cells(self) -> Set[Pos2]:
        return set(self.get_grid())

    def is_hit(self, pos: Pos2) -> bool:
        return pos in self.occupied_cells()

    def hits(self) -> List[Pos2]:
        occupied = self.occupied_cells()
        return _unique(p for p in self.shots if p in occupied)

    def misses(self) -> List[Pos2]:
        occupied = self.occupied_cells()
        return _unique(p for p in self.shots if p not in occupied)

    def get_completion(self) -> float:
        """Fraction of occupied cells that have been shot, in [0, 1]."""
        to_hit = self.occupied_cells()
        if not to_hit:
            return 0.0
        hit = {p for p in self.shots if p in to_hit}
        return min(1.0, len(hit) / len(to_hit))

    def is_complete(self) -> bool:
        return bool(self.ships) and self.get_completion() >= 1.0

    def with_shot(self, pos: Pos2) -> "Board":
        return Board(list(self.ships), list(self.shape), self.shots + [pos])


def _unique(cells) -> List[Pos2]:
    out: List[Pos2] = []
    seen = set()
    for c in cells:
        if c in seen:
            continue
        seen.add(c)
        out.append(c)
    return out
