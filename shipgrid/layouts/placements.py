from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from shipgrid.domain.geometry import Pos2
from shipgrid.domain.ship import Ship


@dataclass(frozen=True)
class LayoutPlacement:
    ship_index: int
    anchor: Pos2
    angle: int
    ship: Ship
    cells: Tuple[Pos2, ...]
    mask: int
    halo_mask: int


class CellIndex:
    """Bit positions for the playable cells of a board shape."""

    def __init__(self, shape: Iterable[Pos2]):
        self.cells: Tuple[Pos2, ...] = tuple(sorted(set(shape)))
        self._bits: Dict[Pos2, int] = {pos: i for i, pos in enumerate(self.cells)}

    def __contains__(self, pos: Pos2) -> bool:
        return pos in self._bits

    def __len__(self) -> int:
        return len(self.cells)

    def bit(self, pos: Pos2) -> int:
        return self._bits[pos]

    def mask(self, cells: Iterable[Pos2]) -> int:
        m = 0
        for pos in cells:
            if pos in self._bits:
                m |= 1 << self._bits[pos]
        return m

    def cells_of(self, mask: int) -> List[Pos2]:
        out = []
        idx = 0
        while mask:
            if mask & 1:
                out.append(self.cells[idx])
            mask >>= 1
            idx += 1
        return out


def _halo_mask(cells: Iterable[Pos2], whitespace: int, index: CellIndex) -> int:
    """Cells within Chebyshev distance `whitespace` of any of `cells`."""
    mask = 0
    for pos in cells:
        for dx in range(-whitespace, whitespace + 1):
            for dy in range(-whitespace, whitespace + 1):
                x = pos.x + dx
                y = pos.y + dy
                if x < 0 or y < 0:
                    continue
                near = Pos2(x, y)
                if near in index:
                    mask |= 1 << index.bit(near)
    return mask


def _orientations(ship: Ship, allow_rotations: bool) -> Dict[int, Ship]:
    if not allow_rotations:
        return {0: Ship(list(ship.shape))}
    return ship.distinct_rotations()


def _place(anchor: Pos2, ship: Ship, index: CellIndex):
    cells = []
    for vec in ship.shape:
        x = anchor.x + vec.x
        y = anchor.y + vec.y
        if x < 0 or y < 0:
            return None
        pos = Pos2(x, y)
        if pos not in index:
            return None
        cells.append(pos)
    return tuple(cells)


def generate_ship_placements(
    ship: Ship,
    ship_index: int,
    index: CellIndex,
    whitespace: int = 0,
    allow_rotations: bool = True,
    forbidden_mask: int = 0,
) -> List[LayoutPlacement]:
    """Every way to put one ship inside the board shape.

    Placements covering the same cells are collapsed to the first one found
    (by rotation angle, then anchor position).
    """
    placements: List[LayoutPlacement] = []
    seen = set()
    for angle, oriented in _orientations(ship, allow_rotations).items():
        for anchor in index.cells:
            cells = _place(anchor, oriented, index)
            if cells is None:
                continue
            mask = index.mask(cells)
            if mask & forbidden_mask:
                continue
            if mask in seen:
                continue
            seen.add(mask)
            halo = _halo_mask(cells, whitespace, index) if whitespace > 0 else mask
            placements.append(LayoutPlacement(ship_index, anchor, angle, oriented, cells, mask, halo))
    return placements


def generate_board_placements(
    ships: Sequence[Ship],
    index: CellIndex,
    whitespace: int = 0,
    allow_rotations: bool = True,
    forbidden_mask: int = 0,
) -> List[List[LayoutPlacement]]:
    return [
        generate_ship_placements(ship, i, index, whitespace, allow_rotations, forbidden_mask)
        for i, ship in enumerate(ships)
    ]
