import unittest

from shipgrid.domain.geometry import Pos2
from shipgrid.domain.ship import Ship
from shipgrid.layouts.placements import CellIndex, generate_ship_placements


def _rect(width, height):
    return [Pos2(x, y) for y in range(height) for x in range(width)]


class CellIndexTests(unittest.TestCase):
    def test_mask_round_trip(self):
        index = CellIndex(_rect(3, 3))
        cells = [Pos2(0, 0), Pos2(2, 1)]
        self.assertEqual(sorted(index.cells_of(index.mask(cells))), sorted(cells))
        self.assertEqual(index.mask([Pos2(9, 9)]), 0)
        self.assertEqual(len(index), 9)


class ShipPlacementTests(unittest.TestCase):
    def test_l_tromino_on_three_by_three(self):
        index = CellIndex(_rect(3, 3))
        placements = generate_ship_placements(Ship([(0, 0), (1, 0), (0, 1)]), 0, index)
        # 4 orientations x 4 bounding boxes
        self.assertEqual(len(placements), 16)
        self.assertEqual(len({p.mask for p in placements}), 16)

    def test_halo_covers_neighbours(self):
        index = CellIndex(_rect(3, 3))
        placements = generate_ship_placements(Ship.line(1), 0, index, whitespace=1)
        centre = next(p for p in placements if p.cells == (Pos2(1, 1),))
        self.assertEqual(centre.halo_mask, index.mask(_rect(3, 3)))
        corner = next(p for p in placements if p.cells == (Pos2(0, 0),))
        self.assertEqual(sorted(index.cells_of(corner.halo_mask)), [
            Pos2(0, 0), Pos2(0, 1), Pos2(1, 0), Pos2(1, 1),
        ])

    def test_forbidden_cells(self):
        index = CellIndex(_rect(3, 1))
        placements = generate_ship_placements(
            Ship.line(2), 0, index, forbidden_mask=index.mask([Pos2(2, 0)])
        )
        self.assertEqual([p.cells for p in placements], [(Pos2(0, 0), Pos2(1, 0))])


if __name__ == "__main__":
    unittest.main()
