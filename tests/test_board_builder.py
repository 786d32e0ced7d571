import multiprocessing as mp
import random
import unittest

from shipgrid.domain.geometry import Pos2
from shipgrid.domain.heatmap import HeatMap
from shipgrid.domain.ship import Ship
from shipgrid.layouts.builder import BoardBuilder, enumerate_layouts, random_layout
from shipgrid.layouts.placements import CellIndex, generate_board_placements


def _rect(width, height):
    return [Pos2(x, y) for y in range(height) for x in range(width)]


def _cells(board):
    return [frozenset(ship.cells_at(pos)) for pos, ship in board.ships]


class BoardBuilderFluentTests(unittest.TestCase):
    def test_setters_chain(self):
        builder = BoardBuilder()
        same = (
            builder.set_ships([Ship.line(2)])
            .add_ship(Ship.line(3))
            .set_shape(_rect(4, 4))
            .set_whitespace(1)
            .set_rotations(False)
            .set_max_boards(10)
        )
        self.assertIs(same, builder)
        self.assertEqual([len(s) for s in builder.ships], [2, 3])
        self.assertEqual(len(builder.shape), 16)
        self.assertEqual(builder.whitespace, 1)
        self.assertFalse(builder.allow_rotations)
        self.assertEqual(builder.max_boards, 10)

    def test_ships_list_is_editable(self):
        builder = BoardBuilder([Ship.line(1)], _rect(3, 1))
        builder.ships.append(Ship.line(1))
        self.assertEqual(len(builder.build().boards), 6)

    def test_bad_settings(self):
        with self.assertRaises(ValueError):
            BoardBuilder().set_whitespace(-1)
        with self.assertRaises(ValueError):
            BoardBuilder().set_max_boards(0)


class BoardBuilderEnumerationTests(unittest.TestCase):
    def test_same_cells_from_different_rotations_count_once(self):
        result = BoardBuilder([Ship.line(2)], _rect(2, 1)).build()
        self.assertTrue(result.ok)
        self.assertEqual(len(result.boards), 1)
        self.assertEqual(set(result.boards[0].get_grid()), {Pos2(0, 0), Pos2(1, 0)})

    def test_two_dominoes_on_two_by_two(self):
        result = BoardBuilder([Ship.line(2), Ship.line(2)], _rect(2, 2)).build()
        self.assertEqual(len(result.boards), 4)
        for board in result.boards:
            self.assertEqual(len(board.occupied_cells()), 4)
            self.assertEqual(len(board.get_grid()), 4)

    def test_whitespace_counts_on_a_strip(self):
        ships = [Ship.line(1), Ship.line(1)]
        strip = _rect(5, 1)
        self.assertEqual(len(BoardBuilder(ships, strip, 0).build().boards), 20)
        self.assertEqual(len(BoardBuilder(ships, strip, 1).build().boards), 12)
        self.assertEqual(len(BoardBuilder(ships, strip, 2).build().boards), 6)

    def test_whitespace_is_chebyshev(self):
        ships = [Ship.line(1), Ship.line(1)]
        self.assertEqual(len(BoardBuilder(ships, _rect(2, 2), 0).build().boards), 12)
        result = BoardBuilder(ships, _rect(2, 2), 1).build()
        self.assertEqual(result.boards, [])
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].ship_index, 1)

    def test_ships_stay_within_shape(self):
        shape = [p for p in _rect(3, 3) if p != Pos2(1, 1)]
        result = BoardBuilder([Ship.line(3)], shape).build()
        self.assertEqual(len(result.boards), 4)
        for board in result.boards:
            self.assertTrue(board.occupied_cells() <= set(shape))

    def test_builder_order_is_kept(self):
        result = BoardBuilder([Ship.line(1), Ship.line(3)], _rect(4, 1)).build()
        self.assertEqual(len(result.boards), 2)
        for board in result.boards:
            self.assertEqual(len(board.ships[0][1]), 1)
            self.assertEqual(len(board.ships[1][1]), 3)
        self.assertEqual(
            sorted(_cells(b)[0] for b in result.boards),
            sorted([frozenset({Pos2(0, 0)}), frozenset({Pos2(3, 0)})]),
        )

    def test_rotations_can_be_disabled(self):
        column = _rect(1, 2)
        self.assertEqual(len(BoardBuilder([Ship.line(2)], column).build().boards), 1)
        result = BoardBuilder([Ship.line(2)], column).set_rotations(False).build()
        self.assertFalse(result.ok)
        self.assertEqual(result.errors[0].ship_index, 0)

    def test_no_ships_gives_one_empty_board(self):
        result = BoardBuilder([], _rect(2, 2)).build()
        self.assertEqual(len(result.boards), 1)
        self.assertEqual(result.boards[0].ships, [])


class BoardBuilderErrorTests(unittest.TestCase):
    def test_ship_too_big(self):
        big = Ship.line(5)
        result = BoardBuilder([Ship.line(1), big], _rect(3, 3)).build()
        self.assertFalse(result.ok)
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].ship_index, 1)
        self.assertIs(result.errors[0].ship, big)
        self.assertIn("ship #1", str(result.errors[0]))

    def test_hit_outside_shape(self):
        builder = BoardBuilder([Ship.line(1)], _rect(2, 2)).set_hits([Pos2(5, 5)])
        with self.assertRaises(ValueError):
            builder.build()

    def test_hit_and_miss_on_same_cell(self):
        builder = BoardBuilder([Ship.line(1)], _rect(2, 2))
        builder.set_hits([Pos2(0, 0)]).set_misses([Pos2(0, 0)])
        with self.assertRaises(ValueError):
            builder.build()

    def test_uncoverable_hits(self):
        builder = BoardBuilder([Ship.line(1)], _rect(3, 1)).set_hits([Pos2(0, 0), Pos2(2, 0)])
        result = builder.build()
        self.assertEqual(result.boards, [])
        self.assertIsNone(result.errors[0].ship_index)


class BoardBuilderShotTests(unittest.TestCase):
    def test_misses_exclude_cells(self):
        result = BoardBuilder([Ship.line(1)], _rect(3, 1)).set_misses([Pos2(1, 0)]).build()
        self.assertEqual(len(result.boards), 2)
        for board in result.boards:
            self.assertNotIn(Pos2(1, 0), board.occupied_cells())
            self.assertEqual(board.shots, [Pos2(1, 0)])

    def test_hits_must_be_covered(self):
        result = BoardBuilder([Ship.line(2)], _rect(3, 1)).set_hits([Pos2(0, 0)]).build()
        self.assertEqual(len(result.boards), 1)
        board = result.boards[0]
        self.assertEqual(board.occupied_cells(), {Pos2(0, 0), Pos2(1, 0)})
        self.assertEqual(board.get_completion(), 0.5)


class BoardBuilderLimitTests(unittest.TestCase):
    def test_truncation_is_flagged(self):
        ships = [Ship.line(1), Ship.line(1)]
        result = BoardBuilder(ships, _rect(5, 1)).set_max_boards(5).set_seed(3).build()
        self.assertEqual(len(result.boards), 5)
        self.assertTrue(result.truncated)
        self.assertTrue(result.sampled)
        self.assertTrue(result.ok)
        grids = [tuple(b.get_grid()) for b in result.boards]
        self.assertEqual(len(set(grids)), 5)

    def test_exact_limit_is_not_truncated(self):
        ships = [Ship.line(1), Ship.line(1)]
        result = BoardBuilder(ships, _rect(5, 1)).set_max_boards(20).build()
        self.assertEqual(len(result.boards), 20)
        self.assertFalse(result.truncated)
        self.assertFalse(result.sampled)

    def test_truncated_heat_map_stays_symmetric(self):
        # 16 * 15 * 14 * 13 layouts; every cell is occupied in a quarter of them.
        ships = [Ship.line(1) for _ in range(4)]
        result = BoardBuilder(ships, _rect(4, 4)).set_max_boards(2000).set_seed(7).build()
        self.assertTrue(result.truncated)
        self.assertTrue(result.sampled)
        self.assertEqual(len(result.boards), 2000)
        heat = HeatMap.from_boards(result.boards)
        self.assertLess(heat[Pos2(0, 0)], 0.5)
        for corner in (Pos2(0, 0), Pos2(3, 0), Pos2(0, 3), Pos2(3, 3)):
            self.assertAlmostEqual(heat[corner], 0.25, delta=0.06)

    def test_same_seed_same_boards(self):
        ships = [Ship.line(2), Ship.line(1)]

        def grids(seed):
            result = BoardBuilder(ships, _rect(6, 6)).set_max_boards(50).set_seed(seed).build()
            self.assertTrue(result.sampled)
            return [b.get_grid() for b in result.boards]

        self.assertEqual(grids(11), grids(11))

    def test_random_layout_respects_whitespace_and_hits(self):
        ships = [Ship.line(2), Ship.line(2)]
        index = CellIndex(_rect(5, 5))
        placements = generate_board_placements(ships, index, whitespace=1)
        order = [0, 1]
        hit_mask = index.mask([Pos2(2, 2)])
        rng = random.Random(5)
        drawn = [random_layout(placements, order, hit_mask, rng) for _ in range(200)]
        layouts = [layout for layout in drawn if layout is not None]
        self.assertTrue(layouts)
        for layout in layouts:
            a = placements[0][layout[0]]
            b = placements[1][layout[1]]
            self.assertFalse(a.halo_mask & b.mask)
            self.assertTrue((a.mask | b.mask) & hit_mask)

    def test_shared_counter_caps_total_across_searches(self):
        ships = [Ship.line(1), Ship.line(1)]
        placements = generate_board_placements(ships, CellIndex(_rect(9, 9)))
        counter = mp.Value("i", 0)
        first, _, first_truncated = enumerate_layouts(
            placements, [0, 1], 0, 100, first_choices=range(0, 40), shared_count=counter
        )
        second, _, second_truncated = enumerate_layouts(
            placements, [0, 1], 0, 100, first_choices=range(40, 81), shared_count=counter
        )
        self.assertEqual(len(first) + len(second), 100)
        self.assertEqual(counter.value, 100)
        self.assertTrue(first_truncated)
        self.assertTrue(second_truncated)
        self.assertEqual(second, [])

    def test_parallel_truncated_build_keeps_limit(self):
        ships = [Ship.line(1), Ship.line(1)]
        result = BoardBuilder(ships, _rect(9, 9)).set_workers(2).set_max_boards(300).set_seed(1).build()
        self.assertTrue(result.truncated)
        self.assertEqual(len(result.boards), 300)

    def test_parallel_matches_serial(self):
        ships = [Ship.line(1), Ship.line(1)]
        serial = BoardBuilder(ships, _rect(9, 9)).set_workers(1).build()
        parallel = BoardBuilder(ships, _rect(9, 9)).set_workers(2).build()
        self.assertEqual(len(serial.boards), 81 * 80)
        self.assertEqual(
            [b.get_grid() for b in serial.boards],
            [b.get_grid() for b in parallel.boards],
        )


if __name__ == "__main__":
    unittest.main()
