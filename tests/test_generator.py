import random
import unittest

from trichromino.core.constants import BaseShade, Shade
from trichromino.core.exceptions import GenerationError
from trichromino.engine.generator import (
    GeneratorConfig,
    PuzzleGenerator,
    build_piece,
    find_root,
    grow_polyomino,
    target_size,
)
from trichromino.engine.grid import GameGrid


class GeneratorConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = GeneratorConfig()
        self.assertEqual((config.height, config.width), (10, 10))
        self.assertEqual((config.min_traps, config.max_traps), (6, 9))
        self.assertEqual(config.min_piece_size, 3)

    def test_rejects_inverted_trap_range(self) -> None:
        with self.assertRaises(ValueError):
            GeneratorConfig(min_traps=5, max_traps=2)

    def test_rejects_bad_dimensions(self) -> None:
        with self.assertRaises(ValueError):
            GeneratorConfig(height=0)


class GrowthHelperTests(unittest.TestCase):
    def test_target_size(self) -> None:
        self.assertEqual(target_size(100), 16)
        self.assertEqual(target_size(20), 3)
        self.assertEqual(target_size(15), 3)
        self.assertEqual(target_size(100, 4), 16)
        self.assertEqual(target_size(20, 4), 4)
        self.assertEqual(target_size(15, 5), 5)

    def test_find_root_on_full_grid(self) -> None:
        grid = GameGrid(2, 2)
        for r in range(2):
            for c in range(2):
                grid.set_black(r, c)
        self.assertIsNone(find_root(grid, random.Random(1)))

    def test_find_root_returns_branch_point(self) -> None:
        grid = GameGrid(4, 4)
        grid.set_white(0, 1)
        grid.set_white(1, 0)
        for seed in range(10):
            root = find_root(grid, random.Random(seed))
            self.assertIsNotNone(root)
            self.assertTrue(grid.is_branch_point(*root))

    def test_find_root_skips_small_regions(self) -> None:
        grid = GameGrid(3, 3)
        for r in range(3):
            for c in range(3):
                if (r, c) not in ((0, 0), (0, 1), (1, 0)):
                    grid.set_black(r, c)
        self.assertEqual(find_root(grid, random.Random(3)), (0, 0))
        self.assertIsNone(find_root(grid, random.Random(3), min_size=4))

    def test_grow_polyomino_is_connected_and_pure(self) -> None:
        grid = GameGrid(5, 5)
        grid.set_black(2, 3)
        before = grid.to_jsonable()
        growth = grow_polyomino(grid, (2, 2), 6, random.Random(4))

        self.assertEqual(grid.to_jsonable(), before)
        self.assertGreaterEqual(len(growth), 3)
        self.assertLessEqual(len(growth), 6)
        self.assertEqual(growth.cells[0], (2, 2))
        self.assertEqual(len(set(growth.cells)), len(growth.cells))
        for row, col in growth.cells:
            self.assertTrue(grid.is_empty_square(row, col))
        for cell in growth.cells[1:]:
            earlier = growth.cells[: growth.cells.index(cell)]
            self.assertTrue(
                any(abs(cell[0] - r) + abs(cell[1] - c) == 1 for r, c in earlier)
            )
        self.assertEqual(growth.origin, (min(r for r, _ in growth.cells), min(c for _, c in growth.cells)))

    def test_grow_polyomino_same_seed_same_cells(self) -> None:
        grid = GameGrid(6, 6)
        first = grow_polyomino(grid, (3, 3), 8, random.Random(11))
        second = grow_polyomino(grid, (3, 3), 8, random.Random(11))
        self.assertEqual(first.cells, second.cells)

    def test_build_piece_is_cropped(self) -> None:
        grid = GameGrid(5, 5)
        growth = grow_polyomino(grid, (2, 2), 5, random.Random(2))
        piece = build_piece(growth, BaseShade.BLACK)
        self.assertTrue(piece.sealed)
        self.assertEqual(piece.num_squares, len(growth))
        self.assertEqual(piece.crop(), piece)


class PuzzleGeneratorTests(unittest.TestCase):
    def test_easy_grid_completes_with_large_pieces(self) -> None:
        for seed in range(5):
            generator = PuzzleGenerator(GeneratorConfig(seed=seed))
            grid = generator.easy_grid(GameGrid(10, 10))
            self.assertTrue(grid.is_complete())
            self.assertTrue(grid.nodes)
            for node in grid.nodes:
                self.assertGreaterEqual(node.piece.num_squares, 3)

    def test_larger_minimum_piece_size(self) -> None:
        for seed in range(3):
            generator = PuzzleGenerator(GeneratorConfig(seed=seed, min_piece_size=4))
            grid = generator.easy_grid(GameGrid(10, 10))
            self.assertTrue(grid.nodes)
            for node in grid.nodes:
                self.assertGreaterEqual(node.piece.num_squares, 4)
            self.assertTrue(
                grid.is_complete() or find_root(grid, random.Random(seed), 4) is None
            )

    def test_pieces_alternate_colors(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=21))
        grid = generator.easy_grid(GameGrid(10, 10))
        colors = [node.piece.color for node in grid.nodes]
        for index, color in enumerate(colors):
            expected = BaseShade.WHITE if index % 2 == 0 else BaseShade.BLACK
            self.assertEqual(color, expected)

    def test_same_seed_same_puzzle(self) -> None:
        first = PuzzleGenerator(GeneratorConfig(seed=42)).generate(trapped=True)
        second = PuzzleGenerator(GeneratorConfig(seed=42)).generate(trapped=True)
        self.assertEqual(first.solution, second.solution)
        self.assertEqual(
            [node.piece for node in first.nodes],
            [node.piece for node in second.nodes],
        )
        self.assertEqual(first.grid.traps(), second.grid.traps())

    def test_generate_hands_off_unplaced_pieces(self) -> None:
        puzzle = PuzzleGenerator(GeneratorConfig(height=8, width=8, seed=5)).generate()
        self.assertEqual(puzzle.seed, 5)
        self.assertEqual(puzzle.grid.num_empty(), 64)
        self.assertEqual(puzzle.grid.nodes, [])
        self.assertEqual(len(puzzle.solution), 8)
        self.assertTrue(all(len(line) == 8 for line in puzzle.solution))
        for node in puzzle.nodes:
            self.assertFalse(node.placed)
            self.assertEqual(node.position, (0, 0))
        self.assertTrue(any(shade != Shade.EMPTY for line in puzzle.solution for shade in line))

    def test_trapped_grid_scatters_traps(self) -> None:
        puzzle = PuzzleGenerator(GeneratorConfig(seed=9)).generate(trapped=True)
        self.assertGreaterEqual(len(puzzle.grid.traps()), 6)
        self.assertLessEqual(len(puzzle.grid.traps()), 9)

    def test_short_growth_is_discarded_without_color_flip(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=0))
        grid = GameGrid(3, 3)
        node = generator.create_polyomino(grid, (0, 0), 2)
        self.assertIsNone(node)
        self.assertEqual(generator.discarded, 1)
        self.assertEqual(generator.color, BaseShade.WHITE)
        self.assertEqual(grid.num_empty(), 9)

    def test_attempt_budget(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=1, max_growth_attempts=1))
        with self.assertRaises(GenerationError):
            generator.easy_grid(GameGrid(10, 10))


if __name__ == "__main__":
    unittest.main()
