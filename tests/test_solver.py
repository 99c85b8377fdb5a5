import unittest

from trichromino.core.constants import BaseShade, Shade
from trichromino.engine.generator import GeneratorConfig, PuzzleGenerator
from trichromino.engine.grid import GameGrid
from trichromino.engine.piece import Piece
from trichromino.engine.solver import solve_placements


E, W, B, G, T = Shade.EMPTY, Shade.WHITE, Shade.BLACK, Shade.GRAY, Shade.TRAP


def white(*cells):
    return Piece.from_cells(list(cells), BaseShade.WHITE)


def black(*cells):
    return Piece.from_cells(list(cells), BaseShade.BLACK)


class SolverTests(unittest.TestCase):
    def test_reproduces_generated_puzzle(self) -> None:
        puzzle = PuzzleGenerator(GeneratorConfig(height=7, width=7, seed=17)).generate(trapped=True)
        pieces = [node.piece for node in puzzle.nodes]
        anchors = solve_placements(puzzle.grid, pieces, puzzle.solution)
        self.assertIsNotNone(anchors)

        grid = puzzle.grid.empty_copy()
        for piece, anchor in zip(pieces, anchors):
            grid.add_piece(piece, anchor)
        self.assertTrue(grid.matches(puzzle.solution))

    def test_unique_small_solution(self) -> None:
        grid = GameGrid(3, 3)
        solution = [
            [W, E, E],
            [G, G, E],
            [E, E, T],
        ]
        anchors = solve_placements(grid, [white((0, 0), (1, 0)), black((0, 0))], solution)
        self.assertEqual(anchors, [(0, 0), (1, 1)])

    def test_shape_that_cannot_fit(self) -> None:
        grid = GameGrid(2, 2)
        solution = [[W, W], [E, E]]
        self.assertIsNone(solve_placements(grid, [white((0, 0), (1, 0))], solution))

    def test_shading_that_cannot_be_produced(self) -> None:
        grid = GameGrid(1, 2)
        solution = [[G, G]]
        self.assertIsNone(solve_placements(grid, [white((0, 0)), white((0, 0))], solution))

    def test_flipped_shade(self) -> None:
        grid = GameGrid(1, 3)
        solution = [[G, B, G]]
        pieces = [black((0, 0)), white((0, 0)), black((0, 0))]
        anchors = solve_placements(grid, pieces, solution)
        self.assertIsNotNone(anchors)
        self.assertEqual(anchors[1], (0, 1))
        self.assertEqual(sorted([anchors[0], anchors[2]]), [(0, 0), (0, 2)])

    def test_shape_mismatch(self) -> None:
        with self.assertRaises(ValueError):
            solve_placements(GameGrid(2, 2), [white((0, 0))], [[W, E]])

    def test_no_pieces(self) -> None:
        grid = GameGrid(1, 2)
        self.assertEqual(solve_placements(grid, [], [[E, T]]), [])
        self.assertIsNone(solve_placements(grid, [], [[W, E]]))


if __name__ == "__main__":
    unittest.main()
