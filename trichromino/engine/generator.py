"""Randomized polyomino packing of an empty grid.

Generation alternates white and black pieces. Each piece is grown from a
branch point by a breadth-first search that keeps a random subset of the
frontier at every step, so shapes come out irregular and branching:

  1. Root: scan row-major from a random start for an empty square with at
     least two empty neighbors.
  2. Growth: randomized BFS toward a target size of about a sixth of the
     remaining empty squares.
  3. Placement: growth results under three squares are dropped without a
     color flip; larger ones are cropped into a piece and added to the grid.

The loop stops when :meth:`GameGrid.is_complete` reports that further growth
is futile.
"""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Set

from ..core.constants import MIN_PIECE_SIZE, BaseShade, Shade, opposite_color
from ..core.exceptions import GenerationError
from ..core.models import PlacementNode, Position
from ..utils.logger import get_logger
from .grid import GameGrid
from .piece import Piece


LOGGER = get_logger(__name__)


@dataclass
class GeneratorConfig:
    height: int = 10
    width: int = 10
    seed: Optional[int] = None
    min_traps: int = 6
    max_traps: int = 9
    min_piece_size: int = MIN_PIECE_SIZE
    max_growth_attempts: int = 1000

    def __post_init__(self) -> None:
        if self.height <= 0 or self.width <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.height}x{self.width}")
        if not 0 <= self.min_traps <= self.max_traps:
            raise ValueError(
                f"Trap range must satisfy 0 <= min <= max, got {self.min_traps}..{self.max_traps}"
            )
        if self.min_piece_size < 1:
            raise ValueError("min_piece_size must be at least 1")
        if self.max_growth_attempts < 1:
            raise ValueError("max_growth_attempts must be at least 1")


@dataclass
class Growth:
    """Squares visited by one growth run, in visiting order."""

    cells: List[Position]
    min_row: int
    min_col: int

    @property
    def origin(self) -> Position:
        return (self.min_row, self.min_col)

    def __len__(self) -> int:
        return len(self.cells)


@dataclass
class GeneratedPuzzle:
    grid: GameGrid
    solution: List[List[Shade]]
    nodes: List[PlacementNode]
    seed: Optional[int] = None


# ----------------------------------------------------------------------
# Pure growth helpers
# ----------------------------------------------------------------------
def target_size(num_empty: int, min_size: int = MIN_PIECE_SIZE) -> int:
    """About a sixth of the remaining empty squares, never below ``min_size``."""

    if num_empty // 5 > 3:
        return max(num_empty // 6, min_size)
    return min_size


def find_root(
    grid: GameGrid, rng: random.Random, min_size: int = MIN_PIECE_SIZE
) -> Optional[Position]:
    """Return the first branch point scanning row-major from a random start.

    Branch points in an empty region smaller than ``min_size`` are skipped.
    """

    total = grid.height * grid.width
    start = rng.randrange(grid.height) * grid.width + rng.randrange(grid.width)
    for offset in range(total):
        row, col = divmod((start + offset) % total, grid.width)
        if grid.is_branch_point(row, col) and region_reaches(grid, (row, col), min_size):
            return row, col
    return None


def region_reaches(grid: GameGrid, root: Position, size: int) -> bool:
    """Whether the empty region around ``root`` has at least ``size`` squares."""

    seen: Set[Position] = {root}
    queue: Deque[Position] = deque([root])
    while queue and len(seen) < size:
        for point in grid.strict_adjacent_empty(*queue.popleft()):
            if point not in seen:
                seen.add(point)
                queue.append(point)
    return len(seen) >= size


def grow_polyomino(grid: GameGrid, root: Position, size: int, rng: random.Random) -> Growth:
    """Grow a connected set of empty squares from ``root`` by randomized BFS.

    At a square with more than two unvisited empty neighbors a random number
    of them (at least two, capped by the remaining budget) is taken; with two
    or fewer, all are taken if they fit and otherwise a random subset. The
    grid is only read.
    """

    visited: List[Position] = [root]
    seen: Set[Position] = {root}
    queue: Deque[Position] = deque([root])
    min_row, min_col = root

    def visit(point: Position) -> None:
        nonlocal min_row, min_col
        visited.append(point)
        seen.add(point)
        queue.append(point)
        min_row = min(min_row, point[0])
        min_col = min(min_col, point[1])

    while queue and len(visited) < size:
        current = queue.popleft()
        adjacent = [point for point in grid.strict_adjacent_empty(*current) if point not in seen]
        remaining = size - len(visited)

        if len(adjacent) > 2:
            count = min(rng.randint(2, len(adjacent)), remaining)
        else:
            count = min(len(adjacent), remaining)

        for _ in range(count):
            visit(adjacent.pop(rng.randrange(len(adjacent))))

    return Growth(cells=visited, min_row=min_row, min_col=min_col)


def build_piece(growth: Growth, color: BaseShade) -> Piece:
    """Translate a growth result by its origin and crop it into a sealed piece."""

    piece = Piece(
        max(c for _, c in growth.cells) - growth.min_col + 1,
        max(r for r, _ in growth.cells) - growth.min_row + 1,
        color,
    )
    for row, col in growth.cells:
        piece.add_square(row - growth.min_row, col - growth.min_col)
    return piece.crop()


# ----------------------------------------------------------------------
# Generator
# ----------------------------------------------------------------------
class PuzzleGenerator:
    """Packs grids with alternating-color polyominoes."""

    def __init__(self, config: Optional[GeneratorConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or GeneratorConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.color = BaseShade.WHITE
        self.discarded = 0

    def generate(self, trapped: bool = False) -> GeneratedPuzzle:
        """Pack a fresh grid, snapshot its evaluation and lift the pieces off."""

        grid = GameGrid(self.config.height, self.config.width)
        LOGGER.info(
            "Generating %dx%d puzzle (trapped=%s, seed=%s)",
            grid.height,
            grid.width,
            trapped,
            self.config.seed,
        )
        if trapped:
            self.trapped_grid(grid)
        else:
            self.easy_grid(grid)
        solution = grid.evaluate()
        nodes = grid.remove_all()
        LOGGER.info("Generated %d pieces (%d growth attempts discarded)", len(nodes), self.discarded)
        return GeneratedPuzzle(grid=grid, solution=solution, nodes=nodes, seed=self.config.seed)

    def easy_grid(self, grid: GameGrid) -> GameGrid:
        """Grow polyominoes until the grid reports completion."""

        attempts = 0
        while not grid.is_complete():
            attempts += 1
            if attempts > self.config.max_growth_attempts:
                raise GenerationError(
                    f"Grid still incomplete after {self.config.max_growth_attempts} growth attempts"
                )
            root = find_root(grid, self.rng, self.config.min_piece_size)
            if root is None:
                break
            self.create_polyomino(
                grid, root, target_size(grid.num_empty(), self.config.min_piece_size)
            )
        return grid

    def trapped_grid(self, grid: GameGrid) -> GameGrid:
        """Scatter traps on distinct squares, then grow polyominoes as usual."""

        self.scatter_traps(grid)
        return self.easy_grid(grid)

    def scatter_traps(self, grid: GameGrid) -> List[Position]:
        free = [
            (r, c)
            for r in range(grid.height)
            for c in range(grid.width)
            if not grid.has_trap(r, c) and grid.is_empty_square(r, c)
        ]
        count = min(self.rng.randint(self.config.min_traps, self.config.max_traps), len(free))
        placed = self.rng.sample(free, count)
        for row, col in placed:
            grid.set_trap(row, col)
        LOGGER.debug("Scattered %d traps: %s", count, placed)
        return placed

    def create_polyomino(self, grid: GameGrid, root: Position, size: int) -> Optional[PlacementNode]:
        """Grow, crop and add one piece; return its node or ``None`` if discarded."""

        growth = grow_polyomino(grid, root, size, self.rng)
        if len(growth) < self.config.min_piece_size:
            # Known shortfall of the growth heuristic: the attempt is dropped
            # and the color is kept for the next one.
            self.discarded += 1
            LOGGER.debug("Discarded %d-square growth from %s", len(growth), root)
            return None

        piece = build_piece(growth, self.color)
        node = grid.add_piece(piece, growth.origin)
        LOGGER.debug(
            "Placed %s %d-square piece at %s (target %d)",
            self.color.value,
            len(growth),
            growth.origin,
            size,
        )
        self.color = opposite_color(self.color)
        return node
