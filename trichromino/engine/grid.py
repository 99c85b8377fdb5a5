"""Grid representation, shading evaluation and piece placement."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ..core.constants import ORTHOGONAL_STEPS, BaseShade, Bounds, Shade
from ..core.exceptions import BoundsError, OccupancyError
from ..core.models import AdjacentCounts, Cell, PlacementNode, Position, PreviewCell
from ..utils.logger import get_logger
from .piece import Piece


LOGGER = get_logger(__name__)

# Floating squares of a preview keep the piece color; over a trap they show as
# the trap-covered variant of that color.
_TRAPPED_SHADES = {
    BaseShade.WHITE: Shade.TRAP_WHITE,
    BaseShade.BLACK: Shade.TRAP_BLACK,
}


class GameGrid:
    """The authoritative board of black and white squares.

    Cells store only their base shade and trap flag. What the player sees is
    derived by :meth:`evaluate`, where a square adjacent to squares of the
    other color is blended toward that color. The grid also tracks every
    placed :class:`PlacementNode`; the cell matrix is always the superposition
    of the tracked pieces plus the traps.
    """

    def __init__(self, height: int, width: int) -> None:
        if height <= 0 or width <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {height}x{width}")
        self.bounds = Bounds(rows=height, cols=width)
        self.cells: List[List[Cell]] = [[Cell() for _ in range(width)] for _ in range(height)]
        self.nodes: List[PlacementNode] = []

    @property
    def height(self) -> int:
        return self.bounds.rows

    @property
    def width(self) -> int:
        return self.bounds.cols

    # ------------------------------------------------------------------
    # Cell manipulation
    # ------------------------------------------------------------------
    def cell(self, row: int, col: int) -> Cell:
        if not self.bounds.contains(row, col):
            raise BoundsError(f"({row}, {col}) outside {self.height}x{self.width} grid")
        return self.cells[row][col]

    def is_empty_square(self, row: int, col: int) -> bool:
        """True when the square holds no color; a lone trap counts as empty."""

        return self.cell(row, col).is_empty()

    def is_white(self, row: int, col: int) -> bool:
        return self.cell(row, col).base == BaseShade.WHITE

    def is_black(self, row: int, col: int) -> bool:
        return self.cell(row, col).base == BaseShade.BLACK

    def has_trap(self, row: int, col: int) -> bool:
        return self.cell(row, col).trap

    def set_white(self, row: int, col: int) -> None:
        self._set_color(row, col, BaseShade.WHITE)

    def set_black(self, row: int, col: int) -> None:
        self._set_color(row, col, BaseShade.BLACK)

    def remove_white(self, row: int, col: int) -> None:
        self._remove_color(row, col, BaseShade.WHITE)

    def remove_black(self, row: int, col: int) -> None:
        self._remove_color(row, col, BaseShade.BLACK)

    def _set_color(self, row: int, col: int, color: BaseShade) -> None:
        cell = self.cell(row, col)
        if not cell.is_empty():
            raise OccupancyError(f"set_{color.value}: ({row}, {col}) is already occupied")
        cell.base = color

    def _remove_color(self, row: int, col: int, color: BaseShade) -> None:
        cell = self.cell(row, col)
        if cell.base != color:
            raise OccupancyError(f"remove_{color.value}: ({row}, {col}) holds no {color.value} square")
        cell.base = BaseShade.EMPTY

    def set_trap(self, row: int, col: int) -> None:
        cell = self.cell(row, col)
        if cell.trap:
            raise OccupancyError(f"set_trap: ({row}, {col}) is already a trap")
        cell.trap = True

    def remove_trap(self, row: int, col: int) -> None:
        cell = self.cell(row, col)
        if not cell.trap:
            raise OccupancyError(f"remove_trap: ({row}, {col}) is not a trap")
        cell.trap = False

    def traps(self) -> List[Position]:
        return [
            (r, c)
            for r in range(self.height)
            for c in range(self.width)
            if self.cells[r][c].trap
        ]

    # ------------------------------------------------------------------
    # Piece placement
    # ------------------------------------------------------------------
    def _check_box(self, piece: Piece, anchor: Position, action: str) -> None:
        if piece.is_empty():
            raise OccupancyError(f"{action}: cannot use an empty piece")
        row, col = anchor
        if not self.bounds.contains_box(row, col, piece.height, piece.width):
            raise BoundsError(
                f"{action}: {piece.height}x{piece.width} piece at {anchor} "
                f"leaves the {self.height}x{self.width} grid"
            )

    def _overlaps(self, piece: Piece, anchor: Position) -> bool:
        row, col = anchor
        return any(
            not self.cells[row + dr][col + dc].is_empty() for dr, dc in piece.squares()
        )

    def piece_fits(self, piece: Piece, anchor: Position) -> bool:
        """Whether ``piece`` could be added at ``anchor`` without mutating the grid."""

        try:
            self._check_box(piece, anchor, "piece_fits")
        except BoundsError:
            return False
        return not self._overlaps(piece, anchor)

    def add_piece(self, piece: Piece, anchor: Position) -> PlacementNode:
        """Copy ``piece`` into the grid at ``anchor`` and track a new placed node."""

        node = PlacementNode(piece=piece, row=anchor[0], col=anchor[1])
        self.place_node(node)
        return node

    def place_node(self, node: PlacementNode) -> None:
        """Copy the node's piece in at the node's position and start tracking it."""

        if any(tracked is node for tracked in self.nodes):
            raise OccupancyError("place_node: node is already placed in this grid")
        anchor = node.position
        self._check_box(node.piece, anchor, "add_piece")
        if self._overlaps(node.piece, anchor):
            raise OccupancyError(f"add_piece: piece at {anchor} overlaps an occupied square")

        row, col = anchor
        for dr, dc in node.piece.squares():
            self._set_color(row + dr, col + dc, node.piece.color)
        node.place()
        self.nodes.append(node)

    def remove_piece(self, node: PlacementNode) -> PlacementNode:
        """Subtract a tracked node's squares and return the now displaced node."""

        index = next((i for i, tracked in enumerate(self.nodes) if tracked is node), None)
        if index is None:
            raise OccupancyError("remove_piece: piece is not in the grid")
        tracked = self.nodes.pop(index)
        row, col = tracked.position
        for dr, dc in tracked.piece.squares():
            self._remove_color(row + dr, col + dc, tracked.piece.color)
        tracked.displace()
        return tracked

    def remove_all(self) -> List[PlacementNode]:
        """Remove every tracked node, resetting each to the start corner."""

        removed: List[PlacementNode] = []
        while self.nodes:
            node = self.remove_piece(self.nodes[0])
            node.reset()
            removed.append(node)
        LOGGER.debug("Removed %d pieces from the grid", len(removed))
        return removed

    def show_piece(self, piece: Piece, anchor: Position) -> List[List[PreviewCell]]:
        """Evaluated grid with ``piece`` hovering at ``anchor``.

        The grid is not modified. Hovering squares are flagged ``floating``;
        those over an occupied square are additionally flagged ``blocked``.
        """

        self._check_box(piece, anchor, "show_piece")
        preview = [[PreviewCell(shade) for shade in line] for line in self.evaluate()]
        row, col = anchor
        for dr, dc in piece.squares():
            cell = self.cells[row + dr][col + dc]
            if not cell.is_empty():
                preview[row + dr][col + dc] = PreviewCell(Shade(piece.color.value), True, True)
            elif cell.trap:
                preview[row + dr][col + dc] = PreviewCell(_TRAPPED_SHADES[piece.color], True)
            else:
                preview[row + dr][col + dc] = PreviewCell(Shade(piece.color.value), True)
        return preview

    # ------------------------------------------------------------------
    # Adjacency
    # ------------------------------------------------------------------
    def neighbors(self, row: int, col: int) -> Iterable[Position]:
        for dr, dc in ORTHOGONAL_STEPS:
            nr, nc = row + dr, col + dc
            if self.bounds.contains(nr, nc):
                yield nr, nc

    def adjacent_counts(self, row: int, col: int) -> AdjacentCounts:
        """Count empty, white and black base shades among orthogonal neighbors."""

        self.cell(row, col)
        empty = white = black = 0
        for nr, nc in self.neighbors(row, col):
            base = self.cells[nr][nc].base
            if base == BaseShade.WHITE:
                white += 1
            elif base == BaseShade.BLACK:
                black += 1
            else:
                empty += 1
        return AdjacentCounts(empty=empty, white=white, black=black)

    def strict_adjacent_empty(self, row: int, col: int) -> List[Position]:
        """Empty orthogonal neighbors in up, left, down, right order."""

        self.cell(row, col)
        return [(nr, nc) for nr, nc in self.neighbors(row, col) if self.cells[nr][nc].is_empty()]

    def is_branch_point(self, row: int, col: int) -> bool:
        """An empty square with two or more empty neighbors can seed a piece."""

        return self.is_empty_square(row, col) and self.adjacent_counts(row, col).empty > 1

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def visible_shade(self, row: int, col: int) -> Shade:
        cell = self.cell(row, col)
        if cell.base == BaseShade.EMPTY:
            return Shade.TRAP if cell.trap else Shade.EMPTY

        adjacent = self.adjacent_counts(row, col)
        if cell.base == BaseShade.WHITE:
            opposing, flipped = adjacent.black, Shade.BLACK
        else:
            opposing, flipped = adjacent.white, Shade.WHITE
        if opposing == 1:
            return Shade.GRAY
        if opposing > 1:
            return flipped
        return Shade(cell.base.value)

    def evaluate(self) -> List[List[Shade]]:
        """The externally visible board that is compared against a solution."""

        return [[self.visible_shade(r, c) for c in range(self.width)] for r in range(self.height)]

    def matches(self, solution: Sequence[Sequence[Shade]]) -> bool:
        if len(solution) != self.height or any(len(line) != self.width for line in solution):
            return False
        return all(
            visible == expected
            for evaluated_line, expected_line in zip(self.evaluate(), solution)
            for visible, expected in zip(evaluated_line, expected_line)
        )

    # ------------------------------------------------------------------
    # Generation queries
    # ------------------------------------------------------------------
    def num_empty(self) -> int:
        return sum(1 for line in self.cells for cell in line if cell.is_empty())

    def is_complete(self) -> bool:
        """Whether further random growth is futile.

        True once fewer than a sixth of the squares remain empty, or when no
        empty square has two empty neighbors to grow a piece of three from.
        This is a termination heuristic, not a proof that the board is tiled.
        """

        if self.num_empty() < (self.height * self.width) // 6:
            return True
        return not any(
            self.is_branch_point(r, c) for r in range(self.height) for c in range(self.width)
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def clone(self) -> "GameGrid":
        copy = GameGrid(self.height, self.width)
        copy.cells = [[cell.copy() for cell in line] for line in self.cells]
        copy.nodes = [node.clone() for node in self.nodes]
        return copy

    def empty_copy(self) -> "GameGrid":
        """A grid of the same shape carrying only this grid's traps."""

        copy = GameGrid(self.height, self.width)
        for row, col in self.traps():
            copy.set_trap(row, col)
        return copy

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def to_jsonable(self) -> List[List[dict]]:
        return [
            [{"base": cell.base.value, "trap": cell.trap} for cell in line]
            for line in self.cells
        ]

    def __str__(self) -> str:
        return "\n".join(" ".join(_raw_symbol(cell) for cell in line) for line in self.cells)


_RAW_SYMBOLS = {BaseShade.EMPTY: ".", BaseShade.WHITE: "w", BaseShade.BLACK: "b"}


def _raw_symbol(cell: Cell) -> str:
    # Trapped squares are upper-cased; a bare trap is a caret.
    if cell.trap:
        return "^" if cell.is_empty() else _RAW_SYMBOLS[cell.base].upper()
    return _RAW_SYMBOLS[cell.base]
