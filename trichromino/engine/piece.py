"""Polyomino pieces on a bounded local matrix."""

from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

from ..core.constants import PIECE_COLORS, BaseShade
from ..core.exceptions import BoundsError, OccupancyError


class Piece:
    """A single-colored polyomino drawn on a ``height x width`` matrix.

    Squares can be added and removed until the piece is cropped. ``crop``
    returns a sealed copy trimmed to the tight bounding box of its squares;
    sealed pieces are never edited again, so grids and nodes share them
    freely.
    """

    def __init__(self, width: int, height: int, color: BaseShade) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Piece dimensions must be positive, got {width}x{height}")
        if color not in PIECE_COLORS:
            raise ValueError(f"Piece color must be white or black, got {color!r}")
        self.width = width
        self.height = height
        self.color = BaseShade(color)
        self.sealed = False
        self._matrix: List[List[BaseShade]] = [
            [BaseShade.EMPTY for _ in range(width)] for _ in range(height)
        ]

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def add_square(self, row: int, col: int) -> None:
        if self.sealed:
            raise OccupancyError("add_square: squares cannot be added to a cropped piece")
        self._check_bounds(row, col, "add_square")
        self._matrix[row][col] = self.color

    def remove_square(self, row: int, col: int) -> None:
        if self.sealed:
            raise OccupancyError("remove_square: squares cannot be removed from a cropped piece")
        self._check_bounds(row, col, "remove_square")
        self._matrix[row][col] = BaseShade.EMPTY

    def _check_bounds(self, row: int, col: int, action: str) -> None:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise BoundsError(f"{action}: ({row}, {col}) outside {self.height}x{self.width} piece")

    def crop(self) -> "Piece":
        """Return a sealed copy without empty border rows or columns."""

        if self.is_empty():
            raise OccupancyError("crop: piece is empty")
        squares = list(self.squares())
        min_row = min(r for r, _ in squares)
        max_row = max(r for r, _ in squares)
        min_col = min(c for _, c in squares)
        max_col = max(c for _, c in squares)

        cropped = Piece(max_col - min_col + 1, max_row - min_row + 1, self.color)
        for row, col in squares:
            cropped.add_square(row - min_row, col - min_col)
        cropped.sealed = True
        return cropped

    @classmethod
    def from_cells(cls, cells: Sequence[Tuple[int, int]], color: BaseShade) -> "Piece":
        """Build a sealed piece from absolute ``(row, col)`` coordinates."""

        if not cells:
            raise OccupancyError("from_cells: no squares given")
        min_row = min(r for r, _ in cells)
        min_col = min(c for _, c in cells)
        height = max(r for r, _ in cells) - min_row + 1
        width = max(c for _, c in cells) - min_col + 1
        piece = cls(width, height, color)
        for row, col in cells:
            piece.add_square(row - min_row, col - min_col)
        return piece.crop()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_square(self, row: int, col: int) -> bool:
        self._check_bounds(row, col, "is_square")
        return self._matrix[row][col] != BaseShade.EMPTY

    def squares(self) -> Iterator[Tuple[int, int]]:
        """Yield local ``(row, col)`` of every occupied square, row-major."""

        for r, line in enumerate(self._matrix):
            for c, value in enumerate(line):
                if value != BaseShade.EMPTY:
                    yield r, c

    @property
    def num_squares(self) -> int:
        return sum(1 for _ in self.squares())

    def is_empty(self) -> bool:
        return self.num_squares == 0

    def rows(self) -> List[List[BaseShade]]:
        """Copy of the piece matrix, for renderers and persistence."""

        return [list(line) for line in self._matrix]

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def to_jsonable(self) -> dict:
        return {
            "color": self.color.value,
            "rows": [[value.value for value in line] for line in self._matrix],
            "sealed": self.sealed,
        }

    @classmethod
    def from_jsonable(cls, payload: dict) -> "Piece":
        rows = payload["rows"]
        if not rows or not rows[0]:
            raise ValueError("Piece payload has an empty matrix")
        piece = cls(len(rows[0]), len(rows), BaseShade(payload["color"]))
        for r, line in enumerate(rows):
            if len(line) != piece.width:
                raise ValueError("Piece payload rows have uneven length")
            for c, value in enumerate(line):
                shade = BaseShade(value)
                if shade == piece.color:
                    piece.add_square(r, c)
                elif shade != BaseShade.EMPTY:
                    raise ValueError(f"Square ({r}, {c}) does not match piece color {piece.color.value}")
        if not payload.get("sealed", True):
            return piece
        cropped = piece.crop()
        if cropped != piece:
            raise ValueError("Sealed piece payload is not tightly cropped")
        return cropped

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._matrix == other._matrix
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Piece({self.width}x{self.height}, {self.color.value}, "
            f"squares={self.num_squares}, sealed={self.sealed})"
        )

    def __str__(self) -> str:
        return "\n".join(
            " ".join("#" if value != BaseShade.EMPTY else "." for value in line)
            for line in self._matrix
        )
