"""Data models supporting the trichromino engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, Tuple

from .constants import BaseShade, Direction, DIRECTION_STEPS, START_CORNER, Shade
from .exceptions import OccupancyError

if TYPE_CHECKING:
    from ..engine.piece import Piece


Position = Tuple[int, int]


@dataclass
class Cell:
    """Stored state of a grid square: a base shade and an independent trap flag."""

    base: BaseShade = BaseShade.EMPTY
    trap: bool = False

    def is_empty(self) -> bool:
        return self.base == BaseShade.EMPTY

    def copy(self) -> "Cell":
        return Cell(base=self.base, trap=self.trap)


class PreviewCell(NamedTuple):
    """One square of a ``show_piece`` preview.

    ``floating`` marks squares belonging to the previewed (unplaced) piece;
    ``blocked`` marks floating squares that overlap an occupied cell.
    """

    shade: Shade
    floating: bool = False
    blocked: bool = False


class AdjacentCounts(NamedTuple):
    empty: int
    white: int
    black: int


@dataclass
class PlacementNode:
    """A piece bound to a board position and a placed/floating state.

    While floating, ``(row, col)`` is the hover offset of the piece's top-left
    corner; once placed it is the anchor the piece was committed at.
    """

    piece: "Piece"
    row: int = START_CORNER[0]
    col: int = START_CORNER[1]
    placed: bool = False

    @property
    def position(self) -> Position:
        return (self.row, self.col)

    def _require_floating(self, action: str) -> None:
        if self.placed:
            raise OccupancyError(f"{action}: cannot be called on a placed piece")

    def move(self, direction: Direction) -> None:
        self._require_floating(f"move {direction.value}")
        dr, dc = DIRECTION_STEPS[direction]
        self.row += dr
        self.col += dc

    def hover(self, row: int, col: int) -> None:
        self.row = row
        self.col = col

    def place(self) -> None:
        self.placed = True

    def displace(self) -> None:
        self.placed = False

    def reset(self) -> None:
        """Displace the node and send it back to the start corner."""

        self.hover(*START_CORNER)
        self.placed = False

    def clone(self) -> "PlacementNode":
        return PlacementNode(piece=self.piece, row=self.row, col=self.col, placed=self.placed)
