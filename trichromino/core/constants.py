"""Shared constants and enumerations for the trichromino engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class BaseShade(str, Enum):
    """Stored color of a grid cell or piece square, before adjacency blending."""

    EMPTY = "empty"
    WHITE = "white"
    BLACK = "black"


class Shade(str, Enum):
    """Visible shade of an evaluated cell."""

    EMPTY = "empty"
    WHITE = "white"
    BLACK = "black"
    GRAY = "gray"
    TRAP = "trap"
    TRAP_BLACK = "trap_black"
    TRAP_WHITE = "trap_white"


class Direction(str, Enum):
    """Directions a floating piece can be moved in."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class Command(str, Enum):
    """Undoable session actions, as logged on the history stacks."""

    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    SELECT_PREVIOUS = "select_previous"
    SELECT_NEXT = "select_next"
    PLACE = "place"
    DISPLACE = "displace"


class HistoryAction(str, Enum):
    UNDO = "undo"
    REDO = "redo"


PIECE_COLORS: Tuple[BaseShade, BaseShade] = (BaseShade.WHITE, BaseShade.BLACK)

# Order matters: generation replays depend on it (up, left, down, right).
ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((-1, 0), (0, -1), (1, 0), (0, 1))

DIRECTION_STEPS = {
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
}

START_CORNER: Tuple[int, int] = (0, 0)
MIN_PIECE_SIZE = 3
DEFAULT_MAX_UNDO = 30


def opposite_color(color: BaseShade) -> BaseShade:
    if color == BaseShade.WHITE:
        return BaseShade.BLACK
    if color == BaseShade.BLACK:
        return BaseShade.WHITE
    raise ValueError(f"{color!r} is not a piece color")


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def contains_box(self, row: int, col: int, height: int, width: int) -> bool:
        return row >= 0 and col >= 0 and row + height <= self.rows and col + width <= self.cols
