"""Game session: piece selection, placement and the undo/redo command log."""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Sequence

from ..core.constants import (
    DEFAULT_MAX_UNDO,
    DIRECTION_STEPS,
    Command,
    Direction,
    HistoryAction,
    Shade,
)
from ..core.exceptions import InvalidCommandError, NoActivePieceError
from ..core.models import PlacementNode, Position, PreviewCell
from ..utils.logger import get_logger
from .generator import GeneratedPuzzle, GeneratorConfig, PuzzleGenerator
from .grid import GameGrid
from .solver import solve_placements


LOGGER = get_logger(__name__)

MOVE_COMMANDS = {
    Direction.LEFT: Command.MOVE_LEFT,
    Direction.RIGHT: Command.MOVE_RIGHT,
    Direction.UP: Command.MOVE_UP,
    Direction.DOWN: Command.MOVE_DOWN,
}
COMMAND_DIRECTIONS = {command: direction for direction, command in MOVE_COMMANDS.items()}

INVERSE_COMMANDS = {
    Command.MOVE_LEFT: Command.MOVE_RIGHT,
    Command.MOVE_RIGHT: Command.MOVE_LEFT,
    Command.MOVE_UP: Command.MOVE_DOWN,
    Command.MOVE_DOWN: Command.MOVE_UP,
    Command.SELECT_PREVIOUS: Command.SELECT_NEXT,
    Command.SELECT_NEXT: Command.SELECT_PREVIOUS,
    Command.PLACE: Command.DISPLACE,
    Command.DISPLACE: Command.PLACE,
}


@dataclass
class SessionConfig:
    max_undo: int = DEFAULT_MAX_UNDO
    solver_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.max_undo < 1:
            raise ValueError("max_undo must be at least 1")


def coerce_direction(direction: Direction | str) -> Direction:
    try:
        return Direction(direction)
    except ValueError:
        raise InvalidCommandError(f"{direction!r} is not a valid direction") from None


def coerce_command(command: Command | str) -> Command:
    try:
        return Command(command)
    except ValueError:
        raise InvalidCommandError(f"{command!r} is not a valid command") from None


class Session:
    """One game: the live grid, its solution and the player's pieces.

    Every undoable action is logged as a :class:`Command`. Undo replays the
    inverse of the popped command against the current piece and grid, redo
    replays the command itself, so the log is a reversible trace rather than
    a stack of board copies.
    """

    def __init__(
        self,
        grid: GameGrid,
        solution: Sequence[Sequence[Shade]],
        nodes: Iterable[PlacementNode],
        current_index: Optional[int] = 0,
        config: Optional[SessionConfig] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.grid = grid
        self.solution: List[List[Shade]] = [[Shade(value) for value in line] for line in solution]
        self.nodes: List[PlacementNode] = list(nodes)
        if not self.nodes:
            current_index = None
        elif current_index is not None and not 0 <= current_index < len(self.nodes):
            raise ValueError(f"current_index {current_index} outside 0..{len(self.nodes) - 1}")
        self.current_index = current_index
        self.undo_stack: Deque[Command] = deque(maxlen=self.config.max_undo)
        self.redo_stack: Deque[Command] = deque(maxlen=self.config.max_undo)
        self._solved_anchors: Optional[List[Position]] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def empty(cls, height: int = 10, width: int = 10, config: Optional[SessionConfig] = None) -> "Session":
        solution = [[Shade.EMPTY] * width for _ in range(height)]
        return cls(GameGrid(height, width), solution, [], current_index=None, config=config)

    @classmethod
    def from_puzzle(cls, puzzle: GeneratedPuzzle, config: Optional[SessionConfig] = None) -> "Session":
        return cls(puzzle.grid, puzzle.solution, puzzle.nodes, current_index=0, config=config)

    @classmethod
    def new_game(
        cls,
        generator_config: Optional[GeneratorConfig] = None,
        trapped: bool = False,
        rng: Optional[random.Random] = None,
        config: Optional[SessionConfig] = None,
    ) -> "Session":
        generator = PuzzleGenerator(generator_config, rng=rng)
        return cls.from_puzzle(generator.generate(trapped=trapped), config=config)

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    def is_empty(self) -> bool:
        return self.current_index is None

    @property
    def current_node(self) -> Optional[PlacementNode]:
        if self.current_index is None:
            return None
        return self.nodes[self.current_index]

    def _active_index(self, action: str) -> int:
        if self.current_index is None:
            raise NoActivePieceError(f"{action}: game is currently empty")
        return self.current_index

    def _require_active(self, action: str) -> PlacementNode:
        return self.nodes[self._active_index(action)]

    def is_over(self) -> bool:
        if self.is_empty():
            return False
        return self.grid.matches(self.solution)

    def valid_place(self) -> bool:
        node = self.current_node
        if node is None:
            return False
        return self.grid.piece_fits(node.piece, node.position)

    def can_move(self, direction: Direction | str) -> bool:
        """Whether the current piece's box stays on the grid after one step."""

        direction = coerce_direction(direction)
        node = self.current_node
        if node is None:
            return False
        dr, dc = DIRECTION_STEPS[direction]
        return self.grid.bounds.contains_box(
            node.row + dr, node.col + dc, node.piece.height, node.piece.width
        )

    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self.redo_stack) > 0

    def nodes_placed(self) -> int:
        return sum(1 for node in self.nodes if node.placed)

    def remaining(self) -> int:
        return len(self.nodes) - self.nodes_placed()

    def display(self) -> List[List[PreviewCell]]:
        """Board as the player sees it: the evaluation plus any floating selection."""

        node = self.current_node
        if node is None or node.placed:
            return [[PreviewCell(shade) for shade in line] for line in self.grid.evaluate()]
        return self.grid.show_piece(node.piece, node.position)

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    def move(self, direction: Direction | str) -> bool:
        direction = coerce_direction(direction)
        node = self._require_active("move")
        if node.placed or not self.can_move(direction):
            return False
        node.move(direction)
        self._record(MOVE_COMMANDS[direction])
        return True

    def place(self) -> bool:
        node = self._require_active("place")
        if node.placed:
            return False
        self.grid.place_node(node)
        self._record(Command.PLACE)
        return True

    def displace(self) -> bool:
        node = self._require_active("displace")
        if not node.placed:
            return False
        self.grid.remove_piece(node)
        self._record(Command.DISPLACE)
        return True

    def select_next(self) -> None:
        self._cycle(self._active_index("select_next"), 1)
        self._record(Command.SELECT_NEXT)

    def select_previous(self) -> None:
        self._cycle(self._active_index("select_previous"), -1)
        self._record(Command.SELECT_PREVIOUS)

    def _cycle(self, index: int, step: int) -> None:
        self.current_index = (index + step + len(self.nodes)) % len(self.nodes)

    def clear(self) -> None:
        """Lift every placed piece back to the start corner and forget history."""

        self._require_active("clear")
        self.grid.remove_all()
        self.undo_stack.clear()
        self.redo_stack.clear()
        LOGGER.debug("Session cleared")

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def _record(self, command: Command) -> None:
        # A full deque drops its oldest entry on append.
        self.undo_stack.append(command)
        self.redo_stack.clear()
        LOGGER.debug("Command %s (undo depth %d)", command.value, len(self.undo_stack))

    def step(self, action: HistoryAction | str) -> bool:
        """Undo or redo one command; returns False when there is nothing to step."""

        try:
            action = HistoryAction(action)
        except ValueError:
            raise InvalidCommandError(f"{action!r} is not a valid history action") from None

        if action == HistoryAction.UNDO:
            if not self.can_undo():
                return False
            command = self.undo_stack[-1]
            self._apply(INVERSE_COMMANDS[command])
            self.redo_stack.append(self.undo_stack.pop())
        else:
            if not self.can_redo():
                return False
            command = self.redo_stack[-1]
            self._apply(command)
            self.undo_stack.append(self.redo_stack.pop())
        LOGGER.debug("%s %s", action.value, command.value)
        return True

    def undo(self) -> bool:
        return self.step(HistoryAction.UNDO)

    def redo(self) -> bool:
        return self.step(HistoryAction.REDO)

    def _apply(self, command: Command | str) -> None:
        command = coerce_command(command)
        index = self._active_index(command.value)
        node = self.nodes[index]
        if command in COMMAND_DIRECTIONS:
            node.move(COMMAND_DIRECTIONS[command])
        elif command == Command.SELECT_NEXT:
            self._cycle(index, 1)
        elif command == Command.SELECT_PREVIOUS:
            self._cycle(index, -1)
        elif command == Command.PLACE:
            self.grid.place_node(node)
        elif command == Command.DISPLACE:
            self.grid.remove_piece(node)

    # ------------------------------------------------------------------
    # Solver assistance
    # ------------------------------------------------------------------
    def _solve(self) -> Optional[List[Position]]:
        if self._solved_anchors is None and self.nodes:
            self._solved_anchors = solve_placements(
                self.grid,
                [node.piece for node in self.nodes],
                self.solution,
                timeout=self.config.solver_timeout,
            )
        return self._solved_anchors

    def is_solvable(self) -> bool:
        if self.is_empty():
            return False
        return self._solve() is not None

    def hint(self) -> Optional[Position]:
        """An anchor for the current piece that is part of some full solution."""

        index = self._active_index("hint")
        anchors = self._solve()
        if anchors is None:
            return None
        return anchors[index]
