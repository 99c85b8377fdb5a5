"""CP-SAT placement solver using OR-Tools.

Finds an anchor for every piece such that the evaluated board equals a
target solution. Used to verify that a puzzle is solvable and to hint the
player toward a consistent position for the selected piece.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model

from ..core.constants import ORTHOGONAL_STEPS, BaseShade, Shade
from ..core.models import Position
from ..utils.logger import get_logger
from .grid import GameGrid
from .piece import Piece

LOGGER = get_logger(__name__)

_UNCOVERED = {Shade.EMPTY, Shade.TRAP}


def solve_placements(
    grid: GameGrid,
    pieces: Sequence[Piece],
    solution: Sequence[Sequence[Shade]],
    timeout: float = 10.0,
    workers: int = 4,
) -> Optional[List[Position]]:
    """Place every piece so that the board evaluates to ``solution``.

    Args:
        grid: Board whose shape is used; its current contents are ignored.
        pieces: Sealed pieces; every one of them must be placed.
        solution: Target evaluated board (``height x width`` shades).
        timeout: Solver time limit in seconds.
        workers: CP-SAT search workers.

    Returns:
        One ``(row, col)`` anchor per piece, in input order, or None if no
        placement reproduces the solution.
    """
    height, width = grid.height, grid.width
    if len(solution) != height or any(len(line) != width for line in solution):
        raise ValueError(f"Solution shape does not match the {height}x{width} grid")

    occupied = {
        (r, c)
        for r in range(height)
        for c in range(width)
        if Shade(solution[r][c]) not in _UNCOVERED
    }
    if not pieces:
        return [] if not occupied else None

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: One boolean per (piece, anchor) over occupied squares only
    # ------------------------------------------------------------------
    white_cover: Dict[Position, List[cp_model.IntVar]] = defaultdict(list)
    black_cover: Dict[Position, List[cp_model.IntVar]] = defaultdict(list)
    choices: List[List[Tuple[Position, cp_model.IntVar]]] = []

    for index, piece in enumerate(pieces):
        options: List[Tuple[Position, cp_model.IntVar]] = []
        cover = white_cover if piece.color == BaseShade.WHITE else black_cover
        for row in range(height - piece.height + 1):
            for col in range(width - piece.width + 1):
                squares = [(row + dr, col + dc) for dr, dc in piece.squares()]
                if any(square not in occupied for square in squares):
                    continue
                choice = model.new_bool_var(f"P{index}_{row}_{col}")
                options.append(((row, col), choice))
                for square in squares:
                    cover[square].append(choice)
        if not options:
            LOGGER.debug("Piece %d (%r) has no anchor inside the solution", index, piece)
            return None
        model.add_exactly_one([choice for _, choice in options])
        choices.append(options)

    # ------------------------------------------------------------------
    # Step 2: Base colors, each occupied square covered exactly once
    # ------------------------------------------------------------------
    white: Dict[Position, cp_model.IntVar] = {}
    black: Dict[Position, cp_model.IntVar] = {}
    for r, c in sorted(occupied):
        white[(r, c)] = model.new_bool_var(f"W_{r}_{c}")
        black[(r, c)] = model.new_bool_var(f"B_{r}_{c}")
        model.add(white[(r, c)] == sum(white_cover[(r, c)]))
        model.add(black[(r, c)] == sum(black_cover[(r, c)]))
        model.add(white[(r, c)] + black[(r, c)] == 1)

    # ------------------------------------------------------------------
    # Step 3: Shading rule on neighbor counts
    # ------------------------------------------------------------------
    for r, c in sorted(occupied):
        neighbors = [
            (r + dr, c + dc)
            for dr, dc in ORTHOGONAL_STEPS
            if (r + dr, c + dc) in occupied
        ]
        white_neighbors = [white[n] for n in neighbors]
        black_neighbors = [black[n] for n in neighbors]
        is_white, is_black = white[(r, c)], black[(r, c)]
        shade = Shade(solution[r][c])

        if shade == Shade.WHITE:
            _enforce_count(model, black_neighbors, "==", 0, is_white)
            _enforce_count(model, white_neighbors, ">=", 2, is_black)
        elif shade == Shade.BLACK:
            _enforce_count(model, white_neighbors, "==", 0, is_black)
            _enforce_count(model, black_neighbors, ">=", 2, is_white)
        elif shade == Shade.GRAY:
            _enforce_count(model, black_neighbors, "==", 1, is_white)
            _enforce_count(model, white_neighbors, "==", 1, is_black)
        else:
            raise ValueError(f"Shade {shade.value!r} at ({r}, {c}) cannot appear in a solution")

    # ------------------------------------------------------------------
    # Step 4: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = workers

    LOGGER.info(
        "CP-SAT: %d pieces, %d anchor vars, solving (timeout=%0.1fs)...",
        len(pieces),
        sum(len(options) for options in choices),
        timeout,
    )
    status = solver.solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.warning("CP-SAT: no placement found (status=%s)", solver.status_name(status))
        return None

    LOGGER.info("CP-SAT: placement found in %.2fs", solver.wall_time)

    # ------------------------------------------------------------------
    # Step 5: Extract anchors
    # ------------------------------------------------------------------
    anchors: List[Position] = []
    for options in choices:
        anchors.append(next(anchor for anchor, choice in options if solver.value(choice)))
    return anchors


def _enforce_count(
    model: cp_model.CpModel,
    literals: List[cp_model.IntVar],
    operator: str,
    value: int,
    condition: cp_model.IntVar,
) -> None:
    """Require ``sum(literals) <operator> value`` whenever ``condition`` holds."""
    if not literals:
        # No neighbors: the count is the constant 0.
        holds = 0 == value if operator == "==" else 0 >= value
        if not holds:
            model.add(condition == 0)
        return
    total = sum(literals)
    if operator == "==":
        model.add(total == value).only_enforce_if(condition)
    else:
        model.add(total >= value).only_enforce_if(condition)
