"""Pretty-print helpers for trichromino boards and pieces."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, List, Sequence

from ..core.constants import Shade
from ..core.models import PreviewCell

if TYPE_CHECKING:
    from ..engine.piece import Piece
    from ..engine.session import Session


SYMBOLS = {
    Shade.EMPTY: ".",
    Shade.WHITE: "o",
    Shade.BLACK: "x",
    Shade.GRAY: "+",
    Shade.TRAP: "^",
    Shade.TRAP_WHITE: "O",
    Shade.TRAP_BLACK: "X",
}


def shade_symbol(shade: Shade) -> str:
    return SYMBOLS.get(Shade(shade), "?")


def _framed(rows: List[List[str]]) -> str:
    width = len(rows[0]) if rows else 0
    header_cells = [f"{c:>2}" for c in range(width)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * width - 1))
    for r, symbols in enumerate(rows):
        row_render = " ".join(f"{symbol:>2}" for symbol in symbols)
        lines.append(f"{r:>2} | {row_render}")
    return "\n".join(lines)


def format_shades(shades: Sequence[Sequence[Shade]]) -> str:
    return _framed([[shade_symbol(shade) for shade in line] for line in shades])


def format_preview(preview: Sequence[Sequence[PreviewCell]]) -> str:
    """Like :func:`format_shades`; a floating square over an occupied one shows as ``!``."""

    return _framed(
        [
            ["!" if cell.blocked else shade_symbol(cell.shade) for cell in line]
            for line in preview
        ]
    )


def format_piece(piece: Piece) -> str:
    symbol = shade_symbol(Shade(piece.color.value))
    return "\n".join(
        " ".join(symbol if piece.is_square(r, c) else "." for c in range(piece.width))
        for r in range(piece.height)
    )


def pretty_print_session(session: Session, *, label: str | None = None, stream=None) -> None:
    """Print the player's view of the board followed by a status line."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_preview(session.display()), file=stream)

    print(file=stream)
    if session.is_empty():
        print("No active game", file=stream)
        return
    node = session.current_node
    state = "placed" if node.placed else "floating"
    print(
        f"Piece {session.current_index + 1}/{len(session.nodes)} ({state} at {node.position}), "
        f"{session.nodes_placed()} placed, {session.remaining()} remaining",
        file=stream,
    )
    print(format_piece(node.piece), file=stream)
    if session.is_over():
        print("Solved!", file=stream)
