"""CLI entrypoint for the trichromino puzzle."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, TextIO

from trichromino.core.constants import Direction
from trichromino.core.exceptions import TrichrominoError
from trichromino.engine.game_store import DEFAULT_STORE_DIR, GameStore
from trichromino.engine.generator import GeneratorConfig
from trichromino.engine.session import Session
from trichromino.utils.logger import configure_logging
from trichromino.utils.pretty import format_shades, pretty_print_session


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate and play trichromino shading puzzles",
    )
    parser.add_argument("--height", type=int, default=10, help="Grid height in squares")
    parser.add_argument("--width", type=int, default=10, help="Grid width in squares")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--traps", action="store_true", help="Scatter traps before packing pieces")
    parser.add_argument("--save", action="store_true", help="Save the game to the store")
    parser.add_argument(
        "--store-dir",
        type=Path,
        default=DEFAULT_STORE_DIR,
        help="Directory of saved game documents",
    )
    parser.add_argument("--load", metavar="ID", help="Load a saved game instead of generating one")
    parser.add_argument("--list", action="store_true", help="List saved game IDs and exit")
    parser.add_argument(
        "--solve",
        action="store_true",
        help="Check with the CP-SAT solver that the puzzle can be solved",
    )
    parser.add_argument(
        "--play",
        action="store_true",
        help="Read commands from stdin (left/right/up/down/next/prev/place/displace/undo/redo/hint/clear/quit)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def session_commands(session: Session) -> Dict[str, Callable[[], object]]:
    commands: Dict[str, Callable[[], object]] = {
        direction.value: (lambda d=direction: session.move(d)) for direction in Direction
    }
    commands.update(
        {
            "next": session.select_next,
            "prev": session.select_previous,
            "place": session.place,
            "displace": session.displace,
            "undo": session.undo,
            "redo": session.redo,
            "clear": session.clear,
            "hint": session.hint,
        }
    )
    return commands


def play(session: Session, stream: TextIO, out: TextIO) -> None:
    """Apply one command per input line until ``quit`` or the puzzle is solved."""

    commands = session_commands(session)
    pretty_print_session(session, stream=out)
    for line in stream:
        name = line.strip().lower()
        if not name:
            continue
        if name == "quit":
            break
        action = commands.get(name)
        if action is None:
            print(f"Unknown command {name!r}", file=out)
            continue
        try:
            result = action()
        except TrichrominoError as exc:
            print(f"Cannot {name}: {exc}", file=out)
            continue
        if name == "hint":
            print(f"Hint: {result}", file=out)
            continue
        pretty_print_session(session, stream=out)
        if session.is_over():
            break


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    store = GameStore(args.store_dir)
    if args.list:
        for doc_id in store.list_ids():
            print(doc_id)
        return

    if args.load:
        session = store.load(args.load)
    else:
        config = GeneratorConfig(height=args.height, width=args.width, seed=args.seed)
        session = Session.new_game(config, trapped=args.traps)

    print("Solution:")
    print(format_shades(session.solution))
    print()

    if args.solve:
        print("Solvable" if session.is_solvable() else "No solution found")

    if args.play:
        play(session, sys.stdin, sys.stdout)
    else:
        pretty_print_session(session)

    if args.save:
        if session.is_empty():
            print("Nothing to save: the game is empty")
        else:
            doc_id = store.save(session, seed=args.seed)
            print(f"Saved as {doc_id}")


if __name__ == "__main__":  # pragma: no cover
    main()
