"""Persistent game document store.

Each saved game is a JSON document under ``local_db/collections/games/``.
A document holds the raw board, the target solution, every piece with its
position and placed flag, the current selection and both history stacks,
so a reloaded session can keep undoing where the saved one left off.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.constants import BaseShade, Command
from ..core.exceptions import GameLoadError, NoActivePieceError, TrichrominoError
from ..core.models import PlacementNode
from ..utils.logger import get_logger
from .grid import GameGrid
from .piece import Piece
from .session import Session, SessionConfig


LOGGER = get_logger(__name__)

DEFAULT_STORE_DIR = Path("local_db/collections/games")
RECORD_VERSION = 1


# ----------------------------------------------------------------------
# Record conversion
# ----------------------------------------------------------------------
def session_to_record(session: Session) -> Dict[str, Any]:
    if session.is_empty():
        raise NoActivePieceError("Cannot save an empty game")
    grid = session.grid
    return {
        "version": RECORD_VERSION,
        "height": grid.height,
        "width": grid.width,
        "cells": grid.to_jsonable(),
        "solution": [[shade.value for shade in line] for line in session.solution],
        "pieces": [
            {
                "color": node.piece.color.value,
                "rows": [[value.value for value in line] for line in node.piece.rows()],
                "row": node.row,
                "col": node.col,
                "placed": node.placed,
            }
            for node in session.nodes
        ],
        "current_index": session.current_index,
        "undo": [command.value for command in session.undo_stack],
        "redo": [command.value for command in session.redo_stack],
        "max_undo": session.config.max_undo,
    }


def session_from_record(record: Dict[str, Any]) -> Session:
    """Rebuild a session and check that its pieces reproduce the stored board."""

    try:
        return _rebuild(record)
    except GameLoadError:
        raise
    except (KeyError, TypeError, ValueError, TrichrominoError) as exc:
        raise GameLoadError(f"Malformed game record: {exc}") from exc


def _rebuild(record: Dict[str, Any]) -> Session:
    version = record.get("version")
    if version != RECORD_VERSION:
        raise GameLoadError(f"Unsupported game record version: {version!r}")

    height, width = int(record["height"]), int(record["width"])
    cells = record["cells"]
    if len(cells) != height or any(len(line) != width for line in cells):
        raise GameLoadError(f"Stored cells do not form a {height}x{width} grid")

    grid = GameGrid(height, width)
    for r, line in enumerate(cells):
        for c, cell in enumerate(line):
            if cell.get("trap"):
                grid.set_trap(r, c)

    nodes: List[PlacementNode] = []
    for entry in record["pieces"]:
        piece = Piece.from_jsonable({"color": entry["color"], "rows": entry["rows"], "sealed": True})
        node = PlacementNode(piece=piece, row=int(entry["row"]), col=int(entry["col"]))
        if entry.get("placed"):
            grid.place_node(node)
        nodes.append(node)

    rebuilt = grid.to_jsonable()
    stored = [
        [{"base": BaseShade(cell["base"]).value, "trap": bool(cell.get("trap"))} for cell in line]
        for line in cells
    ]
    if rebuilt != stored:
        raise GameLoadError("Placed pieces do not reproduce the stored board")

    config = SessionConfig(max_undo=int(record.get("max_undo", SessionConfig.max_undo)))
    session = Session(grid, record["solution"], nodes, record.get("current_index", 0), config)
    session.undo_stack.extend(Command(value) for value in record.get("undo", []))
    session.redo_stack.extend(Command(value) for value in record.get("redo", []))
    return session


# ----------------------------------------------------------------------
# Store
# ----------------------------------------------------------------------
class GameStore:
    """Save and load game sessions as JSON documents."""

    def __init__(self, store_dir: Path | str = DEFAULT_STORE_DIR) -> None:
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def save(self, session: Session, seed: Optional[int] = None) -> str:
        """Persist ``session`` and return its document ID."""
        record = session_to_record(session)
        doc_id = self._new_id()
        doc = {
            "id": doc_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "seed": seed,
            "stats": {
                "pieces": len(session.nodes),
                "placed": session.nodes_placed(),
                "traps": len(session.grid.traps()),
                "solved": session.is_over(),
            },
            "game": record,
        }
        path = self.store_dir / f"{doc_id}.json"
        path.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
        LOGGER.info("Game saved: %s", doc_id)
        return doc_id

    def load(self, doc_id: str) -> Session:
        path = self.store_dir / f"{doc_id}.json"
        if not path.exists():
            raise GameLoadError(f"No saved game with id {doc_id!r}")
        try:
            doc = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise GameLoadError(f"Saved game {doc_id!r} is not valid JSON: {exc}") from exc
        if not isinstance(doc, dict) or "game" not in doc:
            raise GameLoadError(f"Saved game {doc_id!r} has no game record")
        session = session_from_record(doc["game"])
        LOGGER.info("Game loaded: %s (%d pieces)", doc_id, len(session.nodes))
        return session

    def list_ids(self) -> List[str]:
        return sorted(path.stem for path in self.store_dir.glob("*.json"))

    @staticmethod
    def _new_id() -> str:
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        short_uuid = uuid.uuid4().hex[:8]
        return f"{ts}_{short_uuid}"
