"""Trichromino: a sliding polyomino shading puzzle.

This package exposes the public API surface via:

- ``trichromino.engine.generator.PuzzleGenerator``: packs a board with pieces.
- ``trichromino.engine.session.Session``: the playable game with undo/redo.
- ``trichromino.engine.game_store.GameStore``: JSON save and load.
"""

from .engine.game_store import GameStore
from .engine.generator import GeneratorConfig, PuzzleGenerator
from .engine.grid import GameGrid
from .engine.piece import Piece
from .engine.session import Session, SessionConfig

__all__ = [
    "GameGrid",
    "GameStore",
    "GeneratorConfig",
    "Piece",
    "PuzzleGenerator",
    "Session",
    "SessionConfig",
]

__version__ = "0.1.0"
