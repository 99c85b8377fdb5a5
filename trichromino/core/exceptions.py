"""Custom exception hierarchy for the trichromino engine."""


class TrichrominoError(Exception):
    """Base exception for engine failures."""


class OccupancyError(TrichrominoError):
    """Raised when a cell, piece or node is already in (or not in) the required state."""


class BoundsError(TrichrominoError, IndexError):
    """Raised when coordinates or a piece box fall outside the grid or piece matrix."""


class InvalidCommandError(TrichrominoError, ValueError):
    """Raised for a command, direction or history action outside the known vocabulary."""


class NoActivePieceError(TrichrominoError):
    """Raised when a session operation needs a current piece but the game is empty."""


class GenerationError(TrichrominoError):
    """Raised when the generator cannot finish packing the grid."""


class GameLoadError(TrichrominoError):
    """Raised when a persisted game record is malformed or inconsistent."""
