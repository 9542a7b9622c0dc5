from __future__ import annotations


class ChessError(ValueError):
    """Base class for errors a session caller can recover from."""


class MalformedDescriptor(ChessError):
    """A FEN position description could not be parsed."""


class OutOfBoundsCoordinate(ChessError):
    """A coordinate or square index lies outside the 8x8 board."""


class InvalidMove(ChessError):
    """A proposed move is not pseudo-legal in the current position."""


class BoardInvariantError(AssertionError):
    """Internal board state is inconsistent (a programming error)."""
