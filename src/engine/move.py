from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .errors import InvalidMove, OutOfBoundsCoordinate
from .piece import Piece, PieceType

if TYPE_CHECKING:
    from .board import Board


class MoveKind(Enum):
    NORMAL = "normal"
    CAPTURE = "capture"
    CASTLING = "castling"


# (king from, king to) pairs for the four castling moves: K, Q, k, q
CASTLING_MOVES = (
    (60, 62),
    (60, 58),
    (4, 6),
    (4, 2),
)


@dataclass(frozen=True)
class Move:
    """A proposed move, consumed immediately by ``Board.make_move``.

    Attributes:
        from_sq (int): Origin square index.
        to_sq (int): Destination square index.
        piece (Piece): Identity of the moving piece.
        kind (MoveKind): Normal move, capture, or castling.
        captured (Optional[Piece]): Captured identity when ``kind`` is CAPTURE.
    """

    from_sq: int
    to_sq: int
    piece: Piece
    kind: MoveKind = MoveKind.NORMAL
    captured: Optional[Piece] = None

    def __post_init__(self) -> None:
        if (self.kind is MoveKind.CAPTURE) != (self.captured is not None):
            raise ValueError("captured piece must be given exactly for capture moves")

    def to_coordinates(self) -> str:
        """Serialize as two concatenated squares, e.g. ``"e2e4"``."""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq)

    def __str__(self) -> str:
        sep = "x" if self.kind is MoveKind.CAPTURE else "-"
        return f"{self.piece}{square_to_str(self.from_sq)}{sep}{square_to_str(self.to_sq)}"


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a square index.

    Rank 8 maps to row 0, so ``"a8"`` is 0 and ``"h1"`` is 63.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Square index ``rank * 8 + file``.

    Raises:
        OutOfBoundsCoordinate: If ``s`` is not a square on the board.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise OutOfBoundsCoordinate(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = 8 - int(s[1])
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a square index into algebraic notation.

    Raises:
        OutOfBoundsCoordinate: If ``idx`` is outside 0..63.
    """
    if idx < 0 or idx > 63:
        raise OutOfBoundsCoordinate(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(8 - rank)


def parse_coordinates(board: "Board", text: str) -> Move:
    """Build a Move from a four-character coordinate pair like ``"e2e4"``.

    The kind is read off the board: a king moving from its home square to a
    castling target is CASTLING, an occupied destination is a CAPTURE of
    that occupant, anything else is NORMAL. Whether the move is actually
    allowed is decided later by ``Board.make_move``.

    Raises:
        OutOfBoundsCoordinate: If either square is malformed.
        InvalidMove: If the origin square is empty.
    """
    text = text.strip()
    if len(text) != 4:
        raise OutOfBoundsCoordinate(f"invalid coordinate pair: {text!r}")
    from_sq = str_to_square(text[0:2])
    to_sq = str_to_square(text[2:4])

    piece = board.piece_at(from_sq)
    if piece is None:
        raise InvalidMove(f"no piece on {text[0:2]}")

    if piece.piece_type is PieceType.KING and (from_sq, to_sq) in CASTLING_MOVES:
        return Move(from_sq, to_sq, piece, MoveKind.CASTLING)
    target = board.piece_at(to_sq)
    if target is not None:
        return Move(from_sq, to_sq, piece, MoveKind.CAPTURE, captured=target)
    return Move(from_sq, to_sq, piece)
