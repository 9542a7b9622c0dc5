from __future__ import annotations

from enum import Enum, IntEnum


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def occupancy_index(self) -> int:
        """Slot of this color in ``Board.occupied`` (slot 0 holds all pieces)."""
        return 1 if self is Color.WHITE else 2

    @property
    def fen(self) -> str:
        return self.value

    @classmethod
    def from_fen(cls, ch: str) -> "Color":
        for color in cls:
            if color.value == ch:
                return color
        raise ValueError(f"invalid side to move: {ch!r}")

    def __str__(self) -> str:
        return "White" if self is Color.WHITE else "Black"


class PieceType(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


class Piece(IntEnum):
    """The 12 piece identities; the value is the bitboard index."""

    WHITE_PAWN = 0
    WHITE_KNIGHT = 1
    WHITE_BISHOP = 2
    WHITE_ROOK = 3
    WHITE_QUEEN = 4
    WHITE_KING = 5
    BLACK_PAWN = 6
    BLACK_KNIGHT = 7
    BLACK_BISHOP = 8
    BLACK_ROOK = 9
    BLACK_QUEEN = 10
    BLACK_KING = 11

    @property
    def index(self) -> int:
        return int(self)

    @property
    def color(self) -> Color:
        return Color.WHITE if self < 6 else Color.BLACK

    @property
    def piece_type(self) -> PieceType:
        return _TYPE_ORDER[int(self) % 6]

    @property
    def char(self) -> str:
        return PIECE_TO_CHAR[self]

    @classmethod
    def of(cls, color: Color, piece_type: PieceType) -> "Piece":
        offset = 0 if color is Color.WHITE else 6
        return cls(offset + _TYPE_ORDER.index(piece_type))

    @classmethod
    def from_index(cls, index: int) -> "Piece":
        if not 0 <= index < 12:
            raise ValueError(f"invalid piece index: {index}")
        return cls(index)

    @classmethod
    def from_char(cls, ch: str) -> "Piece":
        """Look up a piece from its FEN letter (uppercase = white)."""
        try:
            return CHAR_TO_PIECE[ch]
        except KeyError:
            raise ValueError(f"invalid piece character: {ch!r}") from None

    def __str__(self) -> str:
        return PIECE_TO_CHAR[self]

    def __format__(self, spec: str) -> str:
        return format(PIECE_TO_CHAR[self], spec)


_TYPE_ORDER = (
    PieceType.PAWN,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
    PieceType.KING,
)

# Short aliases for bitboard indices
WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK = list(Piece)
PIECE_ORDER = list(Piece)
PIECE_TO_CHAR = {
    WP: "P",
    WN: "N",
    WB: "B",
    WR: "R",
    WQ: "Q",
    WK: "K",
    BP: "p",
    BN: "n",
    BB: "b",
    BR: "r",
    BQ: "q",
    BK: "k",
}
CHAR_TO_PIECE = {v: k for k, v in PIECE_TO_CHAR.items()}
