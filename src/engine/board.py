from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import BoardInvariantError, InvalidMove, MalformedDescriptor
from .move import Move, MoveKind, square_to_str
from .movegen import (
    CASTLING_TARGETS,
    KING_HOME,
    ROOK_HOME,
    castling_flags_for,
    reachable_targets,
)
from .piece import CHAR_TO_PIECE, PIECE_ORDER, PIECE_TO_CHAR, Color, Piece, PieceType
from .squareset import SquareSet


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
EMPTY_FEN = "8/8/8/8/8/8/8/8 w KQkq - 0 1"

# Castling flag letters in can_castle order
CASTLING_FLAGS = "KQkq"


@dataclass
class Board:
    """Board state with bitboards and FEN I/O.

    Notes:
    - Squares are 0..63 as ``rank * 8 + file`` with a8=0 .. h1=63, so rank 0
      is the top row as printed.
    - ``occupied`` mirrors ``pieces``: slot 0 is every piece, slot 1 white,
      slot 2 black. Only ``place`` and ``remove`` write to either.
    - Move generation is pseudo-legal; king safety is never considered.
    """

    # 12 piece bitboards, indexed by Piece
    pieces: List[SquareSet] = field(default_factory=lambda: [SquareSet() for _ in range(12)])
    occupied: List[SquareSet] = field(default_factory=lambda: [SquareSet() for _ in range(3)])
    side_to_move: Color = Color.WHITE
    # [K, Q, k, q]; flags only ever go from True to False
    can_castle: List[bool] = field(default_factory=lambda: [True] * 4)
    # en passant, halfmove and fullmove fields, carried verbatim
    extra_fields: Tuple[str, str, str] = ("-", "0", "1")

    @classmethod
    def empty(cls) -> "Board":
        """Empty board, White to move, every castling flag set."""
        return cls()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board instance initialized with state encoded in ``fen``.

        Raises:
            MalformedDescriptor: If ``fen`` is empty, has the wrong number of
                fields, or contains invalid piece placement, side to move or
                castling rights.

        Notes:
            The last three fields (en passant, halfmove, fullmove) are kept as
            text for ``to_fen`` and otherwise ignored.
        """
        if not fen or not isinstance(fen, str):
            raise MalformedDescriptor("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise MalformedDescriptor("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        board = cls(extra_fields=(ep, halfmove, fullmove))

        # Parse piece placement; the first rank in the string is row 0
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise MalformedDescriptor("FEN board must have 8 ranks")
        for rank_idx, rank in enumerate(ranks):
            file_idx = 0
            for ch in rank:
                if ch in "12345678":
                    file_idx += int(ch)
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise MalformedDescriptor(f"invalid piece in FEN: {ch!r}")
                    if file_idx >= 8:
                        raise MalformedDescriptor("too many squares in FEN rank")
                    board.place(rank_idx * 8 + file_idx, CHAR_TO_PIECE[ch])
                    file_idx += 1
            if file_idx != 8:
                raise MalformedDescriptor("rank does not sum to 8 squares in FEN")

        # Side to move
        try:
            board.side_to_move = Color.from_fen(stm)
        except ValueError as e:
            raise MalformedDescriptor("side to move must be 'w' or 'b'") from e

        # Castling rights
        if castling == "-":
            board.can_castle = [False] * 4
        else:
            if len(set(castling)) != len(castling) or any(
                ch not in CASTLING_FLAGS for ch in castling
            ):
                raise MalformedDescriptor("invalid castling rights")
            board.can_castle = [ch in castling for ch in CASTLING_FLAGS]

        return board

    def to_fen(self) -> str:
        """Serialize the current position into a FEN string."""
        ranks_str: List[str] = []
        for rank_idx in range(8):
            run = 0
            row = []
            for file_idx in range(8):
                piece = self.piece_at(rank_idx * 8 + file_idx)
                if piece is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(PIECE_TO_CHAR[piece])
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)
        ep, halfmove, fullmove = self.extra_fields
        return f"{placement} {self.side_to_move.fen} {self.castling_str()} {ep} {halfmove} {fullmove}"

    def castling_str(self) -> str:
        """Castling rights as FEN letters, or ``"-"`` when none remain."""
        rights = "".join(ch for ch, flag in zip(CASTLING_FLAGS, self.can_castle) if flag)
        return rights or "-"

    # ---- Square access ----
    def piece_at(self, sq: int) -> Optional[Piece]:
        """Return the piece on ``sq`` by probing the 12 piece sets in order."""
        for piece in PIECE_ORDER:
            if self.pieces[piece].test(sq):
                return piece
        return None

    def place(self, sq: int, piece: Piece) -> None:
        """Put ``piece`` on ``sq``, evicting whatever stood there."""
        prior = self.piece_at(sq)
        if prior is not None:
            self.remove(sq, prior)
        self.pieces[piece].set(sq)
        self.occupied[0].set(sq)
        self.occupied[piece.color.occupancy_index].set(sq)

    def remove(self, sq: int, piece: Piece) -> None:
        """Take ``piece`` off ``sq``; a no-op if it is not there."""
        if not self.pieces[piece].test(sq):
            return
        self.pieces[piece].clear(sq)
        self.occupied[0].clear(sq)
        self.occupied[piece.color.occupancy_index].clear(sq)

    def color_occupancy(self, color: Color) -> SquareSet:
        return self.occupied[color.occupancy_index]

    def copy(self) -> "Board":
        """Independent snapshot of this position."""
        return Board(
            pieces=[s.copy() for s in self.pieces],
            occupied=[s.copy() for s in self.occupied],
            side_to_move=self.side_to_move,
            can_castle=list(self.can_castle),
            extra_fields=self.extra_fields,
        )

    def check_invariants(self) -> None:
        """Verify piece sets are disjoint and occupancy mirrors them.

        Raises:
            BoardInvariantError: If two identities share a square or an
                occupancy set disagrees with the union it caches.
        """
        seen = 0
        by_color = {Color.WHITE: 0, Color.BLACK: 0}
        for piece in PIECE_ORDER:
            bits = self.pieces[piece].bits
            if seen & bits:
                clash = square_to_str(((seen & bits) & -(seen & bits)).bit_length() - 1)
                raise BoardInvariantError(f"two pieces claim square {clash}")
            seen |= bits
            by_color[piece.color] |= bits
        if self.occupied[0].bits != seen:
            raise BoardInvariantError("occupied[0] does not match the piece sets")
        for color, bits in by_color.items():
            if self.occupied[color.occupancy_index].bits != bits:
                raise BoardInvariantError(f"{color} occupancy does not match its piece sets")

    # ---- Move generation / application ----
    def reachable_targets(self, from_sq: int) -> SquareSet:
        return reachable_targets(self, from_sq)

    def make_move(self, move: Move) -> None:
        """Apply ``move`` in place after checking it against move generation.

        Raises:
            InvalidMove: If the move does not match the piece on the origin
                square, the side to move, the generated targets, or the
                board contents at the destination. The board is untouched.
        """
        self._validate(move)
        color = move.piece.color
        kingside, queenside = castling_flags_for(color)

        if move.captured is not None:
            self.remove(move.to_sq, move.captured)
        self.remove(move.from_sq, move.piece)
        self.place(move.to_sq, move.piece)

        if move.kind is MoveKind.CASTLING:
            flag = kingside if move.to_sq % 8 == 6 else queenside
            rook = Piece.of(color, PieceType.ROOK)
            self.remove(ROOK_HOME[flag], rook)
            self.place(CASTLING_TARGETS[flag][1], rook)

        # Castling rights: any king move, or a rook leaving its home corner
        if move.piece.piece_type is PieceType.KING:
            self.can_castle[kingside] = False
            self.can_castle[queenside] = False
        elif move.piece.piece_type is PieceType.ROOK:
            for flag in (kingside, queenside):
                if move.from_sq == ROOK_HOME[flag]:
                    self.can_castle[flag] = False

        self.side_to_move = self.side_to_move.opposite()

    def _validate(self, move: Move) -> None:
        occupant = self.piece_at(move.from_sq)
        if occupant is None:
            raise InvalidMove(f"no piece on {square_to_str(move.from_sq)}")
        if occupant is not move.piece:
            raise InvalidMove(
                f"{square_to_str(move.from_sq)} holds {occupant}, not {move.piece}"
            )
        if occupant.color is not self.side_to_move:
            raise InvalidMove(f"it is {self.side_to_move}'s turn")
        if not reachable_targets(self, move.from_sq).test(move.to_sq):
            raise InvalidMove(
                f"{occupant} cannot move from {square_to_str(move.from_sq)}"
                f" to {square_to_str(move.to_sq)}"
            )

        target = self.piece_at(move.to_sq)
        is_castle = (
            move.piece.piece_type is PieceType.KING
            and move.from_sq == KING_HOME[move.piece.color]
            and abs(move.to_sq - move.from_sq) == 2
        )
        if move.kind is MoveKind.CASTLING and not is_castle:
            raise InvalidMove("not a castling move")
        if move.kind is not MoveKind.CASTLING and is_castle:
            raise InvalidMove("castling move must be marked as castling")
        if move.kind is MoveKind.CAPTURE and target is not move.captured:
            raise InvalidMove(
                f"{square_to_str(move.to_sq)} does not hold {move.captured}"
            )
        if move.kind is not MoveKind.CAPTURE and target is not None:
            raise InvalidMove(f"{square_to_str(move.to_sq)} is occupied by {target}")
