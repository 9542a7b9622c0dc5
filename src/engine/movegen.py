from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Sequence, Tuple

from .piece import Color, Piece, PieceType
from .squareset import SquareSet

if TYPE_CHECKING:
    from .board import Board


logger = logging.getLogger(__name__)


# Castling flag indices into Board.can_castle
WHITE_KINGSIDE, WHITE_QUEENSIDE, BLACK_KINGSIDE, BLACK_QUEENSIDE = range(4)

# Rank 0 is the top row, so white's back rank is row 7 (squares 56..63).
KING_HOME = {Color.WHITE: 60, Color.BLACK: 4}
ROOK_HOME = {
    WHITE_KINGSIDE: 63,
    WHITE_QUEENSIDE: 56,
    BLACK_KINGSIDE: 7,
    BLACK_QUEENSIDE: 0,
}
# flag -> (king target, rook destination)
CASTLING_TARGETS = {
    WHITE_KINGSIDE: (62, 61),
    WHITE_QUEENSIDE: (58, 59),
    BLACK_KINGSIDE: (6, 5),
    BLACK_QUEENSIDE: (2, 3),
}
# flag -> squares between king and rook
CASTLING_PATH = {
    WHITE_KINGSIDE: (61, 62),
    WHITE_QUEENSIDE: (57, 58, 59),
    BLACK_KINGSIDE: (5, 6),
    BLACK_QUEENSIDE: (1, 2, 3),
}

# (file delta, rank delta)
ROOK_DIRECTIONS = ((-1, 0), (1, 0), (0, -1), (0, 1))
BISHOP_DIRECTIONS = ((-1, -1), (1, -1), (-1, 1), (1, 1))
KNIGHT_OFFSETS = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
KING_OFFSETS = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))


def castling_flags_for(color: Color) -> Tuple[int, int]:
    """Return (kingside, queenside) flag indices for ``color``."""
    if color is Color.WHITE:
        return WHITE_KINGSIDE, WHITE_QUEENSIDE
    return BLACK_KINGSIDE, BLACK_QUEENSIDE


def _offset_table(offsets: Sequence[Tuple[int, int]]) -> List[int]:
    table: List[int] = []
    for sq in range(64):
        f, r = sq % 8, sq // 8
        bb = 0
        for df, dr in offsets:
            tf, tr = f + df, r + dr
            if 0 <= tf < 8 and 0 <= tr < 8:
                bb |= 1 << (tr * 8 + tf)
        table.append(bb)
    return table


KNIGHT_ATTACKS = _offset_table(KNIGHT_OFFSETS)
KING_ATTACKS = _offset_table(KING_OFFSETS)


def sliding_targets(
    board: "Board", from_sq: int, color: Color, directions: Sequence[Tuple[int, int]]
) -> SquareSet:
    """Walk each ray until it leaves the board or meets a piece.

    Own pieces end the ray before their square; opposing pieces end it on
    their square (a capture).
    """
    own = board.color_occupancy(color).bits
    opp = board.color_occupancy(color.opposite()).bits
    moves = 0
    f = from_sq % 8
    r = from_sq // 8
    for df, dr in directions:
        tf, tr = f, r
        while True:
            tf += df
            tr += dr
            if not (0 <= tf < 8 and 0 <= tr < 8):
                break
            to_sq = tr * 8 + tf
            if (own >> to_sq) & 1:
                break
            moves |= 1 << to_sq
            if (opp >> to_sq) & 1:
                break
    return SquareSet(moves)


def _bishop_targets(board: "Board", from_sq: int, color: Color) -> SquareSet:
    return sliding_targets(board, from_sq, color, BISHOP_DIRECTIONS)


def _rook_targets(board: "Board", from_sq: int, color: Color) -> SquareSet:
    return sliding_targets(board, from_sq, color, ROOK_DIRECTIONS)


def _queen_targets(board: "Board", from_sq: int, color: Color) -> SquareSet:
    return _rook_targets(board, from_sq, color) | _bishop_targets(board, from_sq, color)


def _knight_targets(board: "Board", from_sq: int, color: Color) -> SquareSet:
    return SquareSet(KNIGHT_ATTACKS[from_sq] & ~board.color_occupancy(color).bits)


def _king_targets(board: "Board", from_sq: int, color: Color) -> SquareSet:
    moves = SquareSet(KING_ATTACKS[from_sq] & ~board.color_occupancy(color).bits)
    if from_sq == KING_HOME[color]:
        moves |= castling_targets(board, color)
    return moves


def castling_targets(board: "Board", color: Color) -> SquareSet:
    """King destinations for castling, from rights, rook presence and empty path.

    Squares the king crosses are not tested for attacks.
    """
    moves = SquareSet()
    occ_all = board.occupied[0].bits
    rook = Piece.of(color, PieceType.ROOK)
    for flag in castling_flags_for(color):
        if not board.can_castle[flag]:
            continue
        if not board.pieces[rook].test(ROOK_HOME[flag]):
            continue
        if any((occ_all >> sq) & 1 for sq in CASTLING_PATH[flag]):
            continue
        moves.set(CASTLING_TARGETS[flag][0])
    return moves


def _pawn_targets(board: "Board", from_sq: int, color: Color) -> SquareSet:
    occ_all = board.occupied[0].bits
    opp = board.color_occupancy(color.opposite()).bits
    f = from_sq % 8
    r = from_sq // 8
    if color is Color.WHITE:
        dr, start_rank = -1, 6
    else:
        dr, start_rank = 1, 1

    moves = 0
    tr = r + dr
    if not 0 <= tr < 8:
        return SquareSet()

    # Pushes: single onto an empty square, double from the start rank over
    # an empty square onto an empty square
    one = tr * 8 + f
    if not (occ_all >> one) & 1:
        moves |= 1 << one
        if r == start_rank:
            two = (r + 2 * dr) * 8 + f
            if not (occ_all >> two) & 1:
                moves |= 1 << two

    # Diagonal captures only onto opposing pieces
    for df in (-1, 1):
        tf = f + df
        if 0 <= tf < 8:
            cap = tr * 8 + tf
            if (opp >> cap) & 1:
                moves |= 1 << cap
    return SquareSet(moves)


_Generator = Callable[["Board", int, Color], SquareSet]

GENERATORS: Dict[PieceType, _Generator] = {
    PieceType.PAWN: _pawn_targets,
    PieceType.KNIGHT: _knight_targets,
    PieceType.BISHOP: _bishop_targets,
    PieceType.ROOK: _rook_targets,
    PieceType.QUEEN: _queen_targets,
    PieceType.KING: _king_targets,
}

_missing = set(PieceType) - set(GENERATORS)
if _missing:
    raise ImportError(f"no move generator for {sorted(p.name for p in _missing)}")


def reachable_targets(board: "Board", from_sq: int) -> SquareSet:
    """Return the pseudo-legal destinations of the piece on ``from_sq``.

    An empty square, or a piece of the side not to move, yields an empty set.
    Moves that leave the mover's own king attacked are not filtered out.

    Args:
        board (Board): Position to read; it is not modified.
        from_sq (int): Origin square index in 0..63.

    Returns:
        SquareSet: Destination squares.
    """
    piece = board.piece_at(from_sq)
    if piece is None:
        return SquareSet()
    if piece.color is not board.side_to_move:
        logger.debug("out of turn query", extra={"square": from_sq, "piece": str(piece)})
        return SquareSet()
    return GENERATORS[piece.piece_type](board, from_sq, piece.color)


def side_targets(board: "Board") -> List[Tuple[int, SquareSet]]:
    """All origins of the side to move that have at least one target."""
    result: List[Tuple[int, SquareSet]] = []
    for from_sq in board.color_occupancy(board.side_to_move):
        targets = reachable_targets(board, from_sq)
        if targets:
            result.append((from_sq, targets))
    return result
