from __future__ import annotations

from typing import List

from .board import CASTLING_FLAGS, Board
from .move import square_to_str
from .piece import PIECE_ORDER
from .squareset import SquareSet


FILES = "abcdefgh"
RULE = "-" * 41


def board_rows(board: Board) -> List[str]:
    """Eight strings, top row first, using ``-`` for empty squares."""
    rows: List[str] = []
    for rank_idx in range(8):
        row = []
        for file_idx in range(8):
            piece = board.piece_at(rank_idx * 8 + file_idx)
            row.append(str(piece) if piece is not None else "-")
        rows.append("".join(row))
    return rows


def render_board(board: Board) -> str:
    file_line = "      " + "".join(f"{f}   " for f in FILES)
    lines = [RULE, file_line, "    " + "-" * 33 + "    "]
    for rank_idx, row in enumerate(board_rows(board)):
        label = 8 - rank_idx
        cells = "".join(f"{ch} | " for ch in row)
        lines.append(f"  {label} | {cells}{label}")
    lines.extend(["    " + "-" * 33 + "    ", file_line, RULE])
    return "\n".join(lines)


def render_status(board: Board) -> List[str]:
    castling = "".join(
        ch if flag else "-" for ch, flag in zip(CASTLING_FLAGS, board.can_castle)
    )
    return [f"Turn: {board.side_to_move}", f"Castling: {castling}"]


def render_bitsets(board: Board) -> List[str]:
    lines = ["Bitsets:"]
    for piece in PIECE_ORDER:
        lines.append(f"    {piece}     - {board.pieces[piece]}")
    lines.append("Occupied:")
    for label, bits in zip(("Both ", "White", "Black"), board.occupied):
        lines.append(f"    {label} - {bits}")
    return lines


def square_names(squares: SquareSet) -> List[str]:
    return [square_to_str(sq) for sq in squares]
