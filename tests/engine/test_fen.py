from __future__ import annotations

import pytest

from src.engine.board import Board, EMPTY_FEN, STARTPOS_FEN
from src.engine.errors import MalformedDescriptor
from src.engine.piece import Color, Piece


def _expand_placement(fen: str) -> list:
    """Placement field as 64 chars/None in square-index order."""
    cells: list = []
    for rank in fen.split()[0].split("/"):
        for ch in rank:
            if ch.isdigit():
                cells.extend([None] * int(ch))
            else:
                cells.append(ch)
    return cells


def test_startpos_round_trip() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert b.to_fen() == STARTPOS_FEN


def test_empty_fen_has_no_pieces() -> None:
    b = Board.from_fen(EMPTY_FEN)
    assert all(b.piece_at(sq) is None for sq in range(64))
    assert b.occupied[0] == 0


def test_startpos_layout() -> None:
    b = Board.startpos()
    # Row 0 is black's back rank
    assert [str(b.piece_at(sq)) for sq in range(8)] == list("rnbqkbnr")
    assert [str(b.piece_at(56 + f)) for f in range(8)] == list("RNBQKBNR")
    for f in range(8):
        assert b.piece_at(8 + f) is Piece.BLACK_PAWN
        assert b.piece_at(48 + f) is Piece.WHITE_PAWN
    for sq in range(16, 48):
        assert b.piece_at(sq) is None
    assert b.side_to_move is Color.WHITE
    assert b.can_castle == [True, True, True, True]


@pytest.mark.parametrize(
    "fen",
    [
        STARTPOS_FEN,
        "r2q1rk1/2p1bppp/p1n1bn2/1p2p3/4P3/2P2N2/PPBN1PPP/R1BQR1K1 w - - 1 12",
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b KQ - 2 3",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPB1PPP/R3KB1R w KQkq - 1 1",
    ],
)
def test_query_reproduces_placement(fen: str) -> None:
    b = Board.from_fen(fen)
    expected = _expand_placement(fen)
    actual = [b.piece_at(sq) for sq in range(64)]
    assert [str(p) if p is not None else None for p in actual] == expected
    assert b.to_fen() == fen


def test_query_is_idempotent() -> None:
    b = Board.startpos()
    for sq in range(64):
        assert b.piece_at(sq) == b.piece_at(sq)


def test_side_and_castling_fields() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b Kq - 0 1")
    assert b.side_to_move is Color.BLACK
    assert b.can_castle == [True, False, False, True]
    assert b.castling_str() == "Kq"

    none = Board.from_fen("8/8/8/8/8/8/8/8 w - - 0 1")
    assert none.can_castle == [False] * 4
    assert none.castling_str() == "-"


def test_trailing_fields_kept_verbatim() -> None:
    fen = "8/8/8/8/8/8/8/8 w - e3 7 42"
    assert Board.from_fen(fen).to_fen() == fen


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "invalid fen string",  # wrong field count
        "8/8/8/8/8/8/8 w - - 0 1",  # not enough ranks
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR/8 w KQkq - 0 1",  # too many ranks
        "8/8/8/8/8/8/8/8 w - - 0",  # missing fields
        "8/8/8/8/8/8/8/8 x - - 0 1",  # bad side to move
        "8/8/8/8/8/8/8/8 w A - 0 1",  # bad castling
        "8/8/8/8/8/8/8/8 w KK - 0 1",  # repeated castling letter
        "9/8/8/8/8/8/8/8 w - - 0 1",  # too many squares
        "rrrrnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # too many files
        "7/8/8/8/8/8/8/8 w - - 0 1",  # too few files
        "Hnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # bad piece
        "0nbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",  # zero skip
        "²7/8/8/8/8/8/8/8 w - - 0 1",  # superscript two
        "٨/8/8/8/8/8/8/8 w - - 0 1",  # arabic-indic eight
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(MalformedDescriptor):
        Board.from_fen(fen)
