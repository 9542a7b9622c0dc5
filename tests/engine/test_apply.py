from __future__ import annotations

import pytest

from src.engine.board import Board, STARTPOS_FEN
from src.engine.errors import InvalidMove
from src.engine.move import Move, MoveKind, parse_coordinates, str_to_square
from src.engine.piece import BP, BR, Color, WK, WP, WR


def play(b: Board, text: str) -> None:
    b.make_move(parse_coordinates(b, text))


def snapshot(b: Board) -> tuple:
    return (
        [s.bits for s in b.pieces],
        [s.bits for s in b.occupied],
        b.side_to_move,
        list(b.can_castle),
    )


def test_pawn_push_updates_board_and_side() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    play(b, "e2e4")
    assert b.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    assert b.side_to_move is Color.BLACK
    b.check_invariants()


def test_rejects_unreachable_destination_without_mutation() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    before = snapshot(b)
    with pytest.raises(InvalidMove):
        b.make_move(Move(str_to_square("e2"), str_to_square("e5"), WP))
    assert snapshot(b) == before


def test_rejects_out_of_turn_move() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    before = snapshot(b)
    with pytest.raises(InvalidMove):
        play(b, "e7e5")
    assert snapshot(b) == before


def test_rejects_empty_origin() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    with pytest.raises(InvalidMove):
        b.make_move(Move(str_to_square("e4"), str_to_square("e5"), WP))


def test_rejects_wrong_piece_identity() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    before = snapshot(b)
    with pytest.raises(InvalidMove):
        b.make_move(Move(str_to_square("e2"), str_to_square("e4"), WR))
    assert snapshot(b) == before


def test_rejects_capture_kind_mismatch() -> None:
    b = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    e4, d5 = str_to_square("e4"), str_to_square("d5")
    before = snapshot(b)
    with pytest.raises(InvalidMove):
        b.make_move(Move(e4, d5, WP))  # capture not declared
    with pytest.raises(InvalidMove):
        b.make_move(Move(e4, d5, WP, MoveKind.CAPTURE, captured=BR))  # wrong victim
    assert snapshot(b) == before


def test_capture_removes_victim() -> None:
    b = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    play(b, "e4d5")
    assert b.piece_at(str_to_square("d5")) is WP
    assert b.piece_at(str_to_square("e4")) is None
    assert not b.pieces[BP]
    assert b.to_fen() == "4k3/8/8/3P4/8/8/8/4K3 b - - 0 1"
    b.check_invariants()


def test_white_kingside_castle_moves_rook() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    mv = parse_coordinates(b, "e1g1")
    assert mv.kind is MoveKind.CASTLING
    b.make_move(mv)
    assert b.pieces[WR].test(str_to_square("f1"))
    assert not b.pieces[WR].test(str_to_square("h1"))
    assert b.to_fen() == "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 0 1"
    b.check_invariants()


def test_black_queenside_castle_moves_rook() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    play(b, "e8c8")
    assert b.to_fen() == "2kr3r/8/8/8/8/8/8/R3K2R w KQ - 0 1"
    b.check_invariants()


def test_castling_must_be_marked() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    with pytest.raises(InvalidMove):
        b.make_move(Move(str_to_square("e1"), str_to_square("g1"), WK))
    with pytest.raises(InvalidMove):
        b.make_move(
            Move(str_to_square("e1"), str_to_square("f1"), WK, MoveKind.CASTLING)
        )


def test_king_step_clears_both_rights() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    play(b, "e1f1")
    assert b.castling_str() == "kq"
    # Returning home does not restore anything
    play(b, "e8f8")
    play(b, "f1e1")
    assert b.castling_str() == "-"
    assert "g1" not in {sq for sq in b.reachable_targets(str_to_square("e1"))}


@pytest.mark.parametrize(
    "move, rights",
    [("h1h5", "Qkq"), ("a1a5", "Kkq")],
)
def test_rook_leaving_home_clears_one_right(move: str, rights: str) -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    play(b, move)
    assert b.castling_str() == rights


def test_black_rook_leaving_home_clears_black_right() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    play(b, "h8h4")
    assert b.castling_str() == "KQq"


def test_rook_away_from_home_keeps_rights() -> None:
    b = Board.from_fen("4k3/8/8/8/7R/8/8/R3K2R w KQ - 0 1")
    play(b, "h4h5")
    assert b.castling_str() == "KQ"


def test_capturing_king_also_loses_rights() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/3p4/R3K2R w KQ - 0 1")
    play(b, "e1d2")
    assert b.castling_str() == "-"


def test_sequence_keeps_invariants() -> None:
    b = Board.startpos()
    for mv in ("e2e4", "e7e5", "g1f3", "b8c6", "f1c4", "g8f6", "e1g1", "f6e4", "f3e5", "c6e5"):
        play(b, mv)
        b.check_invariants()
    assert b.castling_str() == "kq"
    assert b.side_to_move is Color.WHITE
    assert b.to_fen() == "r1bqkb1r/pppp1ppp/8/4n3/2B1n3/8/PPPP1PPP/RNBQ1RK1 w kq - 0 1"
