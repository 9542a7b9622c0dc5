from __future__ import annotations

from typing import List

from src.engine.game import Game
from src.protocol.text.loop import MAX_MOVES_SHOWN, TextSession, collect


def capture_writer(buf: List[str]):
    def _w(line: str) -> None:
        buf.append(line)

    return _w


def test_session_opens_with_position() -> None:
    out = collect([])
    assert out[0] == "Turn: White"
    assert out[1] == "Castling: KQkq"
    assert "  8 | r | n | b | q | k | b | n | r | 8" in out[2]


def test_square_query_lists_targets() -> None:
    sess = TextSession()
    out: List[str] = []
    assert sess.handle("e2", capture_writer(out))
    assert out == ["Valid moves from e2: e4, e3"]


def test_move_then_fen() -> None:
    out = collect(["e2e4", "fen", "q", "fen"])
    assert "Played Pe2-e4" in out
    assert out[-1] == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    # Nothing after quit is processed
    assert sum(1 for line in out if line.startswith("rnbqkbnr/")) == 1


def test_invalid_move_keeps_position() -> None:
    sess = TextSession()
    out: List[str] = []
    sess.handle("e2e5", capture_writer(out))
    assert len(out) == 1 and out[0].startswith("Error: ")
    assert sess.game.to_fen().startswith("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w")


def test_bad_coordinates_and_syntax() -> None:
    sess = TextSession()
    out: List[str] = []
    w = capture_writer(out)
    sess.handle("z9", w)
    sess.handle("e2e4e5", w)
    sess.handle("", w)
    assert out[0].startswith("Error: invalid square")
    assert out[1].startswith("Wrong move syntax!")
    assert len(out) == 2


def test_quit_stops_session() -> None:
    sess = TextSession()
    assert sess.handle("q", capture_writer([])) is False
    assert sess.handle("quit", capture_writer([])) is False


def test_moves_and_bits_commands() -> None:
    sess = TextSession(Game.new())
    out: List[str] = []
    w = capture_writer(out)
    sess.handle("moves", w)
    assert out[0].startswith("White moves (20 of 20 shown): ")
    assert "g1f3" in out[0]
    out.clear()
    sess.handle("bits", w)
    assert out[0] == "Bitsets:"
    assert any(line.startswith("    Both  - ") for line in out)
    assert MAX_MOVES_SHOWN == 50


def test_castle_via_text() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    out = collect(["e1c1", "fen"], game)
    assert out[-1] == "r3k2r/8/8/8/8/8/8/2KR3R b kq - 0 1"
    assert "Castling: --kq" in out
