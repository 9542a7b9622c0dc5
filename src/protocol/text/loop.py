from __future__ import annotations

import logging
import sys
from typing import Callable, Iterable, List, Optional

from ...engine.errors import ChessError
from ...engine.game import Game
from ...engine.move import square_to_str, str_to_square
from ...engine.movegen import reachable_targets
from ...engine.render import render_bitsets, render_board, render_status, square_names


Writer = Callable[[str], None]

logger = logging.getLogger(__name__)

MAX_MOVES_SHOWN = 50

HELP_LINES = (
    "Commands:",
    "  e2      show the squares the piece on e2 can move to",
    "  e2e4    move the piece on e2 to e4",
    "  moves   list moves for the side to move",
    "  board   print the board",
    "  fen     print the position as FEN",
    "  bits    dump piece and occupancy bitsets",
    "  q       quit",
)


class TextSession:
    """Interactive two-player session driven by coordinate commands.

    Notes:
    - The engine stays pure; reading and writing lines happens here.
    - Errors from the engine are printed and the session continues.
    """

    def __init__(self, game: Optional[Game] = None) -> None:
        self.game: Game = game if game is not None else Game.new()

    # ---- Output helpers ----
    def show_position(self, write: Writer) -> None:
        for line in render_status(self.game.board):
            write(line)
        write(render_board(self.game.board))

    def cmd_targets(self, square: str, write: Writer) -> None:
        from_sq = str_to_square(square)
        targets = reachable_targets(self.game.board, from_sq)
        write(f"Valid moves from {square_to_str(from_sq)}: {', '.join(square_names(targets))}")

    def cmd_move(self, text: str, write: Writer) -> None:
        move = self.game.play(text)
        write(f"Played {move}")
        self.show_position(write)

    def cmd_moves(self, write: Writer) -> None:
        moves = self.game.legal_moves()
        shown = [m.to_coordinates() for m in moves[:MAX_MOVES_SHOWN]]
        write(
            f"{self.game.side_to_move} moves ({len(shown)} of {len(moves)} shown): "
            + ", ".join(shown)
        )

    def cmd_bits(self, write: Writer) -> None:
        for line in render_bitsets(self.game.board):
            write(line)

    # ---- Dispatch ----
    def handle(self, line: str, write: Writer) -> bool:
        """Run one command line. Returns False once the session should end."""
        cmd = line.strip()
        if not cmd:
            return True
        if cmd in ("q", "quit"):
            return False
        try:
            if cmd == "board":
                self.show_position(write)
            elif cmd == "fen":
                write(self.game.to_fen())
            elif cmd == "moves":
                self.cmd_moves(write)
            elif cmd == "bits":
                self.cmd_bits(write)
            elif cmd == "help":
                for help_line in HELP_LINES:
                    write(help_line)
            elif len(cmd) == 2:
                self.cmd_targets(cmd, write)
            elif len(cmd) == 4:
                self.cmd_move(cmd, write)
            else:
                write("Wrong move syntax! Type 'help' for commands.")
        except ChessError as e:
            logger.debug("command failed", extra={"command": cmd, "error": str(e)})
            write(f"Error: {e}")
        return True


def _default_writer(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_text(
    game: Optional[Game] = None,
    lines: Optional[Iterable[str]] = None,
    write: Writer = _default_writer,
) -> None:
    session = TextSession(game)
    session.show_position(write)
    source: Iterable[str] = lines if lines is not None else sys.stdin
    for raw in source:
        if not session.handle(raw, write):
            break


def collect(lines: Iterable[str], game: Optional[Game] = None) -> List[str]:
    """Run a scripted session and return everything it wrote."""
    out: List[str] = []
    run_text(game, lines, out.append)
    return out
