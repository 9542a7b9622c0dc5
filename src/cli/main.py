from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from ..engine.board import STARTPOS_FEN
from ..engine.errors import MalformedDescriptor
from ..engine.game import Game
from ..protocol.text.loop import run_text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chess-session", description="Two-player chess session over text or HTTP"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    play = sub.add_parser("play", help="Interactive session on stdin/stdout")
    play.add_argument("--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)")

    serve = sub.add_parser("serve", help="Serve the HTTP session API")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="Position for new games (default: startpos)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))
    command = args.command or "play"
    fen = getattr(args, "fen", STARTPOS_FEN)

    try:
        game = Game.from_fen(fen)
    except MalformedDescriptor as e:
        print(f"invalid FEN: {e}", file=sys.stderr)
        return 2

    if command == "serve":
        from ..protocol.http.app import create_app

        uvicorn.run(create_app(default_fen=fen), host=args.host, port=args.port)
        return 0

    run_text(game)
    return 0


if __name__ == "__main__":
    sys.exit(main())
