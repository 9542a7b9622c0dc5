#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys

# Allow running this script directly via `python scripts/targets.py`
# by adding the repo root (which contains `src/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from src.engine.board import Board, STARTPOS_FEN
from src.engine.errors import ChessError
from src.engine.move import square_to_str, str_to_square
from src.engine.movegen import reachable_targets, side_targets


def main() -> None:
    parser = argparse.ArgumentParser(description="Print pseudo-legal targets for a FEN")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument(
        "--square", type=str, default=None, help="Only this origin square, e.g. e2"
    )
    args = parser.parse_args()

    try:
        board = Board.from_fen(args.fen)
        if args.square:
            origins = [(str_to_square(args.square), None)]
        else:
            origins = list(side_targets(board))
    except ChessError as e:
        parser.error(str(e))

    total = 0
    for from_sq, targets in origins:
        if targets is None:
            targets = reachable_targets(board, from_sq)
        names = [square_to_str(sq) for sq in targets]
        total += len(names)
        print(f"{square_to_str(from_sq)} {targets} {' '.join(names)}")
    print(f"origins={len(origins)} targets={total}")


if __name__ == "__main__":
    main()
