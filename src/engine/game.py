from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .board import Board
from .errors import InvalidMove
from .move import Move, parse_coordinates, square_to_str, str_to_square
from .movegen import reachable_targets, side_targets
from .piece import Color, Piece
from .squareset import SquareSet


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a board with coordinate-level helpers.

    Responsibility: own the board for one session, answer target queries,
    apply moves given as coordinate pairs.
    """

    board: Board

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    @property
    def side_to_move(self) -> Color:
        return self.board.side_to_move

    def piece_at(self, square: str) -> Optional[Piece]:
        return self.board.piece_at(str_to_square(square))

    def targets(self, square: str) -> SquareSet:
        return reachable_targets(self.board, str_to_square(square))

    def target_names(self, square: str) -> List[str]:
        return [square_to_str(sq) for sq in self.targets(square)]

    def legal_moves(self) -> List[Move]:
        """Every pseudo-legal move of the side to move, ordered by origin."""
        moves: List[Move] = []
        for from_sq, targets in side_targets(self.board):
            for to_sq in targets:
                text = square_to_str(from_sq) + square_to_str(to_sq)
                moves.append(parse_coordinates(self.board, text))
        return moves

    def apply_move(self, move: Move) -> None:
        try:
            self.board.make_move(move)
        except InvalidMove as e:
            logger.info("move rejected", extra={"move": move.to_coordinates(), "reason": str(e)})
            raise
        logger.info(
            "move applied",
            extra={"move": move.to_coordinates(), "side_to_move": self.board.side_to_move.fen},
        )

    def play(self, text: str) -> Move:
        """Parse a coordinate pair such as ``"e2e4"`` and apply it."""
        move = parse_coordinates(self.board, text)
        self.apply_move(move)
        return move
