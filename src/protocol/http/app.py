from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    chess_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...engine.board import STARTPOS_FEN, Board
from ...engine.errors import ChessError
from ...engine.game import Game
from ...engine.move import square_to_str, str_to_square
from ...engine.movegen import reachable_targets, side_targets
from ...engine.piece import PIECE_ORDER
from ...engine.render import board_rows


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="FEN string; start position if omitted")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Coordinate pair, e.g., e2e4")


class TargetsResponse(BaseModel):
    square: str
    targets: list[str]
    mask: str


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    castling: str
    board: list[str]
    pieces: Dict[str, str]
    occupied: list[str]
    moves: Dict[str, list[str]]


def create_app(default_fen: str = STARTPOS_FEN) -> FastAPI:
    app = FastAPI(title="Chess Session API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessError, chess_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    # Validate the default position once so a bad config fails at startup
    Board.from_fen(default_fen)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        fen = req.fen if req is not None and req.fen is not None else default_fen
        game_id = store.create(Game.from_fen(fen))
        game = _require_game(store, game_id)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(store, game_id)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(store, game_id)
        store.set(game_id, Game.from_fen(req.fen))
        return _state(store, game_id)

    @app.get("/api/games/{game_id}/targets/{square}", response_model=TargetsResponse)
    async def get_targets(game_id: str, square: str) -> TargetsResponse:
        board = store.snapshot(game_id)
        if board is None:
            raise HTTPException(status_code=404, detail="game not found")
        targets = reachable_targets(board, str_to_square(square))
        return TargetsResponse(
            square=square,
            targets=[square_to_str(sq) for sq in targets],
            mask=str(targets),
        )

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        game.play(req.move)
        return _state(store, game_id)

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state(store: InMemorySessionStore, game_id: str) -> GameState:
    board = store.snapshot(game_id)
    if board is None:
        raise HTTPException(status_code=404, detail="game not found")
    return GameState(
        game_id=game_id,
        fen=board.to_fen(),
        side_to_move=board.side_to_move.fen,
        castling=board.castling_str(),
        board=board_rows(board),
        pieces={str(p): str(bits) for p, bits in zip(PIECE_ORDER, board.pieces)},
        occupied=[str(bits) for bits in board.occupied],
        moves={
            square_to_str(from_sq): [square_to_str(sq) for sq in targets]
            for from_sq, targets in side_targets(board)
        },
    )


# Default app for non-factory servers
app = create_app()
