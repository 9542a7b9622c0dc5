from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from ...engine.board import Board
from ...engine.game import Game


class InMemorySessionStore:
    """Thread-safe in-memory store of play sessions.

    Each session owns exactly one Game. Readers that need a consistent view
    while another request mutates the game take a snapshot with ``snapshot``.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._games[gid] = game
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def snapshot(self, game_id: str) -> Optional[Board]:
        with self._lock:
            game = self._games.get(game_id)
            return game.board.copy() if game is not None else None

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
