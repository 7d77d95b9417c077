from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from duckchess.engine.game import Game


class InMemorySessionStore:
    """Thread-safe map of ``game_id`` to live duck chess games.

    Games are kept only in process memory; restarting the server drops them.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def create(self, game: Optional[Game] = None) -> str:
        """Register ``game`` (a fresh start position by default) and return its id."""
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

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None
