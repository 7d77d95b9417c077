from __future__ import annotations

import logging
from typing import Dict, Optional

from duckchess.engine.board import Board
from duckchess.engine.move import INVALID_MOVE
from duckchess.eval import is_endgame

from .alphabeta import AlphaBetaEngine
from .base import SearchEngine
from .mcts import MCTSEngine


logger = logging.getLogger(__name__)


class MixedEngine(SearchEngine):
    """MCTS in the opening and middlegame, alpha-beta once material thins out.

    The choice is made per ``start()`` from the root position; the chosen
    engine then drives every tick.
    """

    name = "mixed"

    def __init__(
        self,
        alphabeta: Optional[AlphaBetaEngine] = None,
        mcts: Optional[MCTSEngine] = None,
    ) -> None:
        super().__init__()
        self.alphabeta = alphabeta or AlphaBetaEngine()
        self.mcts = mcts or MCTSEngine()
        self.active: SearchEngine = self.mcts

    def start(self, board: Board) -> None:
        self.active = self.alphabeta if is_endgame(board) else self.mcts
        logger.debug("mixed start", extra={"engine": self.active.name})
        self.active.start(board)
        self.best_move = INVALID_MOVE
        self.ticks = 0
        self.done = self.active.done
        if self.done:
            self.best_move = self.active.best_move

    def tick(self) -> bool:
        if self.done:
            return True
        self.ticks += 1
        self.done = self.active.tick()
        self.best_move = self.active.best_move
        return self.done

    def cancel(self) -> None:
        self.active.cancel()
        self.best_move = self.active.best_move
        self.done = True

    @property
    def stats(self) -> Dict[str, int]:
        stats = dict(self.active.stats)
        stats["ticks"] = self.ticks
        return stats
