from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from duckchess.engine.board import Board, UndoToken
from duckchess.engine.move import INVALID_MOVE, Move
from duckchess.engine.piece import NO_COLOR
from duckchess.eval import SCORE_MAX, evaluate

from .base import SearchEngine, past_deadline


logger = logging.getLogger(__name__)

INF = SCORE_MAX + 1


@dataclass
class Frame:
    """One node on the explicit alpha-beta stack."""

    alpha: int
    beta: int
    maximizing: bool
    depth: int
    moves: List[Move]
    move: Optional[Move] = None
    token: Optional[UndoToken] = None
    index: int = 0


class AlphaBetaEngine(SearchEngine):
    """Depth-bounded minimax with alpha-beta pruning over a frame stack.

    The side to move at the root maximizes, including on its own duck-plies.
    One private board is walked with make/unmake, so a search can be paused
    between any two transitions and resumed on the next ``tick()``.
    """

    name = "alphabeta"

    def __init__(
        self,
        depth: int = 2,
        steps_per_tick: int = 10000,
        tick_budget_ms: Optional[int] = None,
    ) -> None:
        super().__init__(tick_budget_ms)
        if depth < 1:
            raise ValueError("depth must be >= 1")
        if steps_per_tick < 1:
            raise ValueError("steps_per_tick must be >= 1")
        self.depth = depth
        self.steps_per_tick = steps_per_tick
        self._board: Optional[Board] = None
        self._stack: List[Frame] = []
        self._root_color = NO_COLOR
        self.score: Optional[int] = None
        self.nodes = 0
        self.steps = 0

    def start(self, board: Board) -> None:
        self._board = board.clone()
        self._root_color = board.turn_color
        self._stack = [
            Frame(
                alpha=-INF,
                beta=INF,
                maximizing=True,
                depth=0,
                moves=self._board.legal_moves,
            )
        ]
        self.best_move = INVALID_MOVE
        self.score = None
        self.nodes = 0
        self.steps = 0
        self.ticks = 0
        self.done = False
        logger.debug(
            "alphabeta start",
            extra={"depth": self.depth, "root_moves": len(self._board.legal_moves)},
        )

    def _run_slice(self, deadline: Optional[float]) -> None:
        for _ in range(self.steps_per_tick):
            if not self._stack:
                break
            self._step()
            if past_deadline(deadline):
                break
        if not self._stack and not self.done:
            self.done = True
            logger.debug(
                "alphabeta done",
                extra={
                    "best_move": self.best_move.to_uci(),
                    "score": self.score,
                    "nodes": self.nodes,
                },
            )

    def _step(self) -> None:
        board = self._board
        if board is None:
            raise RuntimeError("search not started")
        self.steps += 1
        frame = self._stack[-1]
        at_limit = frame.depth >= self.depth

        if (
            at_limit
            or board.is_game_over
            or frame.index >= len(frame.moves)
            or frame.alpha >= frame.beta
        ):
            if at_limit or board.is_game_over or not frame.moves:
                value = evaluate(board, self._root_color)
            else:
                value = frame.alpha if frame.maximizing else frame.beta
            self._stack.pop()
            if frame.token is not None:
                board.unmake_move(frame.token)
            if not self._stack:
                self.score = value
                return
            parent = self._stack[-1]
            if parent.maximizing:
                if value > parent.alpha:
                    parent.alpha = value
                    if len(self._stack) == 1:
                        self.best_move = frame.move or INVALID_MOVE
            elif value < parent.beta:
                parent.beta = value
            parent.index += 1
            return

        move = frame.moves[frame.index]
        token = board.make_move(move)
        self.nodes += 1
        self._stack.append(
            Frame(
                alpha=frame.alpha,
                beta=frame.beta,
                maximizing=board.turn_color == self._root_color,
                depth=frame.depth + 1,
                moves=board.legal_moves,
                move=move,
                token=token,
            )
        )

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "ticks": self.ticks,
            "nodes": self.nodes,
            "steps": self.steps,
            "depth": self.depth,
        }
