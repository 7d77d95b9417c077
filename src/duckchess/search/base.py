from __future__ import annotations

import time
from typing import Dict, Optional

from duckchess.engine.board import Board
from duckchess.engine.move import INVALID_MOVE, Move


class SearchEngine:
    """Resumable search driven by repeated ``tick()`` calls.

    Subclasses implement ``start`` and ``_run_slice``. A slice does a bounded
    amount of work (steps or iterations) and, when ``tick_budget_ms`` is set,
    also stops at the wall-clock deadline. All state lives on the instance.
    """

    name = "base"

    def __init__(self, tick_budget_ms: Optional[int] = None) -> None:
        if tick_budget_ms is not None and tick_budget_ms <= 0:
            raise ValueError("tick_budget_ms must be > 0")
        self.tick_budget_ms = tick_budget_ms
        self.done = True
        self.best_move: Move = INVALID_MOVE
        self.ticks = 0

    def start(self, board: Board) -> None:
        raise NotImplementedError

    def tick(self) -> bool:
        """Advance the search by one slice; return True once finished."""
        if self.done:
            return True
        self.ticks += 1
        deadline: Optional[float] = None
        if self.tick_budget_ms is not None:
            deadline = time.perf_counter() + self.tick_budget_ms / 1000.0
        self._run_slice(deadline)
        return self.done

    def cancel(self) -> None:
        """Stop searching; ``best_move`` keeps the best result found so far."""
        self.done = True

    def _run_slice(self, deadline: Optional[float]) -> None:
        raise NotImplementedError

    @property
    def stats(self) -> Dict[str, int]:
        return {"ticks": self.ticks}


def past_deadline(deadline: Optional[float]) -> bool:
    return deadline is not None and time.perf_counter() >= deadline
