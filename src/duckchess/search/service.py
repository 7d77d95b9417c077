from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from duckchess.config import EngineSettings
from duckchess.engine.game import Game
from duckchess.engine.move import Move

from .alphabeta import AlphaBetaEngine
from .base import SearchEngine
from .mcts import MCTSEngine
from .mixed import MixedEngine


logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[int]
    engine: str
    nodes: int
    depth: int
    iterations: int
    ticks: int
    time_ms: int


def build_engine(
    name: str,
    settings: EngineSettings,
    *,
    depth: Optional[int] = None,
    iterations: Optional[int] = None,
    seed: Optional[int] = None,
) -> SearchEngine:
    """Construct a fresh engine by name with ``settings`` defaults.

    Raises:
        ValueError: If ``name`` is not a known engine.
    """
    if seed is None:
        seed = settings.seed

    def alphabeta() -> AlphaBetaEngine:
        return AlphaBetaEngine(
            depth=depth or settings.alphabeta_depth,
            steps_per_tick=settings.steps_per_tick,
            tick_budget_ms=settings.tick_budget_ms,
        )

    def mcts() -> MCTSEngine:
        return MCTSEngine(
            iterations=iterations or settings.mcts_iterations,
            iterations_per_tick=settings.iterations_per_tick,
            max_rollout_plies=settings.max_rollout_plies,
            exploration=settings.exploration,
            rollout_policy=settings.rollout_policy,
            seed=seed,
            tick_budget_ms=settings.tick_budget_ms,
        )

    if name == "alphabeta":
        return alphabeta()
    if name == "mcts":
        return mcts()
    if name == "mixed":
        return MixedEngine(alphabeta=alphabeta(), mcts=mcts())
    raise ValueError(f"unknown engine: {name!r}")


class SearchService:
    """Run one engine to completion (or until ``movetime_ms``) on a game."""

    def __init__(self, settings: Optional[EngineSettings] = None) -> None:
        self.settings = settings or EngineSettings()

    def search(
        self,
        game: Game,
        engine: Optional[str] = None,
        depth: Optional[int] = None,
        iterations: Optional[int] = None,
        movetime_ms: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> SearchResult:
        name = engine or self.settings.default_engine
        searcher = build_engine(
            name, self.settings, depth=depth, iterations=iterations, seed=seed
        )

        start = time.perf_counter()
        searcher.start(game.board)
        while not searcher.tick():
            if movetime_ms is not None:
                elapsed_ms = int((time.perf_counter() - start) * 1000)
                if elapsed_ms >= movetime_ms:
                    searcher.cancel()
                    break
        time_ms = int((time.perf_counter() - start) * 1000)

        active = searcher.active if isinstance(searcher, MixedEngine) else searcher
        stats = searcher.stats
        best = None if searcher.best_move.is_invalid else searcher.best_move
        score = active.score if isinstance(active, AlphaBetaEngine) else None
        result = SearchResult(
            best_move=best,
            score=score,
            engine=active.name,
            nodes=stats.get("nodes", 0),
            depth=stats.get("depth", 0),
            iterations=stats.get("iterations", 0),
            ticks=stats.get("ticks", 0),
            time_ms=time_ms,
        )
        logger.info(
            "search complete",
            extra={
                "engine": result.engine,
                "best_move": best.to_uci() if best else None,
                "nodes": result.nodes,
                "time_ms": result.time_ms,
            },
        )
        return result
