from __future__ import annotations

from duckchess.engine.board import Board
from duckchess.search.alphabeta import AlphaBetaEngine
from duckchess.search.mcts import MCTSEngine
from duckchess.search.mixed import MixedEngine


def _engine() -> MixedEngine:
    return MixedEngine(
        alphabeta=AlphaBetaEngine(depth=1),
        mcts=MCTSEngine(iterations=30, max_rollout_plies=2, seed=11),
    )


def test_opening_uses_mcts() -> None:
    b = Board.startpos()
    engine = _engine()
    engine.start(b)
    assert engine.active.name == "mcts"
    while not engine.tick():
        pass
    assert b.is_move_legal(engine.best_move)
    assert engine.stats["iterations"] == 30


def test_endgame_uses_alphabeta() -> None:
    b = Board.from_fen("4k3/8/8/3r1b2/4P3/8/8/4K3 w - - 0 1")
    engine = _engine()
    engine.start(b)
    assert engine.active.name == "alphabeta"
    while not engine.tick():
        pass
    assert engine.best_move.to_uci() == "e4d5"
    assert engine.stats["ticks"] >= 1


def test_cancel_keeps_a_legal_answer() -> None:
    b = Board.startpos()
    engine = _engine()
    engine.start(b)
    engine.tick()
    engine.cancel()
    assert engine.done
    assert b.is_move_legal(engine.best_move)
