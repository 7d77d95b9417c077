from __future__ import annotations

import pytest

from duckchess.engine.board import Board
from duckchess.engine.move import INVALID_MOVE
from duckchess.engine.piece import KING, piece_type
from duckchess.eval import evaluate
from duckchess.search.alphabeta import AlphaBetaEngine


def _run(engine: AlphaBetaEngine, board: Board) -> None:
    engine.start(board)
    for _ in range(100_000):
        if engine.tick():
            return
    raise AssertionError("search did not finish")


def test_depth_one_prefers_the_bigger_capture() -> None:
    b = Board.from_fen("4k3/8/8/3q1r2/4P3/8/8/4K3 w - - 0 1")
    engine = AlphaBetaEngine(depth=1)
    _run(engine, b)
    assert engine.best_move.to_uci() == "e4d5"


def test_depth_one_matches_best_static_evaluation() -> None:
    b = Board.from_fen("r3k2r/pPp2ppp/8/3pP3/8/2D5/P1PP1PPP/R3K2R w KQkq d6 0 1")
    engine = AlphaBetaEngine(depth=1)
    _run(engine, b)

    best_value = None
    best_move = None
    for m in b.legal_moves:
        c = b.clone()
        c.make_move(m)
        value = evaluate(c, b.turn_color)
        if best_value is None or value > best_value:
            best_value, best_move = value, m
    assert engine.best_move == best_move
    assert engine.score == best_value


def test_ties_go_to_the_first_generated_move() -> None:
    b = Board.startpos()
    engine = AlphaBetaEngine(depth=1)
    _run(engine, b)
    assert engine.best_move == b.legal_moves[0]
    assert engine.score == 0


def test_king_capture_is_found() -> None:
    b = Board.from_fen("3k4/8/8/8/8/8/8/3QK3 w - - 0 1")
    engine = AlphaBetaEngine(depth=2)
    _run(engine, b)
    assert engine.best_move.to_uci() == "d1d8"


def test_game_over_root_returns_invalid_move() -> None:
    b = Board.from_fen("kb6/pDp5/P1P5/8/8/8/8/4K3 b - - 0 1")
    engine = AlphaBetaEngine(depth=2)
    _run(engine, b)
    assert engine.best_move == INVALID_MOVE


def test_small_ticks_reach_the_same_result() -> None:
    b = Board.from_fen("4k3/8/8/3q1r2/4P3/8/8/4K3 w - - 0 1")
    one_shot = AlphaBetaEngine(depth=2)
    _run(one_shot, b)

    sliced = AlphaBetaEngine(depth=2, steps_per_tick=7)
    sliced.start(b)
    ticks = 0
    while not sliced.tick():
        ticks += 1
    assert ticks > 1
    assert sliced.best_move == one_shot.best_move
    assert sliced.score == one_shot.score
    assert sliced.stats["nodes"] == one_shot.stats["nodes"]


def test_search_leaves_the_callers_board_alone() -> None:
    b = Board.startpos()
    fen = b.to_fen()
    _run(AlphaBetaEngine(depth=2), b)
    assert b.to_fen() == fen
    assert b.pending_unmakes == 0


def test_duck_ply_and_reply_keep_the_king_safe() -> None:
    # the e8 rook eyes the white king down the open file
    b = Board.from_fen("4r2k/8/8/8/8/8/8/4K3 w - - 0 1")
    engine = AlphaBetaEngine(depth=3)
    _run(engine, b)
    b.make_move(engine.best_move)

    duck_engine = AlphaBetaEngine(depth=2)
    _run(duck_engine, b)
    assert duck_engine.best_move.is_duck
    b.make_move(duck_engine.best_move)

    assert not any(piece_type(m.captured) == KING for m in b.legal_moves)


def test_invalid_parameters() -> None:
    with pytest.raises(ValueError):
        AlphaBetaEngine(depth=0)
    with pytest.raises(ValueError):
        AlphaBetaEngine(steps_per_tick=0)
    with pytest.raises(ValueError):
        AlphaBetaEngine(tick_budget_ms=0)


def test_tick_budget_splits_search_without_changing_result() -> None:
    b = Board.startpos()
    reference = AlphaBetaEngine(depth=3)
    _run(reference, b)

    engine = AlphaBetaEngine(depth=3, steps_per_tick=10**9, tick_budget_ms=1)
    engine.start(b)
    assert not engine.tick()
    for _ in range(100_000):
        if engine.tick():
            break
    assert engine.done
    assert engine.ticks > 1
    assert engine.best_move == reference.best_move
    assert engine.score == reference.score
    assert engine.nodes == reference.nodes


def test_step_before_start_raises() -> None:
    engine = AlphaBetaEngine()
    with pytest.raises(RuntimeError):
        engine._step()
