#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import sys
import time
from typing import Any, Dict, List, Optional

# Ensure src/ is importable when running directly
SRC_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from duckchess.config import EngineSettings
from duckchess.engine.board import STARTPOS_FEN
from duckchess.engine.game import Game
from duckchess.engine.piece import NO_COLOR, WHITE, color_name
from duckchess.search.service import SearchService


def play_game(
    svc: SearchService,
    fen: str,
    white: str,
    black: str,
    *,
    max_plies: int,
    movetime_ms: Optional[int],
    seed: Optional[int],
) -> Dict[str, Any]:
    game = Game.from_fen(fen)
    moves: List[str] = []
    start = time.perf_counter()
    while not game.is_game_over() and len(moves) < max_plies:
        engine = white if game.board.turn_color == WHITE else black
        res = svc.search(
            game,
            engine=engine,
            movetime_ms=movetime_ms,
            seed=None if seed is None else seed + len(moves),
        )
        if res.best_move is None:
            break
        game.apply_move(res.best_move)
        moves.append(res.best_move.to_uci())

    board = game.board
    if not board.is_game_over:
        outcome = "unfinished"
    elif board.winner == NO_COLOR:
        outcome = "draw"
    else:
        outcome = color_name(board.winner)
    return {
        "white": white,
        "black": black,
        "outcome": outcome,
        "plies": len(moves),
        "moves": moves,
        "final_fen": game.to_fen(),
        "time_ms": int((time.perf_counter() - start) * 1000),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Play engines against each other")
    parser.add_argument("--fen", type=str, default=STARTPOS_FEN)
    parser.add_argument("--white", choices=("alphabeta", "mcts", "mixed"), default="mixed")
    parser.add_argument("--black", choices=("alphabeta", "mcts", "mixed"), default="mcts")
    parser.add_argument("--games", type=int, default=1)
    parser.add_argument("--max-plies", type=int, default=400)
    parser.add_argument("--movetime", type=int, default=None, help="Per-move time in ms")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out", type=str, default=None, help="Write JSON results here")
    args = parser.parse_args()

    svc = SearchService(EngineSettings.from_env())
    results = []
    for i in range(args.games):
        seed = None if args.seed is None else args.seed + 10_000 * i
        result = play_game(
            svc,
            args.fen,
            args.white,
            args.black,
            max_plies=args.max_plies,
            movetime_ms=args.movetime,
            seed=seed,
        )
        results.append(result)
        print(
            f"game {i + 1}: {result['outcome']} in {result['plies']} plies "
            f"({result['time_ms']} ms)"
        )

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump({"games": results}, f, indent=2)


if __name__ == "__main__":
    main()
