from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from duckchess.engine.board import Board
from duckchess.engine.move import INVALID_MOVE, Move
from duckchess.engine.piece import NO_COLOR
from duckchess.eval import evaluate, score_move

from .base import SearchEngine, past_deadline


logger = logging.getLogger(__name__)

ROLLOUT_POLICIES = ("random", "heuristic")
HEURISTIC_TOP_N = 5


@dataclass
class Node:
    """Arena entry; ``parent`` and ``children`` are indexes into the arena."""

    parent: int
    move: Optional[Move]
    mover: int
    board: Board
    untried: List[Move]
    children: List[int] = field(default_factory=list)
    visits: int = 0
    total: float = 0.0
    fully_expanded: bool = False
    terminal: bool = False


class MCTSEngine(SearchEngine):
    """Monte Carlo Tree Search with UCT selection and random expansion.

    Rollout results are +1/0/-1 from the root mover's side. Each node stores
    its total from the point of view of the color that made its move, so a
    parent always picks the child that is best for the side choosing it.
    """

    name = "mcts"

    def __init__(
        self,
        iterations: int = 2000,
        iterations_per_tick: int = 100,
        max_rollout_plies: int = 20,
        exploration: float = math.sqrt(2),
        rollout_policy: str = "random",
        seed: Optional[int] = None,
        tick_budget_ms: Optional[int] = None,
    ) -> None:
        super().__init__(tick_budget_ms)
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        if iterations_per_tick < 1:
            raise ValueError("iterations_per_tick must be >= 1")
        if max_rollout_plies < 0:
            raise ValueError("max_rollout_plies must be >= 0")
        if rollout_policy not in ROLLOUT_POLICIES:
            raise ValueError(f"unknown rollout policy: {rollout_policy!r}")
        self.iterations = iterations
        self.iterations_per_tick = iterations_per_tick
        self.max_rollout_plies = max_rollout_plies
        self.exploration = exploration
        self.rollout_policy = rollout_policy
        self.seed = seed
        self._rng = random.Random(seed)
        self._nodes: List[Node] = []
        self._root_color = NO_COLOR
        self.completed = 0

    def start(self, board: Board) -> None:
        root_board = board.clone()
        self._rng = random.Random(self.seed)
        self._root_color = board.turn_color
        self._nodes = [
            Node(
                parent=-1,
                move=None,
                mover=NO_COLOR,
                board=root_board,
                untried=list(root_board.legal_moves),
                terminal=root_board.is_game_over,
            )
        ]
        self.best_move = INVALID_MOVE
        self.completed = 0
        self.ticks = 0
        self.done = False
        logger.debug(
            "mcts start",
            extra={"iterations": self.iterations, "policy": self.rollout_policy},
        )
        if self._nodes[0].terminal or not self._nodes[0].untried:
            self._finish()

    def _run_slice(self, deadline: Optional[float]) -> None:
        for _ in range(self.iterations_per_tick):
            if self.completed >= self.iterations:
                break
            self._iterate()
            self.completed += 1
            if past_deadline(deadline):
                break
        if self.completed >= self.iterations:
            self._finish()

    def cancel(self) -> None:
        if not self.done:
            self._finish()

    # --- One iteration ---

    def _iterate(self) -> None:
        idx = 0
        node = self._nodes[0]
        while node.fully_expanded and not node.terminal:
            idx = self._select_child(node)
            node = self._nodes[idx]

        if not node.terminal and node.untried:
            idx = self._expand(idx)

        result = self._simulate(self._nodes[idx].board)
        self._backpropagate(idx, result)

    def _select_child(self, node: Node) -> int:
        log_n = math.log(node.visits) if node.visits > 0 else 0.0
        best_idx = node.children[0]
        best_uct = -math.inf
        for c in node.children:
            child = self._nodes[c]
            if child.visits == 0:
                return c
            uct = child.total / child.visits + self.exploration * math.sqrt(
                log_n / child.visits
            )
            if uct > best_uct:
                best_uct = uct
                best_idx = c
        return best_idx

    def _expand(self, idx: int) -> int:
        node = self._nodes[idx]
        i = self._rng.randrange(len(node.untried))
        move = node.untried[i]
        node.untried[i] = node.untried[-1]
        node.untried.pop()

        child_board = node.board.clone()
        child_board.make_move(move)
        child_board.discard_undo_history(keep=0)
        child = Node(
            parent=idx,
            move=move,
            mover=node.board.turn_color,
            board=child_board,
            untried=list(child_board.legal_moves),
            terminal=child_board.is_game_over,
        )
        child_idx = len(self._nodes)
        self._nodes.append(child)
        node.children.append(child_idx)
        if not node.untried:
            node.fully_expanded = True
        return child_idx

    def _simulate(self, board: Board) -> int:
        if board.is_game_over:
            return self._outcome(board)
        sim = board.clone()
        plies = 0
        while not sim.is_game_over and plies < self.max_rollout_plies:
            sim.make_move(self._rollout_move(sim))
            plies += 1
        if sim.is_game_over:
            return self._outcome(sim)
        score = evaluate(sim, self._root_color)
        return (score > 0) - (score < 0)

    def _rollout_move(self, board: Board) -> Move:
        moves = board.legal_moves
        if self.rollout_policy == "heuristic":
            ranked = sorted(moves, key=lambda m: score_move(board, m), reverse=True)
            return self._rng.choice(ranked[:HEURISTIC_TOP_N])
        return self._rng.choice(moves)

    def _outcome(self, board: Board) -> int:
        if board.winner == NO_COLOR:
            return 0
        return 1 if board.winner == self._root_color else -1

    def _backpropagate(self, idx: int, result: int) -> None:
        while idx >= 0:
            node = self._nodes[idx]
            node.visits += 1
            if node.mover == self._root_color:
                node.total += result
            elif node.mover != NO_COLOR:
                node.total -= result
            idx = node.parent

    # --- Result ---

    def _finish(self) -> None:
        root = self._nodes[0]
        if root.children:
            best = max(root.children, key=lambda c: self._nodes[c].visits)
            self.best_move = self._nodes[best].move or INVALID_MOVE
        elif root.board.legal_moves:
            self.best_move = self._rng.choice(root.board.legal_moves)
        else:
            self.best_move = INVALID_MOVE
        self.done = True
        logger.debug(
            "mcts done",
            extra={
                "best_move": self.best_move.to_uci(),
                "iterations_done": self.completed,
                "tree_nodes": len(self._nodes),
            },
        )

    def root_visits(self) -> Dict[str, int]:
        """Visit counts of the root's children keyed by move text."""
        root = self._nodes[0] if self._nodes else None
        if root is None:
            return {}
        out: Dict[str, int] = {}
        for c in root.children:
            child = self._nodes[c]
            if child.move is not None:
                out[child.move.to_uci()] = child.visits
        return out

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "ticks": self.ticks,
            "iterations": self.completed,
            "nodes": len(self._nodes),
            "root_visits": self._nodes[0].visits if self._nodes else 0,
        }
