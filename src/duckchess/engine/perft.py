from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Depth counts plies, so a full duck chess move (piece-ply plus duck-ply) is
    depth 2. The board is walked with make/unmake and left as it was found.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    if depth == 1:
        return len(board.legal_moves)

    nodes = 0
    for m in list(board.legal_moves):
        token = board.make_move(m)
        nodes += perft(board, depth - 1)
        board.unmake_move(token)
    return nodes


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Return perft counts per root move, keyed by move text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    counts: Dict[str, int] = {}
    for m in list(board.legal_moves):
        token = board.make_move(m)
        counts[m.to_uci()] = perft(board, depth - 1)
        board.unmake_move(token)
    return counts
