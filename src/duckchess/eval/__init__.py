"""Evaluation heuristics and related utilities.

Pure, deterministic, and side-effect free.
"""

from __future__ import annotations

from typing import Dict, Final

from duckchess.engine.board import Board
from duckchess.engine.move import Move, MoveKind
from duckchess.engine.piece import (
    BISHOP,
    BLACK,
    KING,
    KNIGHT,
    NO_COLOR,
    NONE,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    piece_color,
    piece_type,
)


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
K_VAL: Final = 20000

PIECE_VALUES: Dict[int, int] = {
    PAWN: P_VAL,
    KNIGHT: N_VAL,
    BISHOP: B_VAL,
    ROOK: R_VAL,
    QUEEN: Q_VAL,
    KING: K_VAL,
}

SCORE_MAX: Final = 2**31 - 1
SCORE_MIN: Final = -SCORE_MAX

# Heuristic rollout weights
CAPTURE_WEIGHT: Final = 10
PAWN_ADVANCE_WEIGHT: Final = 2


def evaluate(board: Board, perspective: int) -> int:
    """Return a static evaluation of ``board`` from ``perspective``'s side.

    Terminal boards score ``SCORE_MAX`` for a win, ``SCORE_MIN`` for a loss
    and 0 for a draw. Otherwise this is plain material: the duck and empty
    squares count nothing.
    """
    if board.is_game_over:
        if board.winner == NO_COLOR:
            return 0
        return SCORE_MAX if board.winner == perspective else SCORE_MIN

    score = 0
    for piece in board.squares:
        color = piece_color(piece)
        if color == NO_COLOR:
            continue
        value = PIECE_VALUES[piece_type(piece)]
        score += value if color == perspective else -value
    return score


def score_move(board: Board, move: Move) -> int:
    """Cheap move-ordering score used by the heuristic rollout policy.

    Combines the captured piece value, pawn progress and how central the
    target square is.
    """
    score = 0
    if move.kind == MoveKind.EN_PASSANT:
        score += CAPTURE_WEIGHT * P_VAL
    elif move.captured != NONE:
        score += CAPTURE_WEIGHT * PIECE_VALUES.get(piece_type(move.captured), 0)

    to_row, to_file = move.to_sq // 8, move.to_sq % 8
    if not move.is_duck and piece_type(board.squares[move.from_sq]) == PAWN:
        score += PAWN_ADVANCE_WEIGHT * abs(to_row - move.from_sq // 8)

    score += int(7 - (abs(3.5 - to_row) + abs(3.5 - to_file)))
    return score


def _counts(board: Board, color: int) -> Dict[int, int]:
    return {t: len(board.pieces[t | color]) for t in (KNIGHT, BISHOP, ROOK, QUEEN)}


def is_endgame(board: Board) -> bool:
    """True when neither side has a queen, or every side that has a queen has
    at most one minor piece besides it."""
    for counts in (_counts(board, WHITE), _counts(board, BLACK)):
        if counts[QUEEN] == 0:
            continue
        if counts[ROOK] or counts[QUEEN] > 1:
            return False
        if counts[KNIGHT] + counts[BISHOP] > 1:
            return False
    return True
