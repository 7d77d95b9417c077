from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .move import Move, MoveKind
from .piece import (
    BISHOP,
    KNIGHT,
    NO_COLOR,
    NONE,
    PAWN,
    PROMOTION_TYPES,
    QUEEN,
    ROOK,
    WHITE,
    DUCK,
    piece_color,
)

if TYPE_CHECKING:
    from .board import Board


# (file delta, rank delta)
KNIGHT_DELTAS: Tuple[Tuple[int, int], ...] = (
    (1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2),
)
KING_DELTAS: Tuple[Tuple[int, int], ...] = (
    (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1),
)
BISHOP_DIRS: Tuple[Tuple[int, int], ...] = ((1, 1), (-1, 1), (1, -1), (-1, -1))
ROOK_DIRS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def _build_step_table(deltas: Tuple[Tuple[int, int], ...]) -> List[Tuple[int, ...]]:
    table: List[Tuple[int, ...]] = []
    for sq in range(64):
        f, r = sq % 8, sq // 8
        table.append(
            tuple(
                (r + dr) * 8 + (f + df)
                for df, dr in deltas
                if 0 <= f + df < 8 and 0 <= r + dr < 8
            )
        )
    return table


def _build_ray_table(
    dirs: Tuple[Tuple[int, int], ...]
) -> List[Tuple[Tuple[int, ...], ...]]:
    table: List[Tuple[Tuple[int, ...], ...]] = []
    for sq in range(64):
        rays = []
        for df, dr in dirs:
            f, r = sq % 8 + df, sq // 8 + dr
            ray = []
            while 0 <= f < 8 and 0 <= r < 8:
                ray.append(r * 8 + f)
                f += df
                r += dr
            rays.append(tuple(ray))
        table.append(tuple(rays))
    return table


KNIGHT_TARGETS = _build_step_table(KNIGHT_DELTAS)
KING_TARGETS = _build_step_table(KING_DELTAS)
BISHOP_RAYS = _build_ray_table(BISHOP_DIRS)
ROOK_RAYS = _build_ray_table(ROOK_DIRS)
QUEEN_RAYS = [b + r for b, r in zip(BISHOP_RAYS, ROOK_RAYS)]
_SLIDER_RAYS = {BISHOP: BISHOP_RAYS, ROOK: ROOK_RAYS, QUEEN: QUEEN_RAYS}


def generate_moves(board: "Board", moves: Optional[List[Move]] = None) -> List[Move]:
    """Generate every legal move for the board's current phase.

    There is no check rule in duck chess, so pseudo-legal piece moves are
    legal. During a duck-ply every empty square is a target.

    Args:
        board (Board): Position to generate for; it is not modified.
        moves (Optional[List[Move]]): List to append to. A new list is used
            when omitted.

    Returns:
        List[Move]: ``moves`` with the generated moves appended.
    """
    if moves is None:
        moves = []
    if board.is_game_over:
        return moves
    if board.duck_turn:
        _gen_duck_moves(board, moves)
        return moves

    color = board.turn_color
    _gen_pawn_moves(board, color, moves)
    for ptype in (KNIGHT, BISHOP, ROOK, QUEEN):
        for sq in board.pieces[ptype | color]:
            if ptype == KNIGHT:
                _gen_steps(board, sq, KNIGHT_TARGETS[sq], color, moves)
            else:
                _gen_slides(board, sq, _SLIDER_RAYS[ptype][sq], color, moves)
    king_sq = board.king_squares[color]
    if king_sq >= 0:
        _gen_steps(board, king_sq, KING_TARGETS[king_sq], color, moves)
        _gen_castles(board, color, king_sq, moves)
    return moves


def _gen_duck_moves(board: "Board", moves: List[Move]) -> None:
    first = board.duck_square < 0
    start = 0 if first else board.duck_square
    squares = board.squares
    for sq in range(64):
        if squares[sq] == NONE:
            moves.append(Move(start, sq, MoveKind.DUCK, first_duck=first))


def _target_capture(target: int, color: int) -> Optional[int]:
    """Return the captured piece for a step onto ``target``.

    ``NONE`` for an empty square; ``None`` when the square is blocked by a
    friendly piece or the duck.
    """
    if target == NONE:
        return NONE
    owner = piece_color(target)
    if owner == NO_COLOR or owner == color:
        return None
    return target


def _gen_steps(
    board: "Board", sq: int, targets: Tuple[int, ...], color: int, moves: List[Move]
) -> None:
    squares = board.squares
    for to in targets:
        captured = _target_capture(squares[to], color)
        if captured is None:
            continue
        if captured == NONE:
            moves.append(Move(sq, to))
        else:
            moves.append(Move(sq, to, MoveKind.CAPTURE, captured=captured))


def _gen_slides(
    board: "Board",
    sq: int,
    rays: Tuple[Tuple[int, ...], ...],
    color: int,
    moves: List[Move],
) -> None:
    squares = board.squares
    for ray in rays:
        for to in ray:
            target = squares[to]
            if target == NONE:
                moves.append(Move(sq, to))
                continue
            owner = piece_color(target)
            if owner != NO_COLOR and owner != color:
                moves.append(Move(sq, to, MoveKind.CAPTURE, captured=target))
            break


def _add_pawn_move(
    from_sq: int, to_sq: int, captured: int, promote: bool, moves: List[Move]
) -> None:
    if promote:
        for promo in PROMOTION_TYPES:
            moves.append(Move(from_sq, to_sq, MoveKind.PROMOTION, promo, captured))
    elif captured != NONE:
        moves.append(Move(from_sq, to_sq, MoveKind.CAPTURE, captured=captured))
    else:
        moves.append(Move(from_sq, to_sq))


def _gen_pawn_moves(board: "Board", color: int, moves: List[Move]) -> None:
    squares = board.squares
    if color == WHITE:
        forward, start_row, pre_promo_row, ep_row = 8, 1, 6, 4
    else:
        forward, start_row, pre_promo_row, ep_row = -8, 6, 1, 3
    ep_square = board.ep_square
    ep_open = ep_square is not None and squares[ep_square] != DUCK

    for sq in board.pieces[PAWN | color]:
        row, file = sq // 8, sq % 8
        promote = row == pre_promo_row

        one = sq + forward
        if squares[one] == NONE:
            _add_pawn_move(sq, one, NONE, promote, moves)
            two = one + forward
            if row == start_row and squares[two] == NONE:
                moves.append(Move(sq, two, MoveKind.PAWN_DOUBLE))

        for df in (-1, 1):
            if not 0 <= file + df < 8:
                continue
            to = one + df
            target = squares[to]
            owner = piece_color(target)
            if owner != NO_COLOR and owner != color:
                _add_pawn_move(sq, to, target, promote, moves)
            elif ep_open and row == ep_row and to == ep_square:
                moves.append(Move(sq, to, MoveKind.EN_PASSANT))


def _gen_castles(board: "Board", color: int, king_sq: int, moves: List[Move]) -> None:
    squares = board.squares
    if color == WHITE:
        home, rights = 4, (board.white_kingside, board.white_queenside)
    else:
        home, rights = 60, (board.black_kingside, board.black_queenside)
    if king_sq != home:
        return
    rook = ROOK | color
    kingside, queenside = rights
    if (
        kingside
        and squares[home + 3] == rook
        and squares[home + 1] == NONE
        and squares[home + 2] == NONE
    ):
        moves.append(Move(home, home + 2, MoveKind.CASTLE))
    if (
        queenside
        and squares[home - 4] == rook
        and squares[home - 1] == NONE
        and squares[home - 2] == NONE
        and squares[home - 3] == NONE
    ):
        moves.append(Move(home, home - 2, MoveKind.CASTLE))
