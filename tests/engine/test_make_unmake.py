from __future__ import annotations

import pytest

from duckchess.engine.board import STARTPOS_FEN, Board
from duckchess.engine.errors import IllegalMoveError, UnmakeOrderError
from duckchess.engine.move import Move, str_to_square


TRICKY_FENS = (
    STARTPOS_FEN,
    # castling both ways, promotion with and without capture, en passant
    "r3k2r/pPp2ppp/8/3pP3/8/2D5/P1PP1PPP/R3K2R w KQkq d6 0 1",
    # duck-ply with the duck already placed
    "r3k2r/8/8/8/3D4/8/8/R3K2R b KQkq - 7 12 duck",
    # king capture available
    "3k4/8/8/8/8/8/8/3QK3 w - - 0 1",
)


def _assert_round_trip(board: Board) -> None:
    fen_before = board.to_fen()
    legal_before = set(board.legal_moves)
    for m in list(board.legal_moves):
        c = board.clone()
        token = c.make_move(m)
        c.unmake_move(token)
        assert c == board, m.to_uci()
        assert c.to_fen() == fen_before
        assert set(c.legal_moves) == legal_before
        assert c.pending_unmakes == 0


@pytest.mark.parametrize("fen", TRICKY_FENS)
def test_round_trip_restores_every_field(fen: str) -> None:
    _assert_round_trip(Board.from_fen(fen))


def test_two_ply_round_trip_in_place() -> None:
    b = Board.from_fen(TRICKY_FENS[1])
    snapshot = b.clone()
    for m in list(b.legal_moves):
        t1 = b.make_move(m)
        for d in list(b.legal_moves)[:5]:
            t2 = b.make_move(d)
            b.unmake_move(t2)
        b.unmake_move(t1)
        assert b == snapshot
    assert b.pending_unmakes == 0


def test_make_unmake_restores_position() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    mv = b.find_move("e2e4")
    token = b.make_move(mv)
    assert b.squares[str_to_square("e4")] != 0
    assert b.ep_square == str_to_square("e3")
    assert b.ply == 1
    b.unmake_move(token)
    assert b.to_fen() == STARTPOS_FEN
    assert b.ply == 0


def test_illegal_move_raises_without_mutation() -> None:
    b = Board.startpos()
    before = b.clone()
    with pytest.raises(IllegalMoveError):
        b.make_move(Move(str_to_square("e2"), str_to_square("e5")))
    # duck moves are illegal during a piece-ply
    with pytest.raises(IllegalMoveError):
        b.make_move(Move(0, str_to_square("e4"), first_duck=True))
    assert b == before
    assert b.pending_unmakes == 0


def test_unmake_out_of_order_raises() -> None:
    b = Board.startpos()
    with pytest.raises(UnmakeOrderError):
        b.unmake_move(None)  # type: ignore[arg-type]
    t1 = b.make_move(b.find_move("g1f3"))
    t2 = b.make_move(b.find_move("@d4"))
    with pytest.raises(UnmakeOrderError):
        b.unmake_move(t1)
    b.unmake_move(t2)
    b.unmake_move(t1)
    assert b.to_fen() == STARTPOS_FEN


def test_clone_shares_no_state() -> None:
    b = Board.startpos()
    c = b.clone()
    c.make_move(c.find_move("e2e4"))
    assert b.to_fen() == STARTPOS_FEN
    assert len(b.legal_moves) == 20
    assert c.pending_unmakes == 1
    assert b.pending_unmakes == 0


def test_turn_and_counters_advance_through_both_plies() -> None:
    b = Board.startpos()
    b.make_move(b.find_move("g1f3"))
    assert b.duck_turn and b.plies_since_event == 1
    b.make_move(b.find_move("@d5"))
    assert not b.duck_turn
    assert b.plies_since_event == 2
    assert b.ply == 2
    b.make_move(b.find_move("e7e5"))
    assert b.plies_since_event == 0
