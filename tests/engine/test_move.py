from __future__ import annotations

import pytest

from duckchess.engine.move import (
    INVALID_MOVE,
    Flag,
    Move,
    MoveKind,
    square_to_str,
    str_to_square,
)
from duckchess.engine.piece import BLACK, KNIGHT, QUEEN, ROOK


def test_square_conversion() -> None:
    assert str_to_square("a1") == 0
    assert str_to_square("h8") == 63
    assert square_to_str(str_to_square("e4")) == "e4"
    with pytest.raises(ValueError):
        str_to_square("i9")
    with pytest.raises(ValueError):
        square_to_str(64)


def test_pack_layout() -> None:
    m = Move(str_to_square("e7"), str_to_square("d8"), MoveKind.PROMOTION, QUEEN, ROOK | BLACK)
    packed = m.pack()
    assert packed & 0x3F == m.from_sq
    assert (packed >> 6) & 0x3F == m.to_sq
    assert (packed >> 12) & 0xF == Flag.PROMOTE_QUEEN
    assert packed >> 16 == ROOK | BLACK
    assert Move.unpack(packed) == m


def test_duck_moves_pack_with_their_own_flags() -> None:
    first = Move(0, str_to_square("d5"), MoveKind.DUCK, first_duck=True)
    later = Move(str_to_square("d5"), str_to_square("e6"), MoveKind.DUCK)
    assert first.flag == Flag.FIRST_DUCK
    assert later.flag == Flag.DUCK
    assert Move.unpack(first.pack()) == first
    assert Move.unpack(later.pack()) == later


def test_invalid_move_sentinel() -> None:
    assert INVALID_MOVE.pack() == 0
    assert INVALID_MOVE.is_invalid
    assert INVALID_MOVE.to_uci() == "0000"
    assert not Move(0, 0, MoveKind.DUCK, first_duck=True).is_invalid


def test_text_forms() -> None:
    assert Move(str_to_square("e2"), str_to_square("e4"), MoveKind.PAWN_DOUBLE).to_uci() == "e2e4"
    promo = Move(str_to_square("a7"), str_to_square("a8"), MoveKind.PROMOTION, KNIGHT)
    assert str(promo) == "a7a8n"
    assert Move(0, str_to_square("h3"), MoveKind.DUCK, first_duck=True).to_uci() == "@h3"


def test_equality_covers_every_field() -> None:
    a = Move(12, 28)
    assert a == Move(12, 28)
    assert a != Move(12, 28, MoveKind.PAWN_DOUBLE)
    assert hash(a) == hash(Move(12, 28))
