from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Final

from .piece import BISHOP, KNIGHT, NONE, QUEEN, ROOK, TYPE_TO_CHAR


class MoveKind(enum.IntEnum):
    QUIET = 0
    CAPTURE = 1
    EN_PASSANT = 2
    CASTLE = 3
    PROMOTION = 4
    PAWN_DOUBLE = 5
    DUCK = 6


class Flag(enum.IntEnum):
    """Four-bit flag stored in bits 12-15 of a packed move."""

    NONE = 0
    EN_PASSANT = 1
    CASTLING = 2
    PROMOTE_QUEEN = 3
    PROMOTE_KNIGHT = 4
    PROMOTE_ROOK = 5
    PROMOTE_BISHOP = 6
    PAWN_TWO_FORWARD = 7
    FIRST_DUCK = 8
    DUCK = 9


START_MASK: Final = 0x3F
TARGET_SHIFT: Final = 6
FLAG_SHIFT: Final = 12
CAPTURED_SHIFT: Final = 16

_PROMO_TO_FLAG = {
    QUEEN: Flag.PROMOTE_QUEEN,
    KNIGHT: Flag.PROMOTE_KNIGHT,
    ROOK: Flag.PROMOTE_ROOK,
    BISHOP: Flag.PROMOTE_BISHOP,
}
_FLAG_TO_PROMO = {v: k for k, v in _PROMO_TO_FLAG.items()}


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (int): Origin square index (0-based). ``0`` for a first duck
            placement.
        to_sq (int): Destination square index (0-based).
        kind (MoveKind): Which variant of move this is.
        promotion (int): Promoted piece type for ``PROMOTION`` moves.
        captured (int): Piece tag removed from ``to_sq`` (captures and
            promotions onto an enemy piece); needed to reverse the move.
        first_duck (bool): ``DUCK`` move that puts the duck on the board.
    """

    from_sq: int
    to_sq: int
    kind: MoveKind = MoveKind.QUIET
    promotion: int = NONE
    captured: int = NONE
    first_duck: bool = False

    @property
    def is_duck(self) -> bool:
        return self.kind == MoveKind.DUCK

    @property
    def is_capture(self) -> bool:
        return self.captured != NONE or self.kind == MoveKind.EN_PASSANT

    @property
    def is_invalid(self) -> bool:
        return self == INVALID_MOVE

    @property
    def flag(self) -> Flag:
        if self.kind == MoveKind.EN_PASSANT:
            return Flag.EN_PASSANT
        if self.kind == MoveKind.CASTLE:
            return Flag.CASTLING
        if self.kind == MoveKind.PROMOTION:
            return _PROMO_TO_FLAG[self.promotion]
        if self.kind == MoveKind.PAWN_DOUBLE:
            return Flag.PAWN_TWO_FORWARD
        if self.kind == MoveKind.DUCK:
            return Flag.FIRST_DUCK if self.first_duck else Flag.DUCK
        return Flag.NONE

    def pack(self) -> int:
        """Encode as ``start | target << 6 | flag << 12 | captured << 16``."""
        return (
            self.from_sq
            | (self.to_sq << TARGET_SHIFT)
            | (int(self.flag) << FLAG_SHIFT)
            | (self.captured << CAPTURED_SHIFT)
        )

    @classmethod
    def unpack(cls, value: int) -> "Move":
        """Decode a value produced by :meth:`pack`.

        Raises:
            ValueError: If the flag bits are not a known flag.
        """
        from_sq = value & START_MASK
        to_sq = (value >> TARGET_SHIFT) & START_MASK
        flag = Flag((value >> FLAG_SHIFT) & 0xF)
        captured = value >> CAPTURED_SHIFT
        if flag == Flag.EN_PASSANT:
            return cls(from_sq, to_sq, MoveKind.EN_PASSANT)
        if flag == Flag.CASTLING:
            return cls(from_sq, to_sq, MoveKind.CASTLE)
        if flag in _FLAG_TO_PROMO:
            return cls(from_sq, to_sq, MoveKind.PROMOTION, _FLAG_TO_PROMO[flag], captured)
        if flag == Flag.PAWN_TWO_FORWARD:
            return cls(from_sq, to_sq, MoveKind.PAWN_DOUBLE)
        if flag in (Flag.FIRST_DUCK, Flag.DUCK):
            return cls(from_sq, to_sq, MoveKind.DUCK, first_duck=flag == Flag.FIRST_DUCK)
        if captured != NONE:
            return cls(from_sq, to_sq, MoveKind.CAPTURE, captured=captured)
        return cls(from_sq, to_sq)

    def to_uci(self) -> str:
        """Serialize the move into text form.

        Returns:
            str: ``"e2e4"``, ``"e7e8q"`` for promotions, ``"@d5"`` for duck
            moves. The invalid sentinel serializes as ``"0000"``.
        """
        if self.is_invalid:
            return "0000"
        if self.kind == MoveKind.DUCK:
            return "@" + square_to_str(self.to_sq)
        promo = TYPE_TO_CHAR[self.promotion] if self.kind == MoveKind.PROMOTION else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo

    def __str__(self) -> str:
        return self.to_uci()


INVALID_MOVE: Final = Move(0, 0)


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(rank + 1)
