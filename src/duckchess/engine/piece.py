from __future__ import annotations

from typing import Dict, Final


# Piece types (low four bits)
NONE: Final = 0
KING: Final = 1
PAWN: Final = 2
KNIGHT: Final = 3
BISHOP: Final = 5
ROOK: Final = 6
QUEEN: Final = 7
DUCK: Final = 8

# Colors (bits 4-5); the duck and empty squares carry NO_COLOR
NO_COLOR: Final = 0
WHITE: Final = 16
BLACK: Final = 32

TYPE_MASK: Final = 0b001111
COLOR_MASK: Final = 0b110000

# Piece types that live in an IndexedPieceSet, in generation order
SET_TYPES: Final = (PAWN, KNIGHT, BISHOP, ROOK, QUEEN)
PROMOTION_TYPES: Final = (KNIGHT, BISHOP, ROOK, QUEEN)

TYPE_TO_CHAR: Dict[int, str] = {
    KING: "k",
    PAWN: "p",
    KNIGHT: "n",
    BISHOP: "b",
    ROOK: "r",
    QUEEN: "q",
}
CHAR_TO_TYPE: Dict[str, int] = {v: k for k, v in TYPE_TO_CHAR.items()}


def piece_type(piece: int) -> int:
    return piece & TYPE_MASK


def piece_color(piece: int) -> int:
    return piece & COLOR_MASK


def opponent(color: int) -> int:
    """Return the other side's color. ``NO_COLOR`` maps to itself."""
    if color == WHITE:
        return BLACK
    if color == BLACK:
        return WHITE
    return NO_COLOR


def piece_to_char(piece: int) -> str:
    """Return the FEN symbol for ``piece`` (uppercase white, ``D`` for the duck).

    Raises:
        ValueError: If ``piece`` is empty or not a known piece.
    """
    t = piece_type(piece)
    if t == DUCK:
        return "D"
    if t not in TYPE_TO_CHAR:
        raise ValueError(f"not a piece: {piece!r}")
    ch = TYPE_TO_CHAR[t]
    return ch.upper() if piece_color(piece) == WHITE else ch


def char_to_piece(ch: str) -> int:
    """Parse a FEN piece symbol into a piece tag.

    Raises:
        ValueError: If ``ch`` is not a piece symbol.
    """
    if ch == "D":
        return DUCK
    lower = ch.lower()
    if lower not in CHAR_TO_TYPE:
        raise ValueError(f"invalid piece symbol: {ch!r}")
    color = WHITE if ch.isupper() else BLACK
    return CHAR_TO_TYPE[lower] | color


def color_name(color: int) -> str:
    if color == WHITE:
        return "white"
    if color == BLACK:
        return "black"
    return "none"
