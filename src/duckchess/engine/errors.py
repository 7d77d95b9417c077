from __future__ import annotations


class IllegalMoveError(ValueError):
    """A move outside the board's current legal moves was applied."""


class UnmakeOrderError(ValueError):
    """``unmake_move`` was called out of stack order or with nothing to undo."""


class CapacityError(RuntimeError):
    """An IndexedPieceSet would exceed its capacity or lost track of a square."""
