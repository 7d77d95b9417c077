from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .board import Board, UndoToken
from .errors import IllegalMoveError
from .move import Move


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: hold the authoritative board, validate and apply moves,
    and reverse the single most recent move.
    """

    board: Board
    last_token: Optional[UndoToken] = None

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    def legal_moves(self) -> List[Move]:
        return list(self.board.legal_moves)

    def apply_move(self, move: Move) -> None:
        if not self.board.is_move_legal(move):
            raise IllegalMoveError("illegal move")
        self.last_token = self.board.make_move(move)
        self.board.discard_undo_history(keep=1)

    def play(self, text: str) -> Move:
        """Apply the move written as ``text`` (``e2e4``, ``e7e8q``, ``@d5``)."""
        move = self.board.find_move(text.strip())
        self.apply_move(move)
        return move

    def undo_move(self) -> None:
        if self.last_token is None:
            raise ValueError("no moves to undo")
        self.board.unmake_move(self.last_token)
        self.last_token = None

    @property
    def last_move(self) -> Optional[Move]:
        return self.last_token.move if self.last_token is not None else None

    # --- State flags for protocol ---
    def is_game_over(self) -> bool:
        return self.board.is_game_over

    def winner(self) -> int:
        return self.board.winner
