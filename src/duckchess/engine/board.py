from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .errors import CapacityError, IllegalMoveError, UnmakeOrderError
from .move import Move, MoveKind, square_to_str, str_to_square
from .movegen import generate_moves
from .piece import (
    BISHOP,
    BLACK,
    DUCK,
    KING,
    KNIGHT,
    NO_COLOR,
    NONE,
    PAWN,
    QUEEN,
    ROOK,
    SET_TYPES,
    WHITE,
    char_to_piece,
    opponent,
    piece_color,
    piece_to_char,
    piece_type,
)
from .piece_set import IndexedPieceSet


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

NOT_ON_BOARD = -1

# 50 moves per side without a pawn move or capture; each move is a piece-ply
# plus a duck-ply
DRAW_PLY_LIMIT = 200

# Maximum count per color; promotions can raise every non-pawn count
MAX_PIECE_COUNT: Dict[int, int] = {
    PAWN: 8,
    KNIGHT: 10,
    BISHOP: 10,
    ROOK: 10,
    QUEEN: 9,
}

# King target -> (rook from, rook to)
CASTLE_ROOK_SQUARES: Dict[int, Tuple[int, int]] = {
    6: (7, 5),
    2: (0, 3),
    62: (63, 61),
    58: (56, 59),
}

# Squares whose occupant moving or being captured drops castling rights
_RIGHTS_LOST_ON_TOUCH: Dict[int, Tuple[str, ...]] = {
    0: ("white_queenside",),
    7: ("white_kingside",),
    4: ("white_kingside", "white_queenside"),
    56: ("black_queenside",),
    63: ("black_kingside",),
    60: ("black_kingside", "black_queenside"),
}


def _empty_piece_sets() -> Dict[int, IndexedPieceSet]:
    return {
        t | color: IndexedPieceSet(MAX_PIECE_COUNT[t])
        for color in (WHITE, BLACK)
        for t in SET_TYPES
    }


@dataclass(frozen=True)
class UndoToken:
    """State needed to reverse one ``make_move``.

    The move itself carries the captured piece; the rest is board state that
    cannot be re-derived after the move.
    """

    move: Move
    ep_square: Optional[int]
    castling: Tuple[bool, bool, bool, bool]
    plies_since_event: int
    is_game_over: bool
    winner: int


@dataclass
class Board:
    """Duck chess position with mailbox, piece sets and make/unmake.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``squares`` and ``pieces`` are kept consistent by every mutation; nothing
      outside this class writes either of them.
    - ``turn_color`` stays on the mover through its duck-ply and flips after it.
    """

    squares: List[int] = field(default_factory=lambda: [NONE] * 64)
    pieces: Dict[int, IndexedPieceSet] = field(default_factory=_empty_piece_sets)
    king_squares: Dict[int, int] = field(
        default_factory=lambda: {WHITE: NOT_ON_BOARD, BLACK: NOT_ON_BOARD}
    )
    duck_square: int = NOT_ON_BOARD
    turn_color: int = WHITE
    duck_turn: bool = False
    white_kingside: bool = False
    white_queenside: bool = False
    black_kingside: bool = False
    black_queenside: bool = False
    ep_square: Optional[int] = None
    ply: int = 0
    plies_since_event: int = 0
    is_game_over: bool = False
    winner: int = NO_COLOR
    # cached moves for the current phase; callers must not mutate
    legal_moves: List[Move] = field(default_factory=list, compare=False, repr=False)
    _legal_set: Optional[Set[Move]] = field(default=None, compare=False, repr=False)
    _undo_stack: List[UndoToken] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position
        with the duck not yet placed."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a duck-aware FEN string.

        Args:
            fen (str): Standard six FEN fields; ``D`` marks the duck in the
                placement field, and an optional seventh field ``duck`` says
                the side to move is placing the duck.

        Returns:
            Board: Board with legal moves and game-over state computed.

        Raises:
            ValueError: If the string is malformed, a king is missing or
                duplicated, there is more than one duck, or a piece count
                exceeds its maximum.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) not in (6, 7):
            raise ValueError("FEN must have 6 or 7 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts[:6]
        duck_turn = False
        if len(parts) == 7:
            if parts[6] != "duck":
                raise ValueError("seventh FEN field must be 'duck'")
            duck_turn = True

        board = cls()
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                    continue
                if file_idx >= 8:
                    raise ValueError("too many squares in FEN rank")
                try:
                    piece = char_to_piece(ch)
                except ValueError as e:
                    raise ValueError(f"invalid piece in FEN: {ch!r}") from e
                board._place(rank_idx * 8 + file_idx, piece)
                file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        for color in (WHITE, BLACK):
            if board.king_squares[color] == NOT_ON_BOARD:
                raise ValueError("FEN must contain one king per side")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        board.turn_color = WHITE if stm == "w" else BLACK
        board.duck_turn = duck_turn

        if castling != "-":
            for ch in castling:
                if ch not in "KQkq":
                    raise ValueError("invalid castling rights")
            board.white_kingside = "K" in castling
            board.white_queenside = "Q" in castling
            board.black_kingside = "k" in castling
            board.black_queenside = "q" in castling

        if ep != "-":
            try:
                ep_square = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            if ep_square // 8 not in (2, 5):
                raise ValueError("invalid en passant square rank")
            board.ep_square = ep_square

        try:
            plies_since_event = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if plies_since_event < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")
        board.plies_since_event = plies_since_event
        board.ply = (
            (fullmove_number - 1) * 4
            + (2 if board.turn_color == BLACK else 0)
            + (1 if duck_turn else 0)
        )

        board._refresh()
        return board

    def to_fen(self) -> str:
        """Serialize the current position into a duck-aware FEN string."""
        ranks_str: List[str] = []
        for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
            run = 0
            row = []
            for file_idx in range(8):
                piece = self.squares[rank_idx * 8 + file_idx]
                if piece == NONE:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(piece_to_char(piece))
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)

        stm = "w" if self.turn_color == WHITE else "b"
        castling = "".join(
            ch
            for ch, right in zip(
                "KQkq",
                (
                    self.white_kingside,
                    self.white_queenside,
                    self.black_kingside,
                    self.black_queenside,
                ),
            )
            if right
        )
        ep = square_to_str(self.ep_square) if self.ep_square is not None else "-"
        fen = (
            f"{placement} {stm} {castling or '-'} {ep} "
            f"{self.plies_since_event} {self.ply // 4 + 1}"
        )
        return fen + " duck" if self.duck_turn else fen

    # --- Queries ---

    def is_move_legal(self, move: Move) -> bool:
        if self._legal_set is None:
            self._legal_set = set(self.legal_moves)
        return move in self._legal_set

    def find_move(self, text: str) -> Move:
        """Resolve text notation (``e2e4``, ``e7e8q``, ``@d5``) to a legal move.

        Raises:
            IllegalMoveError: If no legal move has that notation.
        """
        for m in self.legal_moves:
            if m.to_uci() == text:
                return m
        raise IllegalMoveError(f"illegal move: {text!r}")

    def castling_rights(self) -> Tuple[bool, bool, bool, bool]:
        return (
            self.white_kingside,
            self.white_queenside,
            self.black_kingside,
            self.black_queenside,
        )

    @property
    def pending_unmakes(self) -> int:
        return len(self._undo_stack)

    def discard_undo_history(self, keep: int = 1) -> None:
        """Forget all but the ``keep`` most recent undo tokens."""
        if keep <= 0:
            self._undo_stack.clear()
        else:
            del self._undo_stack[:-keep]

    def clone(self) -> "Board":
        """Deep copy of the position and legal-move cache; no undo history."""
        other = Board.__new__(Board)
        other.squares = list(self.squares)
        other.pieces = {k: s.clone() for k, s in self.pieces.items()}
        other.king_squares = dict(self.king_squares)
        other.duck_square = self.duck_square
        other.turn_color = self.turn_color
        other.duck_turn = self.duck_turn
        other.white_kingside = self.white_kingside
        other.white_queenside = self.white_queenside
        other.black_kingside = self.black_kingside
        other.black_queenside = self.black_queenside
        other.ep_square = self.ep_square
        other.ply = self.ply
        other.plies_since_event = self.plies_since_event
        other.is_game_over = self.is_game_over
        other.winner = self.winner
        other.legal_moves = list(self.legal_moves)
        other._legal_set = None
        other._undo_stack = []
        return other

    # --- Make / unmake ---

    def make_move(self, move: Move) -> UndoToken:
        """Apply a legal ``move`` in place and return the token that reverses it.

        Raises:
            IllegalMoveError: If ``move`` is not in ``legal_moves``; the board
                is left untouched.
            CapacityError: If a promotion would exceed the piece-type maximum;
                the board is left untouched.
        """
        if not self.is_move_legal(move):
            raise IllegalMoveError(f"illegal move: {move.to_uci()}")
        token = UndoToken(
            move=move,
            ep_square=self.ep_square,
            castling=self.castling_rights(),
            plies_since_event=self.plies_since_event,
            is_game_over=self.is_game_over,
            winner=self.winner,
        )
        mover = self.turn_color
        if move.kind == MoveKind.DUCK:
            self._apply_duck(move)
            event = False
            king_captured = False
        else:
            event, king_captured = self._apply_piece_move(move, mover)
        self._undo_stack.append(token)

        # Advance turn state
        self.ply += 1
        self.plies_since_event = 0 if event else self.plies_since_event + 1
        if self.duck_turn:
            self.duck_turn = False
            self.turn_color = opponent(mover)
        else:
            self.duck_turn = True

        if king_captured:
            self.is_game_over = True
            self.winner = mover
        elif self.plies_since_event >= DRAW_PLY_LIMIT:
            self.is_game_over = True
            self.winner = NO_COLOR
        self._refresh()
        return token

    def unmake_move(self, token: UndoToken) -> None:
        """Reverse the most recent ``make_move`` in place.

        Raises:
            UnmakeOrderError: If ``token`` is not the latest outstanding token.
        """
        if not self._undo_stack:
            raise UnmakeOrderError("no move to unmake")
        if self._undo_stack[-1] is not token:
            raise UnmakeOrderError("unmake_move must reverse the most recent move")
        self._undo_stack.pop()
        move = token.move

        # Toggle phase back
        if self.duck_turn:
            self.duck_turn = False
        else:
            self.duck_turn = True
            self.turn_color = opponent(self.turn_color)
        mover = self.turn_color

        if move.kind == MoveKind.DUCK:
            self.squares[move.to_sq] = NONE
            if move.first_duck:
                self.duck_square = NOT_ON_BOARD
            else:
                self.squares[move.from_sq] = DUCK
                self.duck_square = move.from_sq
        else:
            self._revert_piece_move(move, mover)

        self.ep_square = token.ep_square
        (
            self.white_kingside,
            self.white_queenside,
            self.black_kingside,
            self.black_queenside,
        ) = token.castling
        self.plies_since_event = token.plies_since_event
        self.is_game_over = token.is_game_over
        self.winner = token.winner
        self.ply -= 1
        self._regenerate()

    # --- Internal mutation helpers ---

    def _place(self, square: int, piece: int) -> None:
        """Put ``piece`` on an empty square while setting up a position."""
        if self.squares[square] != NONE:
            raise ValueError(f"square {square_to_str(square)} already occupied")
        t = piece_type(piece)
        if t == PAWN and square // 8 in (0, 7):
            raise ValueError("pawns cannot stand on the first or last rank")
        if t == KING:
            if self.king_squares[piece_color(piece)] != NOT_ON_BOARD:
                raise ValueError("only one king per side is allowed")
            self.king_squares[piece_color(piece)] = square
        elif t == DUCK:
            if self.duck_square != NOT_ON_BOARD:
                raise ValueError("only one duck is allowed")
            self.duck_square = square
        else:
            try:
                self.pieces[piece].add(square)
            except CapacityError as e:
                raise ValueError(str(e)) from e
        self.squares[square] = piece

    def _apply_duck(self, move: Move) -> None:
        if not move.first_duck:
            self.squares[move.from_sq] = NONE
        self.squares[move.to_sq] = DUCK
        self.duck_square = move.to_sq

    def _apply_piece_move(self, move: Move, mover: int) -> Tuple[bool, bool]:
        """Relocate the moving piece and apply captures/promotion/castling.

        Returns:
            Tuple[bool, bool]: (pawn move or capture, king captured).
        """
        from_sq, to_sq = move.from_sq, move.to_sq
        piece = self.squares[from_sq]
        moved_type = piece_type(piece)
        enemy = opponent(mover)

        if move.kind == MoveKind.PROMOTION:
            promo_set = self.pieces[move.promotion | mover]
            if len(promo_set) >= promo_set.capacity:
                raise CapacityError(f"cannot promote: piece set full ({promo_set.capacity})")

        # Remove captured piece
        king_captured = False
        if move.kind == MoveKind.EN_PASSANT:
            cap_sq = to_sq - 8 if mover == WHITE else to_sq + 8
            self.pieces[PAWN | enemy].remove(cap_sq)
            self.squares[cap_sq] = NONE
        elif move.captured != NONE:
            if piece_type(move.captured) == KING:
                self.king_squares[enemy] = NOT_ON_BOARD
                king_captured = True
            else:
                self.pieces[move.captured].remove(to_sq)

        # Place moved (or promoted) piece
        self.squares[from_sq] = NONE
        if move.kind == MoveKind.PROMOTION:
            self.pieces[PAWN | mover].remove(from_sq)
            self.pieces[move.promotion | mover].add(to_sq)
            self.squares[to_sq] = move.promotion | mover
        elif moved_type == KING:
            self.king_squares[mover] = to_sq
            self.squares[to_sq] = piece
            if move.kind == MoveKind.CASTLE:
                rook_from, rook_to = CASTLE_ROOK_SQUARES[to_sq]
                self.pieces[ROOK | mover].move(rook_from, rook_to)
                self.squares[rook_to] = self.squares[rook_from]
                self.squares[rook_from] = NONE
        else:
            self.pieces[piece].move(from_sq, to_sq)
            self.squares[to_sq] = piece

        # En passant target survives our duck-ply; any other piece-ply clears it
        self.ep_square = (from_sq + to_sq) // 2 if move.kind == MoveKind.PAWN_DOUBLE else None

        for sq in (from_sq, to_sq):
            for right in _RIGHTS_LOST_ON_TOUCH.get(sq, ()):
                setattr(self, right, False)

        event = moved_type == PAWN or move.is_capture
        return event, king_captured

    def _revert_piece_move(self, move: Move, mover: int) -> None:
        from_sq, to_sq = move.from_sq, move.to_sq
        piece = self.squares[to_sq]
        enemy = opponent(mover)

        if move.kind == MoveKind.PROMOTION:
            self.pieces[piece].remove(to_sq)
            self.pieces[PAWN | mover].add(from_sq)
            self.squares[from_sq] = PAWN | mover
        elif piece_type(piece) == KING:
            self.king_squares[mover] = from_sq
            self.squares[from_sq] = piece
            if move.kind == MoveKind.CASTLE:
                rook_from, rook_to = CASTLE_ROOK_SQUARES[to_sq]
                self.pieces[ROOK | mover].move(rook_to, rook_from)
                self.squares[rook_from] = self.squares[rook_to]
                self.squares[rook_to] = NONE
        else:
            self.pieces[piece].move(to_sq, from_sq)
            self.squares[from_sq] = piece
        self.squares[to_sq] = NONE

        # Restore captured piece
        if move.kind == MoveKind.EN_PASSANT:
            cap_sq = to_sq - 8 if mover == WHITE else to_sq + 8
            self.pieces[PAWN | enemy].add(cap_sq)
            self.squares[cap_sq] = PAWN | enemy
        elif move.captured != NONE:
            if piece_type(move.captured) == KING:
                self.king_squares[enemy] = to_sq
            else:
                self.pieces[move.captured].add(to_sq)
            self.squares[to_sq] = move.captured

    def _regenerate(self) -> None:
        self.legal_moves = generate_moves(self)
        self._legal_set = None

    def _refresh(self) -> None:
        """Regenerate legal moves and apply the no-move rule.

        A side with no piece move available wins (duck chess stalemate rule).
        """
        self._regenerate()
        if not self.is_game_over and not self.duck_turn and not self.legal_moves:
            self.is_game_over = True
            self.winner = self.turn_color
