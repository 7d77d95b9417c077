from __future__ import annotations

from typing import Iterator, List

from .errors import CapacityError


class IndexedPieceSet:
    """Dense list of the squares holding one (type, color) pair.

    Notes:
    - ``squares[:count]`` is the occupied prefix; order is not preserved.
    - ``_map[s] == i`` iff ``squares[i] == s``; ``-1`` marks unoccupied squares.
    - Removal swaps the last entry into the freed slot, so add/remove/move
      are all O(1).
    """

    __slots__ = ("capacity", "squares", "_map", "count")

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.squares: List[int] = [-1] * capacity
        self._map: List[int] = [-1] * 64
        self.count = 0

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[int]:
        return iter(self.squares[: self.count])

    def __getitem__(self, index: int) -> int:
        if index < 0 or index >= self.count:
            raise IndexError(index)
        return self.squares[index]

    def __contains__(self, square: int) -> bool:
        return self._map[square] != -1

    def __eq__(self, other: object) -> bool:
        # Same occupied squares; slot order is an implementation detail
        if not isinstance(other, IndexedPieceSet):
            return NotImplemented
        return self.capacity == other.capacity and sorted(self) == sorted(other)

    def __repr__(self) -> str:
        return f"IndexedPieceSet(capacity={self.capacity}, squares={list(self)})"

    def add(self, square: int) -> None:
        if self.count >= self.capacity:
            raise CapacityError(f"piece set full (capacity {self.capacity})")
        if self._map[square] != -1:
            raise CapacityError(f"square {square} already in piece set")
        self.squares[self.count] = square
        self._map[square] = self.count
        self.count += 1

    def remove(self, square: int) -> None:
        idx = self._map[square]
        if idx == -1:
            raise CapacityError(f"square {square} not in piece set")
        last = self.count - 1
        last_sq = self.squares[last]
        self.squares[idx] = last_sq
        self._map[last_sq] = idx
        self.squares[last] = -1
        self._map[square] = -1
        self.count = last

    def move(self, from_sq: int, to_sq: int) -> None:
        """Relocate the entry at ``from_sq`` to ``to_sq`` keeping its slot."""
        idx = self._map[from_sq]
        if idx == -1:
            raise CapacityError(f"square {from_sq} not in piece set")
        if self._map[to_sq] != -1:
            raise CapacityError(f"square {to_sq} already in piece set")
        self.squares[idx] = to_sq
        self._map[to_sq] = idx
        self._map[from_sq] = -1

    def index_of(self, square: int) -> int:
        return self._map[square]

    def clone(self) -> "IndexedPieceSet":
        other = IndexedPieceSet.__new__(IndexedPieceSet)
        other.capacity = self.capacity
        other.squares = list(self.squares)
        other._map = list(self._map)
        other.count = self.count
        return other
