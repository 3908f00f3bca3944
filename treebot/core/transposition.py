"""Position store: the transposition table shared by every turn of one match.

Positions are keyed by their 64-bit polyglot Zobrist hash. Keys are assumed to
be collision-free; the table stores no FEN to verify them, so a colliding key
would silently alias two positions.

Usage (example):

    from treebot.core.transposition import PositionStore

    store = PositionStore()
    key = store.key(board)
    node = store.get_or_create(key, lambda: SearchNode(True, 0.0))
    print(len(store), key in store)

The table never evicts; it is cleared when the match ends.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional

import chess
from chess import polyglot

from treebot.core.node import SearchNode


class PositionStore:
    """Dict arena of SearchNode records keyed by position key.

    Not thread-safe: a single search owns it for the lifetime of a match.
    Methods:
      - key(board) -> int
      - get(key) -> Optional[SearchNode]
      - get_or_create(key, factory) -> SearchNode
      - set(key, node)
      - clear()
    """

    def __init__(self):
        self._table: Dict[int, SearchNode] = {}

    @staticmethod
    def key(board: chess.Board) -> int:
        return polyglot.zobrist_hash(board)

    def get(self, key: int) -> Optional[SearchNode]:
        return self._table.get(key)

    def get_or_create(self, key: int, factory: Callable[[], SearchNode]) -> SearchNode:
        node = self._table.get(key)
        if node is None:
            node = factory()
            self._table[key] = node
        return node

    def set(self, key: int, node: SearchNode) -> None:
        self._table[key] = node

    def clear(self) -> None:
        self._table.clear()

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: int) -> bool:
        return key in self._table

    def __iter__(self) -> Iterator[int]:
        return iter(self._table)
