"""Search node: the memoized summary of one position in the position store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Set

import chess

INF = float("inf")


@dataclass(eq=False)
class SearchNode:
    """
    One record per distinct position key.

    ``backed_up_value`` starts at the identity of the side to move
    (``-inf`` for the maximizer, ``+inf`` for the minimizer) so that any real
    child value replaces it. Until that happens ``value`` reports the static
    evaluation.
    """

    maximizer: bool
    static_value: float
    is_terminal: bool = False
    backed_up_value: float = field(init=False, default=-INF)
    is_search_complete: bool = field(init=False, default=False)
    best_moves: Set[chess.Move] = field(default_factory=set)
    transitions: Dict[chess.Move, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.backed_up_value = self._unset()
        self.is_search_complete = self.is_terminal

    def _unset(self) -> float:
        return -INF if self.maximizer else INF

    @property
    def value(self) -> float:
        if self.backed_up_value in (INF, -INF):
            return self.static_value
        return self.backed_up_value

    def improves(self, candidate: float) -> bool:
        if self.maximizer:
            return candidate > self.backed_up_value
        return candidate < self.backed_up_value

    def fold(self, child: "SearchNode", move: chess.Move) -> None:
        """Fold ``child`` reached by ``move`` into this node's value and best moves.

        Every change to ``backed_up_value``/``best_moves`` goes through here.
        """
        candidate = child.value
        if candidate == self.backed_up_value:
            self.best_moves.add(move)
            self.is_search_complete = self.is_search_complete and child.is_search_complete
        elif self.improves(candidate):
            self.backed_up_value = candidate
            self.best_moves = {move}
            self.is_search_complete = child.is_search_complete
        else:
            self.best_moves.discard(move)
            self.is_search_complete = self.is_search_complete and bool(self.best_moves)

    def reset(self) -> None:
        """Forget the backed-up value before re-folding every transition."""
        self.backed_up_value = self._unset()
        self.best_moves = set()
        self.is_search_complete = self.is_terminal

    def is_quiescence_child(self, child: "SearchNode", threshold: float) -> bool:
        return (self.static_value - child.value) ** 2 > threshold

    def __repr__(self) -> str:
        side = "White" if self.maximizer else "Black"
        moves = ", ".join(sorted(m.uci() for m in self.best_moves))
        return (f"SearchNode({side}, [{self.value} ({self.static_value})], [{moves}], "
                f"{self.is_search_complete}, {len(self.transitions)})")
