"""Node expander: grows a position's search node by one ply."""

from typing import Optional

import chess

from treebot.config import CONFIG, SearchConfig
from treebot.core.board import pushed
from treebot.core.evaluator import Evaluator
from treebot.core.node import SearchNode
from treebot.core.timer import TurnTimer, deadline_passed
from treebot.core.transposition import PositionStore


class NodeExpander:
    def __init__(self, store: PositionStore, evaluator: Optional[Evaluator] = None,
                 cfg: Optional[SearchConfig] = None):
        self.store = store
        self.evaluator = evaluator or Evaluator()
        self.cfg = cfg or CONFIG.search
        self.max_depth = self.cfg.max_depth
        self.time_limit_ms = self.cfg.time_limit_ms
        self.nodes = 0

    def node_for(self, board: chess.Board, key: Optional[int] = None) -> SearchNode:
        """Fetch the node for ``board``, seeding it from the evaluator if new."""
        if key is None:
            key = self.store.key(board)

        def seed() -> SearchNode:
            value, terminal = self.evaluator.evaluate(board, board.ply())
            return SearchNode(board.turn == chess.WHITE, value, terminal)

        return self.store.get_or_create(key, seed)

    def expand(self, board: chess.Board, depth: int, timer: TurnTimer,
               extension: bool = False) -> SearchNode:
        """Populate the children of ``board``'s node and fold them into it.

        ``depth`` is the distance in plies from the search root. An extension
        call is the single extra ply granted to a non-quiet leaf; it is dropped
        once the time budget is spent and never grants a further extension.
        """
        key = self.store.key(board)
        parent = self.node_for(board, key)
        if parent.is_terminal and depth > 0:
            return parent
        if extension and deadline_passed(timer, self.time_limit_ms):
            return parent

        self.nodes += 1
        quiescence = self.cfg.use_quiescence and not extension
        # captures first; the union keeps one entry per move
        moves = dict.fromkeys(board.generate_legal_captures())
        moves.update(dict.fromkeys(board.legal_moves))

        for move in moves:
            with pushed(board, move):
                child_key = self.store.key(board)
                child = self.node_for(board, child_key)
                if (quiescence
                        and depth == self.max_depth
                        and not child.is_search_complete
                        and not child.transitions
                        and parent.is_quiescence_child(child, self.cfg.quiescence_threshold)):
                    child = self.expand(board, depth + 1, timer, extension=True)
                parent.transitions[move] = child_key
                parent.fold(child, move)

        self.store.set(key, parent)
        return parent
