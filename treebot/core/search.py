import logging
import random
from typing import List, Optional

import chess

from treebot.config import CONFIG, Config
from treebot.core.board import pushed
from treebot.core.evaluator import Evaluator
from treebot.core.expander import NodeExpander
from treebot.core.node import INF, SearchNode
from treebot.core.timer import TurnTimer, deadline_passed
from treebot.core.transposition import PositionStore
from treebot.core.utils import format_info

logger = logging.getLogger(__name__)


class SearchError(RuntimeError):
    """The root has no best move to play."""


class SearchEngine:
    """Depth-bounded alpha-beta over a position store kept for a whole match.

    Every call to ``think`` resumes from whatever earlier turns left in the
    store, so analysis deepens move over move instead of restarting.
    """

    def __init__(self, evaluator: Optional[Evaluator] = None, config: Optional[Config] = None):
        self.config = config or CONFIG
        self.evaluator = evaluator or Evaluator(self.config.eval)
        self.store = PositionStore()
        self.expander = NodeExpander(self.store, self.evaluator, self.config.search)
        self.rng = random.Random(self.config.search.seed)
        self.last_depth = 0
        self._path = set()

    @property
    def max_depth(self) -> int:
        return self.expander.max_depth

    @max_depth.setter
    def max_depth(self, depth: int) -> None:
        self.expander.max_depth = depth

    @property
    def time_limit_ms(self) -> Optional[int]:
        return self.expander.time_limit_ms

    @time_limit_ms.setter
    def time_limit_ms(self, limit: Optional[int]) -> None:
        self.expander.time_limit_ms = limit

    @property
    def nodes(self) -> int:
        return self.expander.nodes

    def new_match(self) -> None:
        """Drop everything learned in the previous match."""
        self.store.clear()
        self.expander.nodes = 0

    def root_node(self, board: chess.Board) -> Optional[SearchNode]:
        return self.store.get(self.store.key(board))

    def think(self, board: chess.Board, timer: Optional[TurnTimer] = None) -> chess.Move:
        """Pick a move for the side to move in ``board``.

        Ties among equally valued moves are broken uniformly at random.
        ``board`` is left as it was found.
        """
        timer = timer or TurnTimer()
        self.expander.nodes = 0
        self.last_depth = 0
        key = self.store.key(board)
        root = self.store.get(key)
        if root is None or not root.is_search_complete or not root.best_moves:
            self._explore(key, board, 0, timer)
            root = self.store.get(key)

        if root is None or not root.best_moves:
            raise SearchError(f"no best move for position {board.fen()}")

        move = self.rng.choice(sorted(root.best_moves, key=chess.Move.uci))
        elapsed = timer.elapsed_ms()
        logger.info("think: %s value=%.3f best=%d complete=%s nodes=%d table=%d time=%dms",
                    move.uci(), root.value, len(root.best_moves), root.is_search_complete,
                    self.nodes, len(self.store), elapsed)
        if logger.isEnabledFor(logging.DEBUG):
            pv = self.principal_variation(board, self.max_depth)
            value = root.value if root.maximizer else -root.value
            logger.debug(format_info(self.last_depth, value, self.nodes, elapsed, pv,
                                     self.config.eval.mate_base))
        return move

    def _explore(self, key: int, board: chess.Board, depth: int, timer: TurnTimer,
                 alpha: float = INF, beta: float = -INF) -> bool:
        """Search the node of ``board`` (reached ``depth`` plies below the root).

        ``alpha`` is the lowest value the minimizing parent has backed up so
        far and ``beta`` the highest one of a maximizing parent. Returns False
        when the node was cut off and must not be folded into its parent.
        A position repeating one of its ancestors is cut off as well.
        """
        if key in self._path:
            return False
        node = self.store.get(key)
        if node is None or not node.transitions:
            node = self.expander.expand(board, depth, timer)
        if node.is_terminal and depth > 0:
            return True

        if (node.maximizer and node.value > alpha) or (not node.maximizer and node.value < beta):
            return False

        if depth < self.max_depth and not deadline_passed(timer, self.time_limit_ms):
            self.last_depth = max(self.last_depth, depth + 1)
            node.reset()
            alpha, beta = INF, -INF
            self._path.add(key)
            try:
                for move, child_key in list(node.transitions.items()):
                    with pushed(board, move):
                        completed = self._explore(child_key, board, depth + 1, timer, alpha, beta)
                    child = self.store.get(child_key)
                    if completed and child is not None:
                        node.fold(child, move)
                        alpha = min(alpha, node.value)
                        beta = max(beta, node.value)
            finally:
                self._path.discard(key)
            self.store.set(key, node)
        return True

    def principal_variation(self, board: chess.Board, max_length: int) -> List[chess.Move]:
        """Follow the first stored best move from ``board`` for up to ``max_length`` plies."""
        pv: List[chess.Move] = []
        key = self.store.key(board)
        seen = {key}
        for _ in range(max_length):
            node = self.store.get(key)
            if node is None or not node.best_moves:
                break
            move = min(node.best_moves, key=chess.Move.uci)
            key = node.transitions.get(move)
            if key is None:
                break
            pv.append(move)
            if key in seen:
                break
            seen.add(key)
        return pv
