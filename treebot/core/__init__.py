"""Core engine components: board helpers, evaluator, search nodes, position store and search."""

from .board import ChessBoard, pushed
from .evaluator import Evaluator
from .expander import NodeExpander
from .node import SearchNode
from .search import SearchEngine, SearchError
from .timer import TurnTimer, time_budget_ms
from .transposition import PositionStore
