from typing import Optional, Tuple

from treebot.config import CONFIG, Config
from treebot.core.board import ChessBoard
from treebot.core.search import SearchEngine
from treebot.core.timer import TurnTimer


class Engine:
    """One match: a board plus the search engine whose table lives as long as it."""

    def __init__(self, fen: Optional[str] = None, config: Optional[Config] = None):
        self.board = ChessBoard(fen)
        self.search = SearchEngine(config=config or CONFIG)

    def get_best_move(self) -> Optional[Tuple[str, float]]:
        """Return ``(uci, value)`` for the side to move, or None if the game is over."""
        if self.board.is_game_over():
            return None
        move = self.search.think(self.board.board, TurnTimer())
        return move.uci(), self.search.root_node(self.board.board).value

    def make_move(self, move_uci: str) -> bool:
        return self.board.make_move(move_uci)

    def undo_move(self) -> bool:
        """Take back the last move played on the board. False if there was none."""
        if not self.board.move_history:
            return False
        self.board.undo_move()
        return True

    def set_fen(self, fen: str) -> None:
        self.board.set_fen(fen)

    def new_game(self) -> None:
        self.board.reset()
        self.search.new_match()

    def print_board(self):
        self.board.print_board()
