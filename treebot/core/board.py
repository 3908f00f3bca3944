"""Board wrapper over python-chess and the scoped move-application helper."""

from contextlib import contextmanager
from typing import Iterator, List, Optional

import chess


@contextmanager
def pushed(board: chess.Board, *moves: chess.Move) -> Iterator[chess.Board]:
    """Push ``moves`` in order and pop them in reverse on every exit path."""
    applied = 0
    try:
        for move in moves:
            board.push(move)
            applied += 1
        yield board
    finally:
        for _ in range(applied):
            board.pop()


class ChessBoard:
    def __init__(self, fen: Optional[str] = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()
        self.move_history: List[str] = []

    def reset(self):
        """Reset to the initial position."""
        self.board.reset()
        self.move_history.clear()

    def set_fen(self, fen: str):
        """Set board state from a FEN string. Raises ValueError on bad FEN."""
        self.board.set_fen(fen)
        self.move_history.clear()

    def get_fen(self) -> str:
        return self.board.fen()

    def make_move(self, move_str: str) -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal."""
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError:
            return False
        if move not in self.board.legal_moves:
            return False
        self.board.push(move)
        self.move_history.append(move_str)
        return True

    def undo_move(self):
        """Pop the last move, if any."""
        if self.move_history:
            self.board.pop()
            self.move_history.pop()

    def is_game_over(self) -> bool:
        return self.board.is_game_over()

    def print_board(self):
        print(self.board)
