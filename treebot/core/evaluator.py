"""
Static evaluator.

Scores a position as a leaf of the search tree. Scores are from White's
point of view: positive favours White, the maximizing side.

Material is the sum of ``count * weight**2`` per piece type, where the weight
is the piece type index (pawn 1 ... king 6). Kings cancel out but keep the
table complete. The total is discounted by a height penalty
``(horizon - ply) / horizon`` so that lines reached later in the game count
for slightly less, and so that faster mates score higher than slower ones.
"""

from typing import Optional, Tuple

import chess

from treebot.config import CONFIG, EvalConfig


def _sign(x: float) -> int:
    return (x > 0) - (x < 0)


class Evaluator:
    def __init__(self, cfg: Optional[EvalConfig] = None) -> None:
        self.cfg = cfg or CONFIG.eval
        self.weights = {
            chess.PIECE_NAMES.index(name.lower()): value * value
            for name, value in self.cfg.piece_values.items()
        }

    def material(self, board: chess.Board) -> int:
        """Signed material balance, positive when White is ahead."""
        score = 0
        for pt, weight in self.weights.items():
            score += weight * len(board.pieces(pt, chess.WHITE))
            score -= weight * len(board.pieces(pt, chess.BLACK))
        return score

    @staticmethod
    def is_draw(board: chess.Board) -> bool:
        return (board.is_stalemate()
                or board.is_insufficient_material()
                or board.is_fifty_moves()
                or board.is_repetition(2))

    def evaluate(self, board: chess.Board, ply: int) -> Tuple[float, bool]:
        """Return ``(value, is_terminal)`` for ``board`` seen at game ply ``ply``."""
        cfg = self.cfg
        # +1 when the side that just moved is White, i.e. the side to move loses
        last_mover = -1 if board.turn == chess.WHITE else 1
        material = self.material(board)
        height = (cfg.horizon - ply) / cfg.horizon

        if self.is_draw(board):
            if board.is_insufficient_material():
                return 0.0, True
            # lean away from the draw for whoever is ahead
            return -cfg.draw_penalty * _sign(_sign(material) + last_mover), True

        if board.is_checkmate():
            return last_mover * (cfg.mate_base + cfg.mate_scale * height), True

        value = material * height
        if board.is_check():
            value *= 1 + _sign(value) * last_mover * cfg.check_factor
        return value, False
