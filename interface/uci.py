"""Minimal UCI front end: one engine, one match, one search per ``go``."""

import logging
import sys
from typing import Dict, List, Optional

import chess

from treebot.config import CONFIG
from treebot.core.search import SearchEngine, SearchError
from treebot.core.timer import TurnTimer, time_budget_ms
from treebot.core.utils import format_info

logger = logging.getLogger(__name__)

GO_INT_ARGS = ("wtime", "btime", "winc", "binc", "movestogo", "movetime", "depth")


class UCI:
    def __init__(self, out=None):
        self.engine = SearchEngine()
        self.board = chess.Board()
        self.out = out or sys.stdout

    def send(self, line: str) -> None:
        print(line, file=self.out, flush=True)

    def run(self):
        for line in sys.stdin:
            if not self.handle(line.strip()):
                break

    def handle(self, command: str) -> bool:
        """Process one command line. Returns False on ``quit``."""
        tokens = command.split()
        if not tokens:
            return True
        cmd, args = tokens[0], tokens[1:]
        if cmd == "uci":
            self.send(f"id name {CONFIG.ui.engine_name}")
            self.send(f"id author {CONFIG.ui.engine_author}")
            self.send("uciok")
        elif cmd == "isready":
            self.send("readyok")
        elif cmd == "ucinewgame":
            self.engine.new_match()
            self.board.reset()
        elif cmd == "position":
            self._parse_position(args)
        elif cmd == "go":
            self._go(args)
        elif cmd == "quit":
            return False
        else:
            logger.debug("Ignoring unsupported command %r", command)
        return True

    def _parse_position(self, tokens: List[str]) -> None:
        """Set up ``startpos`` or ``fen ...`` then play any ``moves``.

        A malformed FEN leaves the previous position untouched; an illegal
        move stops the move list at that point.
        """
        if not tokens:
            return
        if "moves" in tokens:
            idx = tokens.index("moves")
            setup, moves = tokens[:idx], tokens[idx + 1:]
        else:
            setup, moves = tokens, []

        if setup[0] == "startpos":
            board = chess.Board()
        elif setup[0] == "fen":
            try:
                board = chess.Board(" ".join(setup[1:]))
            except ValueError as e:
                logger.warning("Invalid FEN in position command: %s", e)
                return
        else:
            logger.warning("Unknown position type %r", setup[0])
            return

        for uci in moves:
            try:
                move = chess.Move.from_uci(uci)
            except ValueError:
                logger.warning("Invalid move %r in position command", uci)
                break
            if move not in board.legal_moves:
                logger.warning("Illegal move %r in position command", uci)
                break
            board.push(move)
        self.board = board

    def _parse_go(self, tokens: List[str]) -> Dict[str, int]:
        params: Dict[str, int] = {}
        i = 0
        while i < len(tokens):
            name = tokens[i]
            if name in GO_INT_ARGS and i + 1 < len(tokens):
                try:
                    params[name] = int(tokens[i + 1])
                except ValueError:
                    logger.warning("Non-integer value for go %s: %r", name, tokens[i + 1])
                i += 2
            else:
                i += 1
        if "infinite" in tokens:
            params["infinite"] = 1
        return params

    def _time_limit(self, params: Dict[str, int]) -> Optional[int]:
        cap = CONFIG.search.time_limit_ms
        if "infinite" in params:
            return None
        if "movetime" in params:
            return params["movetime"]
        side = "w" if self.board.turn == chess.WHITE else "b"
        remaining = params.get(f"{side}time")
        return time_budget_ms(remaining, params.get(f"{side}inc", 0),
                              params.get("movestogo", CONFIG.search.moves_to_go), cap)

    def _go(self, tokens: List[str]) -> None:
        params = self._parse_go(tokens)
        self.engine.time_limit_ms = self._time_limit(params)
        self.engine.max_depth = params.get("depth", CONFIG.search.max_depth)

        timer = TurnTimer()
        try:
            move = self.engine.think(self.board, timer)
        except SearchError:
            logger.exception("No move available")
            self.send("bestmove 0000")
            return

        root = self.engine.root_node(self.board)
        value = root.value if root.maximizer else -root.value
        pv = self.engine.principal_variation(self.board, self.engine.max_depth)
        self.send(format_info(self.engine.last_depth, value, self.engine.nodes,
                              timer.elapsed_ms(), pv, CONFIG.eval.mate_base))
        self.send(f"bestmove {move.uci()}")


def main():
    logging.basicConfig(level=CONFIG.log_level, stream=sys.stderr)
    UCI().run()


if __name__ == "__main__":
    main()
