import logging
import sys

import chess

from treebot.config import CONFIG
from treebot.main import Engine


def main(argv=None):
    """Play White against the bot in the terminal."""
    logging.basicConfig(level=CONFIG.log_level)
    argv = sys.argv[1:] if argv is None else argv
    engine = Engine(fen=" ".join(argv) or None)
    board = engine.board

    while not board.is_game_over():
        engine.print_board()
        print("----------------------------")

        if board.board.turn == chess.WHITE:
            user_move = input("Enter your move (uci format, e2e4): ").strip()
            if user_move in ("quit", "exit"):
                break
            if user_move == "undo":
                # the bot reply and the human move before it
                if engine.undo_move() and engine.undo_move():
                    print("Move taken back.")
                else:
                    print("Nothing to take back.")
                continue
            if not engine.make_move(user_move):
                print("Illegal move, try again.")
                continue
        else:
            move, value = engine.get_best_move()
            print(f"Engine plays: {move} | Eval: {value:.2f}")
            engine.make_move(move)

    print("Game Over")
    print(f"Result: {board.board.result()}")


if __name__ == "__main__":
    main()
