from typing import List

import chess


def format_info(depth: int, value: float, nodes: int, elapsed_ms: float,
                pv_moves: List[chess.Move], mate_base: float) -> str:
    """UCI ``info`` line for a finished turn. ``value`` is from the side to move."""
    pv_str = " ".join(m.uci() for m in pv_moves)
    nps = int(nodes * 1000 / elapsed_ms) if elapsed_ms > 0 else 0

    if abs(value) >= mate_base and pv_moves:
        mate_in = (len(pv_moves) + 1) // 2
        score_str = f"mate {mate_in if value > 0 else -mate_in}"
    else:
        score_str = f"cp {int(round(value * 100))}"

    return (f"info depth {depth} score {score_str} nodes {nodes} nps {nps} "
            f"time {int(elapsed_ms)} pv {pv_str}")
