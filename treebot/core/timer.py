"""Per-turn timer and the time-control helper used by the host adapters."""

import time
from typing import Optional


class TurnTimer:
    """Milliseconds elapsed since the turn started.

    The search only ever calls ``elapsed_ms()``; any object providing it can
    stand in for this class.
    """

    def __init__(self):
        self.start()

    def start(self) -> None:
        self._started = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started) * 1000.0

    def exceeded(self, limit_ms: Optional[float]) -> bool:
        return deadline_passed(self, limit_ms)


def deadline_passed(timer, limit_ms: Optional[float]) -> bool:
    """True once ``timer`` has run for ``limit_ms``. A None limit never passes."""
    return limit_ms is not None and timer.elapsed_ms() >= limit_ms


def time_budget_ms(remaining_ms: Optional[int], increment_ms: int = 0,
                   moves_to_go: Optional[int] = None, cap_ms: Optional[int] = None) -> Optional[int]:
    """Split the remaining clock into a budget for one move, capped at ``cap_ms``."""
    if remaining_ms is None:
        return cap_ms
    moves_to_go = max(1, moves_to_go or 20)
    budget = max(1, remaining_ms // moves_to_go + increment_ms)
    # never plan to use more than is left on the clock
    budget = min(budget, max(1, remaining_ms - 50))
    if cap_ms is not None:
        budget = min(budget, cap_ms)
    return budget
