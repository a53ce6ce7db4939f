"""
Time sources for the adaptive curve.

The engine never reads time on its own: a clock is any zero-argument
callable returning integer seconds.
"""

import time
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    """Wall-clock time in whole seconds."""
    return int(time.time())


class ManualClock:
    """
    Settable clock for simulations and tests.

    Attributes:
        now: Current time in seconds
    """

    def __init__(self, start: int = 0):
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError(f"Cannot advance clock by negative seconds, got {seconds}")
        self.now += int(seconds)
        return self.now

    def set(self, timestamp: int) -> None:
        """Jump to an absolute time (may move backwards)."""
        self.now = int(timestamp)

    def __repr__(self) -> str:
        return f"ManualClock(now={self.now})"
