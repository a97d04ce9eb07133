"""
Current-time source for the engine. Integer seconds since the epoch.
"""
from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time())


class FixedClock:
    """Manually advanced clock for replays and tests."""

    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now
