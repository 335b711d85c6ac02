"""Wall-clock abstraction for run budgets and staleness checks.

Production code uses `SystemClock`; tests inject `MockClock` to move time
without sleeping.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> float:
        """Return the current wall-clock time in epoch milliseconds."""
        ...


class SystemClock:
    def now_ms(self) -> float:
        return time.time() * 1000


class MockClock:
    """Controllable clock for deterministic tests."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._current = start_ms

    def now_ms(self) -> float:
        return self._current

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds * 1000


DEFAULT_CLOCK: Clock = SystemClock()
