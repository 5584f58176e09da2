"""Millisecond stopwatch used to report render timings."""

from __future__ import annotations

import time


class Timer:
    """Wall-clock stopwatch that reports whole elapsed milliseconds."""

    def __init__(self) -> None:
        self._start = 0
        self.reset()

    def reset(self) -> None:
        """Restart the stopwatch from now."""
        self._start = time.perf_counter_ns()

    def elapsed(self) -> float:
        """Return the whole milliseconds passed since the last reset."""
        return float((time.perf_counter_ns() - self._start) // 1_000_000)