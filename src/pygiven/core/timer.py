"""Monotonic nanosecond timer."""

from __future__ import annotations

import time


class Timer:
    """Measures elapsed time from its creation."""

    def __init__(self):
        self.start_time = time.perf_counter_ns()

    def elapsed_time_in_nanoseconds(self) -> int:
        return time.perf_counter_ns() - self.start_time
