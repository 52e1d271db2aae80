"""
Wall-clock turn stopwatch.

Elapsed time is always one subtraction against a reference instant,
never a per-tick counter, so a late or skipped tick cannot drift the
displayed time. Pausing freezes the elapsed seconds; resuming moves the
reference instant back by that amount.
"""

import time
from typing import Callable

# Returns the current instant in epoch milliseconds
ClockFn = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


class TurnClock:
    """Stopwatch for the turn in progress."""

    def __init__(self, now: ClockFn | None = None):
        self.now = now or now_ms

    def start(self) -> int:
        """Begin timing. Returns the reference instant."""
        return self.now()

    def elapsed(self, reference: int) -> int:
        """Whole seconds since the reference instant."""
        return max(0, (self.now() - reference) // 1000)

    def pause(self, reference: int) -> int:
        """Freeze timing. Returns the elapsed seconds to resume from."""
        return self.elapsed(reference)

    def resume(self, elapsed_at_pause: int) -> int:
        """New reference instant that continues from elapsed_at_pause."""
        return self.now() - elapsed_at_pause * 1000
