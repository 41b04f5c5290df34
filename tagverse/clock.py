"""Millisecond clocks used for round timers and message expiry.

Every wall-clock comparison in tagverse goes through a clock callable that
returns milliseconds as a float. Production code uses ``SystemClock``;
tests and offline simulations use ``ManualClock`` so round timeouts and
message expiry can be exercised without sleeping.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]
"""Zero-argument callable returning the current time in milliseconds."""


class SystemClock:
    """Wall-clock time in milliseconds since the epoch."""

    def __call__(self) -> float:
        return time.time() * 1000.0


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, milliseconds: float) -> float:
        """Move the clock forward and return the new time."""

        if milliseconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self.now += milliseconds
        return self.now

    def set(self, milliseconds: float) -> None:
        self.now = float(milliseconds)
