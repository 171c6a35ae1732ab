"""Time source for circuit breakers."""

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic time source measured in seconds."""

    def monotonic(self) -> float:
        """Return the current instant in seconds."""


class MonotonicClock:
    """Clock backed by ``time.monotonic``.

    Wall-clock adjustments never move breaker deadlines.
    """

    def monotonic(self) -> float:
        return time.monotonic()
