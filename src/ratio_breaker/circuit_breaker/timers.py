"""Deadline arithmetic for the open and half-open windows."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TimerPolicy:
    """Compute and evaluate window expiry instants.

    All instants are seconds on the breaker's clock. The policy is stateless;
    callers store the deadlines it returns.

    Attributes:
        open_timeout: Seconds the circuit stays ``OPEN`` before admitting probes.
        half_open_timeout: Seconds of one ``HALF_OPEN`` evidence window.
    """

    open_timeout: float
    half_open_timeout: float

    def start_open_window(self, now: float) -> float:
        """Return the instant at which a window opened at ``now`` ends."""
        return now + self.open_timeout

    def start_half_open_window(self, now: float) -> float:
        """Return the instant at which a half-open window started at ``now`` ends."""
        return now + self.half_open_timeout

    @staticmethod
    def has_elapsed(deadline: float | None, now: float) -> bool:
        """Return whether ``deadline`` is set and has been reached."""
        return deadline is not None and now >= deadline

    @staticmethod
    def remaining(deadline: float | None, now: float) -> float:
        """Return seconds left until ``deadline``, never negative."""
        if deadline is None:
            return 0.0
        return max(deadline - now, 0.0)
