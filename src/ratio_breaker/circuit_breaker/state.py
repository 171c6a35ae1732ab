"""Circuit breaker state primitives."""

from dataclasses import dataclass
from enum import StrEnum


class CircuitState(StrEnum):
    """Circuit breaker state values."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True, slots=True)
class BreakerSnapshot:
    """Point-in-time view of breaker internals useful for metrics/logging.

    Attributes:
        state: Current breaker state.
        open_until: Monotonic instant when probing may start, set only while
            ``OPEN``.
        half_open_until: Monotonic instant when the evidence window ends, set
            only while ``HALF_OPEN``.
        failure_count: Failures counted since the last reset.
        success_count: Successes counted since the last reset.
    """

    state: CircuitState
    open_until: float | None
    half_open_until: float | None
    failure_count: int
    success_count: int

    def as_log_fields(self) -> dict[str, object]:
        """Return the snapshot as flat structured-logging fields."""
        return {
            "state": self.state.value,
            "open_until": self.open_until,
            "half_open_until": self.half_open_until,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
        }
