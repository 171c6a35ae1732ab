"""Transition rules for the circuit breaker.

The machine is synchronous and performs no locking or I/O. The owning
``CircuitBreaker`` serializes every call into it.

Transitions, with ``now`` supplied by the caller:

    CLOSED    --success-->                      CLOSED
    CLOSED    --failure-->                      HALF_OPEN (failures=1)
    HALF_OPEN --success, window open-->         HALF_OPEN
    HALF_OPEN --success, window elapsed-->      CLOSED
    HALF_OPEN --failure, window elapsed-->      HALF_OPEN (fresh window, failures=1)
    HALF_OPEN --failure, below min_failures-->  HALF_OPEN
    HALF_OPEN --failure, ratio >= threshold-->  OPEN
    HALF_OPEN --failure, ratio < threshold-->   HALF_OPEN (fresh window, failures=1)
    OPEN      --probe success-->                HALF_OPEN
    OPEN      --probe failure-->                OPEN (fresh open window)
"""

from ratio_breaker.circuit_breaker.config import CircuitBreakerConfig
from ratio_breaker.circuit_breaker.counters import OutcomeCounters
from ratio_breaker.circuit_breaker.state import BreakerSnapshot, CircuitState
from ratio_breaker.circuit_breaker.timers import TimerPolicy


class BreakerStateMachine:
    """State, deadlines and counters of one breaker."""

    def __init__(self, config: CircuitBreakerConfig) -> None:
        self.config = config
        self.timers = TimerPolicy(
            open_timeout=config.open_timeout,
            half_open_timeout=config.half_open_timeout,
        )
        self.state = CircuitState.CLOSED
        self.open_until: float | None = None
        self.half_open_until: float | None = None
        self.counters = OutcomeCounters()

    def snapshot(self) -> BreakerSnapshot:
        """Return an immutable copy of the current machine state."""
        return BreakerSnapshot(
            state=self.state,
            open_until=self.open_until,
            half_open_until=self.half_open_until,
            failure_count=self.counters.failures,
            success_count=self.counters.successes,
        )

    def admits(self, now: float) -> bool:
        """Return whether a call may be forwarded at ``now``."""
        if self.state != CircuitState.OPEN:
            return True
        return self.timers.has_elapsed(self.open_until, now)

    def retry_after(self, now: float) -> float:
        """Return seconds until the open window ends, ``0.0`` when not open."""
        if self.state != CircuitState.OPEN:
            return 0.0
        return self.timers.remaining(self.open_until, now)

    def on_success(self, now: float) -> CircuitState:
        """Apply a successful outcome observed at ``now``."""
        if self.state == CircuitState.CLOSED:
            self.counters.record_success()
        elif self.state == CircuitState.HALF_OPEN:
            if self.timers.has_elapsed(self.half_open_until, now):
                self._enter_closed()
            else:
                self.counters.record_success()
        else:
            self._enter_half_open(now)
        return self.state

    def on_failure(self, now: float) -> CircuitState:
        """Apply a failed outcome observed at ``now``."""
        if self.state == CircuitState.CLOSED:
            self._enter_half_open(now, failures=1)
        elif self.state == CircuitState.HALF_OPEN:
            self._half_open_failure(now)
        else:
            self.open_until = self.timers.start_open_window(now)
        return self.state

    def _half_open_failure(self, now: float) -> None:
        if self.timers.has_elapsed(self.half_open_until, now):
            self._enter_half_open(now, failures=1)
            return

        failures = self.counters.record_failure()
        if failures < self.config.min_failures:
            return

        if self.counters.failure_ratio() >= self.config.failure_ratio_threshold:
            self._enter_open(now)
        else:
            self._enter_half_open(now, failures=1)

    def _reset(self, *, failures: int = 0) -> None:
        self.counters.reset(failures=failures)
        self.half_open_until = None

    def _enter_closed(self) -> None:
        self._reset()
        self.state = CircuitState.CLOSED
        self.open_until = None

    def _enter_half_open(self, now: float, *, failures: int = 0) -> None:
        self._reset(failures=failures)
        self.state = CircuitState.HALF_OPEN
        self.open_until = None
        self.half_open_until = self.timers.start_half_open_window(now)

    def _enter_open(self, now: float) -> None:
        self._reset()
        self.state = CircuitState.OPEN
        self.open_until = self.timers.start_open_window(now)
