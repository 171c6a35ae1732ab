"""Async call-admission circuit breaker.

One ``CircuitBreaker`` guards exactly one async operation.

Key behavior notes:
  - The first failure while ``CLOSED`` moves the breaker to ``HALF_OPEN`` and
    starts an evidence window of ``half_open_timeout`` seconds.
  - Within a window the breaker opens once at least ``min_failures`` failures
    were seen and they make up at least ``failure_ratio_threshold`` percent of
    the window's outcomes.
  - A window that elapses with only successes closes the circuit again.
  - While ``OPEN`` calls are rejected with ``CircuitOpenError`` until
    ``open_timeout`` has passed. Probe calls are admitted after that; any
    number of them may be in flight.
"""

from ratio_breaker.circuit_breaker.breaker import CircuitBreaker
from ratio_breaker.circuit_breaker.clock import Clock, MonotonicClock
from ratio_breaker.circuit_breaker.config import CircuitBreakerConfig
from ratio_breaker.circuit_breaker.counters import OutcomeCounters
from ratio_breaker.circuit_breaker.exceptions import (
    CircuitBreakerError,
    CircuitOpenError,
)
from ratio_breaker.circuit_breaker.machine import BreakerStateMachine
from ratio_breaker.circuit_breaker.metrics import BreakerListener, StructlogListener
from ratio_breaker.circuit_breaker.state import BreakerSnapshot, CircuitState
from ratio_breaker.circuit_breaker.timers import TimerPolicy

__all__ = [
    "BreakerListener",
    "BreakerSnapshot",
    "BreakerStateMachine",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerError",
    "CircuitOpenError",
    "CircuitState",
    "Clock",
    "MonotonicClock",
    "OutcomeCounters",
    "StructlogListener",
    "TimerPolicy",
]
