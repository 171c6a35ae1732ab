"""Observability hooks for circuit breakers."""

import logging
from typing import Protocol

from ratio_breaker.circuit_breaker.state import CircuitState
from ratio_breaker.logging import StructuredLogger, log_event


class BreakerListener(Protocol):
    """Listener protocol for circuit breaker events.

    Notes:
        ``on_state_change`` fires only when the state value changes. A
        half-open window restarting in place is not reported.
    """

    async def on_state_change(
        self, name: str, old: CircuitState, new: CircuitState
    ) -> None:
        """Handle circuit state transitions."""

    async def on_call_rejected(self, name: str) -> None:
        """Handle call rejection while the circuit is open."""

    async def on_call_succeeded(self, name: str, elapsed: float) -> None:
        """Handle successful protected call completion."""

    async def on_call_failed(self, name: str, exc: Exception, elapsed: float) -> None:
        """Handle failed protected call completion."""


class StructlogListener:
    """Write one structured log event per breaker hook."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger = logger

    async def on_state_change(
        self, name: str, old: CircuitState, new: CircuitState
    ) -> None:
        level = logging.WARNING if new == CircuitState.OPEN else logging.INFO
        log_event(
            self._logger,
            level,
            "circuit_breaker.state_changed",
            breaker=name,
            old_state=old.value,
            new_state=new.value,
        )

    async def on_call_rejected(self, name: str) -> None:
        log_event(
            self._logger,
            logging.WARNING,
            "circuit_breaker.call_rejected",
            breaker=name,
        )

    async def on_call_succeeded(self, name: str, elapsed: float) -> None:
        log_event(
            self._logger,
            logging.INFO,
            "circuit_breaker.call_succeeded",
            breaker=name,
            elapsed=elapsed,
        )

    async def on_call_failed(self, name: str, exc: Exception, elapsed: float) -> None:
        log_event(
            self._logger,
            logging.WARNING,
            "circuit_breaker.call_failed",
            breaker=name,
            error_type=exc.__class__.__name__,
            error=str(exc),
            elapsed=elapsed,
        )
