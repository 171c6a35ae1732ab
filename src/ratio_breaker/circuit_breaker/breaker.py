"""Core circuit breaker implementation."""

import threading
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, ParamSpec, TypeVar

from ratio_breaker.circuit_breaker.clock import Clock, MonotonicClock
from ratio_breaker.circuit_breaker.config import CircuitBreakerConfig
from ratio_breaker.circuit_breaker.exceptions import CircuitOpenError
from ratio_breaker.circuit_breaker.machine import BreakerStateMachine
from ratio_breaker.circuit_breaker.metrics import BreakerListener
from ratio_breaker.circuit_breaker.state import BreakerSnapshot, CircuitState

T = TypeVar("T")
P = ParamSpec("P")


class CircuitBreaker(Generic[P, T]):
    """Stateful proxy around one dangerous async operation."""

    def __init__(
        self,
        operation: Callable[P, Awaitable[T]],
        *,
        name: str = "default",
        config: CircuitBreakerConfig | None = None,
        clock: Clock | None = None,
        listeners: Sequence[BreakerListener] | None = None,
    ) -> None:
        """Build a circuit breaker guarding ``operation``.

        Args:
            operation: Async callable protected by this breaker.
            name: Breaker name reported to listeners and in rejections.
            config: Breaker behavior configuration. Defaults to
                ``CircuitBreakerConfig()``.
            clock: Monotonic time source. Defaults to ``MonotonicClock()``.
            listeners: Optional listener hooks for breaker events.
        """
        self.name = name
        self.config = CircuitBreakerConfig() if config is None else config
        self._operation = operation
        self._clock = MonotonicClock() if clock is None else clock
        self._listeners = tuple(listeners) if listeners is not None else ()
        self._machine = BreakerStateMachine(self.config)
        # Guards every machine read and write; never held across an await.
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        """Current breaker state."""
        return self.info().state

    def info(self) -> BreakerSnapshot:
        """Return the current state, deadlines and counts without side effects."""
        with self._lock:
            return self._machine.snapshot()

    async def _emit_state_change(self, old: CircuitState, new: CircuitState) -> None:
        for listener in self._listeners:
            try:
                await listener.on_state_change(self.name, old, new)
            except Exception:
                continue

    async def _emit_call_rejected(self) -> None:
        for listener in self._listeners:
            try:
                await listener.on_call_rejected(self.name)
            except Exception:
                continue

    async def _emit_call_succeeded(self, elapsed: float) -> None:
        for listener in self._listeners:
            try:
                await listener.on_call_succeeded(self.name, elapsed)
            except Exception:
                continue

    async def _emit_call_failed(self, exc: Exception, elapsed: float) -> None:
        for listener in self._listeners:
            try:
                await listener.on_call_failed(self.name, exc, elapsed)
            except Exception:
                continue

    def _admit(self) -> float | None:
        """Return ``None`` when admitted, else seconds until probing resumes."""
        with self._lock:
            now = self._clock.monotonic()
            if self._machine.admits(now):
                return None
            return self._machine.retry_after(now)

    def _report(
        self, outcome: Callable[[float], CircuitState]
    ) -> tuple[CircuitState, CircuitState]:
        with self._lock:
            old = self._machine.state
            new = outcome(self._clock.monotonic())
        return old, new

    async def fire(self, *args: P.args, **kwargs: P.kwargs) -> T:
        """Invoke the guarded operation under circuit breaker protection.

        Args:
            *args: Positional arguments forwarded to the operation.
            **kwargs: Keyword arguments forwarded to the operation.

        Returns:
            The operation's result, unchanged.

        Raises:
            CircuitOpenError: When the circuit is open and the call is
                rejected without invoking the operation.
            Exception: The original exception from the operation. Expected
                exceptions are recorded as failures before being re-raised.
        """
        retry_after = self._admit()
        if retry_after is not None:
            await self._emit_call_rejected()
            raise CircuitOpenError(self.name, retry_after=retry_after)

        start = self._clock.monotonic()
        try:
            result = await self._operation(*args, **kwargs)
        except self.config.excluded_exceptions:
            raise
        except self.config.expected_exceptions as exc:
            elapsed = max(self._clock.monotonic() - start, 0.0)
            old, new = self._report(self._machine.on_failure)
            await self._emit_call_failed(exc, elapsed)
            if old != new:
                await self._emit_state_change(old, new)
            raise

        elapsed = max(self._clock.monotonic() - start, 0.0)
        old, new = self._report(self._machine.on_success)
        await self._emit_call_succeeded(elapsed)
        if old != new:
            await self._emit_state_change(old, new)
        return result
