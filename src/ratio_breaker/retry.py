"""Retry composition around a circuit breaker.

The breaker never retries on its own. Callers that want retries wrap ``fire``
with a tenacity ``AsyncRetrying`` built here. Rejections from an open circuit
are never retried; only ``TransientError`` failures are.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, ParamSpec, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_exponential_jitter,
)
from tenacity.retry import retry_base

from ratio_breaker.circuit_breaker import CircuitBreaker
from ratio_breaker.errors import TransientError

T = TypeVar("T")
P = ParamSpec("P")

retry_if_transient = retry_if_exception_type(TransientError)


@dataclass(frozen=True)
class RetryBackoffPolicy:
    """Configuration for retry attempt count and backoff boundaries."""

    attempts: int | None
    min_seconds: float
    max_seconds: float

    def __post_init__(self) -> None:
        if self.attempts is not None and self.attempts < 1:
            raise ValueError("attempts must be >= 1 when provided")
        if self.min_seconds < 0:
            raise ValueError("min_seconds must be >= 0")
        if self.max_seconds < 0:
            raise ValueError("max_seconds must be >= 0")
        if self.max_seconds < self.min_seconds:
            raise ValueError("max_seconds must be >= min_seconds")


def build_interruptible_sleep(
    stop_event: asyncio.Event,
) -> Callable[[float], Awaitable[None]]:
    """Build an async sleep that exits early when shutdown is requested."""

    async def _interruptible_sleep(delay: float) -> None:
        if stop_event.is_set():
            return

        with suppress(TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=max(delay, 0.0))

    return _interruptible_sleep


def build_exponential_jitter_retrying(
    *,
    policy: RetryBackoffPolicy,
    retry: retry_base = retry_if_transient,
    sleep: Callable[[float], Awaitable[None]] | None = None,
    before_sleep: Callable[[RetryCallState], None] | None = None,
    reraise: bool = True,
) -> AsyncRetrying:
    """Build an ``AsyncRetrying`` with exponential jitter backoff.

    ``sleep`` and ``before_sleep`` are only passed through when given so that
    tenacity keeps its own defaults otherwise.
    """
    stop = (
        stop_never if policy.attempts is None else stop_after_attempt(policy.attempts)
    )
    options: dict[str, Any] = {
        "retry": retry,
        "wait": wait_exponential_jitter(
            initial=policy.min_seconds,
            max=policy.max_seconds,
        ),
        "stop": stop,
        "reraise": reraise,
    }
    if sleep is not None:
        options["sleep"] = sleep
    if before_sleep is not None:
        options["before_sleep"] = before_sleep
    return AsyncRetrying(**options)


async def fire_with_retry(
    breaker: CircuitBreaker[P, T],
    retrying: AsyncRetrying,
    *args: P.args,
    **kwargs: P.kwargs,
) -> T:
    """Call ``breaker.fire`` under ``retrying``.

    Each attempt goes through the breaker, so every failure is recorded and a
    circuit opened by an earlier attempt rejects the later ones.
    """
    async for attempt in retrying:
        with attempt:
            return await breaker.fire(*args, **kwargs)
    raise AssertionError("unreachable: AsyncRetrying stops by raising")
