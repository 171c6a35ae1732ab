"""Poll a deliberately flaky operation through a circuit breaker.

Run with ``python -m ratio_breaker.demo`` or ``ratio-breaker-demo``. Tuning is
read from ``RATIO_BREAKER_DEMO_*`` environment variables.
"""

from __future__ import annotations

import asyncio
import logging
import random
import signal
from contextlib import suppress
from functools import partial

from tenacity import AsyncRetrying

from ratio_breaker.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    StructlogListener,
)
from ratio_breaker.errors import TransientError
from ratio_breaker.logging import (
    StructuredLogger,
    configure_structlog,
    log_event,
)
from ratio_breaker.retry import (
    RetryBackoffPolicy,
    build_exponential_jitter_retrying,
    build_interruptible_sleep,
    fire_with_retry,
)
from ratio_breaker.settings import DemoSettings


async def flaky_request(
    success_probability: float, rng: random.Random | None = None
) -> str:
    """Succeed with ``success_probability``, otherwise raise ``TransientError``."""
    draw = (rng or random).random()
    if draw < success_probability:
        return "Success"
    raise TransientError("Failed")


async def run_polling_loop(
    breaker: CircuitBreaker[[], str],
    *,
    interval: float,
    stop_event: asyncio.Event,
    logger: StructuredLogger,
    iterations: int | None = None,
    retrying: AsyncRetrying | None = None,
) -> int:
    """Fire ``breaker`` once per ``interval`` until stopped.

    Returns:
        Number of fire attempts made.
    """
    sleep = build_interruptible_sleep(stop_event)
    attempts = 0
    while not stop_event.is_set():
        if iterations is not None and attempts >= iterations:
            break
        attempts += 1
        try:
            if retrying is None:
                result = await breaker.fire()
            else:
                result = await fire_with_retry(breaker, retrying)
        except CircuitOpenError as exc:
            log_event(
                logger,
                logging.WARNING,
                "demo.call_rejected",
                attempt=attempts,
                retry_after=exc.retry_after,
                **breaker.info().as_log_fields(),
            )
        except TransientError as exc:
            log_event(
                logger,
                logging.WARNING,
                "demo.call_failed",
                attempt=attempts,
                error=str(exc),
                **breaker.info().as_log_fields(),
            )
        else:
            log_event(
                logger,
                logging.INFO,
                "demo.call_succeeded",
                attempt=attempts,
                result=result,
                **breaker.info().as_log_fields(),
            )
        await sleep(interval)
    return attempts


def build_demo_breaker(
    settings: DemoSettings,
    logger: StructuredLogger,
    rng: random.Random | None = None,
) -> CircuitBreaker[[], str]:
    """Build a breaker guarding ``flaky_request`` from demo settings."""
    return CircuitBreaker(
        partial(flaky_request, settings.success_probability, rng),
        name="flaky_request",
        config=settings.to_config(),
        listeners=[StructlogListener(logger)],
    )


async def run_demo(
    settings: DemoSettings,
    logger: StructuredLogger,
    *,
    stop_event: asyncio.Event | None = None,
) -> int:
    """Run the polling demo until interrupted or ``settings.iterations`` is reached."""
    stop_event = asyncio.Event() if stop_event is None else stop_event
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(signum, stop_event.set)

    retrying = None
    if settings.retry_attempts > 1:
        retrying = build_exponential_jitter_retrying(
            policy=RetryBackoffPolicy(
                attempts=settings.retry_attempts,
                min_seconds=settings.retry_min_seconds,
                max_seconds=settings.retry_max_seconds,
            ),
            sleep=build_interruptible_sleep(stop_event),
        )

    breaker = build_demo_breaker(settings, logger)
    log_event(
        logger,
        logging.INFO,
        "demo.started",
        poll_interval=settings.poll_interval,
        success_probability=settings.success_probability,
        min_failures=settings.min_failures,
        half_open_timeout=settings.half_open_timeout,
        open_timeout=settings.open_timeout,
    )
    try:
        return await run_polling_loop(
            breaker,
            interval=settings.poll_interval,
            stop_event=stop_event,
            logger=logger,
            iterations=settings.iterations,
            retrying=retrying,
        )
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            with suppress(NotImplementedError, RuntimeError):
                loop.remove_signal_handler(signum)
        log_event(logger, logging.INFO, "demo.stopped")


def main() -> None:
    """Console entry point for the polling demo."""
    settings = DemoSettings()
    logger = configure_structlog(
        log_level=settings.log_level,
        log_format=settings.log_format,
        service="ratio_breaker.demo",
    )
    asyncio.run(run_demo(settings, logger))


if __name__ == "__main__":
    main()
