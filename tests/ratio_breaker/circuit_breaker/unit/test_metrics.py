import pytest

from ratio_breaker.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitOpenError,
    CircuitState,
    StructlogListener,
)
from tests.ratio_breaker.support.fakes import FakeClock, FakeLogger, StubOperation

pytestmark = pytest.mark.asyncio


async def test_structlog_listener_logs_each_hook(fake_logger: FakeLogger) -> None:
    listener = StructlogListener(fake_logger)

    await listener.on_state_change("svc", CircuitState.CLOSED, CircuitState.HALF_OPEN)
    await listener.on_state_change("svc", CircuitState.HALF_OPEN, CircuitState.OPEN)
    await listener.on_call_rejected("svc")
    await listener.on_call_succeeded("svc", 0.25)
    await listener.on_call_failed("svc", TimeoutError("slow"), 1.5)

    assert fake_logger.calls == [
        (
            "info",
            "circuit_breaker.state_changed",
            {"breaker": "svc", "old_state": "closed", "new_state": "half_open"},
        ),
        (
            "warning",
            "circuit_breaker.state_changed",
            {"breaker": "svc", "old_state": "half_open", "new_state": "open"},
        ),
        ("warning", "circuit_breaker.call_rejected", {"breaker": "svc"}),
        (
            "info",
            "circuit_breaker.call_succeeded",
            {"breaker": "svc", "elapsed": 0.25},
        ),
        (
            "warning",
            "circuit_breaker.call_failed",
            {
                "breaker": "svc",
                "error_type": "TimeoutError",
                "error": "slow",
                "elapsed": 1.5,
            },
        ),
    ]


async def test_structlog_listener_wired_into_breaker(
    fake_logger: FakeLogger,
    fake_clock: FakeClock,
    stub_operation: StubOperation,
) -> None:
    breaker = CircuitBreaker(
        stub_operation,
        name="svc",
        config=CircuitBreakerConfig(min_failures=2),
        clock=fake_clock,
        listeners=[StructlogListener(fake_logger)],
    )
    stub_operation.fail_with = RuntimeError("nope")

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.fire()
    with pytest.raises(CircuitOpenError):
        await breaker.fire()

    assert fake_logger.events() == [
        "circuit_breaker.call_failed",
        "circuit_breaker.state_changed",
        "circuit_breaker.call_failed",
        "circuit_breaker.state_changed",
        "circuit_breaker.call_rejected",
    ]
