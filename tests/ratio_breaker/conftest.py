from __future__ import annotations

import pytest

from tests.ratio_breaker.support.fakes import FakeClock, FakeLogger, StubOperation


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock per test."""
    return FakeClock()


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Provide a fresh structured logger test double per test."""
    return FakeLogger()


@pytest.fixture
def stub_operation() -> StubOperation:
    """Provide a scripted async operation that counts its calls."""
    return StubOperation()
