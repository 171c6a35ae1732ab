from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ratio_breaker.circuit_breaker import CircuitState


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLogger:
    """Capture structured logger events for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, object]]] = []

    def log(self, level: int, event: str, **kwargs: object) -> None:
        self.calls.append((logging.getLevelName(level).lower(), event, kwargs))

    def events(self) -> list[str]:
        return [event for _, event, _ in self.calls]


@dataclass(slots=True)
class RecordingListener:
    events: list[tuple[str, object]] = field(default_factory=list)

    async def on_state_change(self, name: str, old: CircuitState, new: CircuitState):
        self.events.append(("state", (name, old, new)))

    async def on_call_rejected(self, name: str):
        self.events.append(("rejected", name))

    async def on_call_succeeded(self, name: str, elapsed: float):
        self.events.append(("succeeded", name))

    async def on_call_failed(self, name: str, exc: Exception, elapsed: float):
        self.events.append(("failed", (name, exc.__class__.__name__)))


@dataclass(slots=True)
class ExplodingListener:
    async def on_state_change(self, name: str, old: CircuitState, new: CircuitState):
        raise RuntimeError("boom")

    async def on_call_rejected(self, name: str):
        raise RuntimeError("boom")

    async def on_call_succeeded(self, name: str, elapsed: float):
        raise RuntimeError("boom")

    async def on_call_failed(self, name: str, exc: Exception, elapsed: float):
        raise RuntimeError("boom")


class StubOperation:
    """Async operation with scripted outcomes and a call counter."""

    def __init__(self) -> None:
        self.calls = 0
        self.fail_with: Exception | None = None
        self.result: object = "ok"
        self.received: list[tuple[tuple[object, ...], dict[str, object]]] = []

    async def __call__(self, *args: object, **kwargs: object) -> object:
        self.calls += 1
        self.received.append((args, kwargs))
        if self.fail_with is not None:
            raise self.fail_with
        return self.result
