from __future__ import annotations

import json
import logging
import sys
from typing import Protocol, cast

import pytest
import structlog

from ratio_breaker.logging import (
    LogFormat,
    configure_structlog,
    get_log_level_value,
    log_event,
)
from tests.ratio_breaker.support.fakes import FakeLogger


def _configured_renderer() -> object:
    root_handler = logging.getLogger().handlers[0]
    formatter = root_handler.formatter
    assert isinstance(formatter, structlog.stdlib.ProcessorFormatter)
    return formatter.processors[-1]


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("debug", logging.DEBUG),
        (" Info ", logging.INFO),
        ("WARNING", logging.WARNING),
        ("critical", logging.CRITICAL),
    ],
)
def test_get_log_level_value_maps_level_names(name: str, expected: int) -> None:
    assert get_log_level_value(name) == expected


@pytest.mark.parametrize("name", ["TRACE", "WARN", "NOTSET"])
def test_get_log_level_value_rejects_names_outside_supported_set(name: str) -> None:
    with pytest.raises(ValueError, match="log_level must be one of"):
        get_log_level_value(name)


def test_log_event_passes_fields_as_keywords_to_structured_logger() -> None:
    logger = FakeLogger()

    log_event(logger, logging.WARNING, "circuit_breaker.call_rejected", breaker="svc")

    assert logger.calls == [
        ("warning", "circuit_breaker.call_rejected", {"breaker": "svc"})
    ]


class _CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


class _RecordWithBreakerFields(Protocol):
    breaker: str
    failure_count: int


def test_log_event_puts_fields_on_stdlib_record() -> None:
    logger = logging.getLogger("tests.ratio_breaker.logging.stdlib")
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(logging.INFO)
    handler = _CaptureHandler()
    logger.addHandler(handler)

    log_event(
        logger,
        logging.INFO,
        "circuit_breaker.state_changed",
        breaker="svc",
        failure_count=0,
    )
    log_event(logger, logging.DEBUG, "circuit_breaker.filtered")

    assert len(handler.records) == 1
    record = handler.records[0]
    typed_record = cast(_RecordWithBreakerFields, record)
    assert record.getMessage() == "circuit_breaker.state_changed"
    assert record.levelno == logging.INFO
    assert typed_record.breaker == "svc"
    assert typed_record.failure_count == 0


@pytest.mark.parametrize(
    ("log_format", "is_tty", "renderer_type"),
    [
        ("auto", True, structlog.dev.ConsoleRenderer),
        ("auto", False, structlog.processors.JSONRenderer),
        ("json", True, structlog.processors.JSONRenderer),
        ("console", False, structlog.dev.ConsoleRenderer),
    ],
)
def test_configure_structlog_selects_renderer(
    monkeypatch: pytest.MonkeyPatch,
    log_format: LogFormat,
    is_tty: bool,
    renderer_type: type,
) -> None:
    monkeypatch.setattr(sys.stderr, "isatty", lambda: is_tty, raising=False)

    configure_structlog(log_level="INFO", log_format=log_format)

    assert isinstance(_configured_renderer(), renderer_type)


def test_configure_structlog_replaces_previous_handler() -> None:
    configure_structlog(log_level="INFO", log_format="json")
    configure_structlog(log_level="DEBUG", log_format="json")

    assert len(logging.getLogger().handlers) == 1
    assert logging.getLogger().level == logging.DEBUG


def test_configured_logger_writes_json_with_bound_service(
    capsys: pytest.CaptureFixture[str],
) -> None:
    logger = configure_structlog(
        log_level="INFO", log_format="json", service="ratio_breaker.demo"
    )

    log_event(logger, logging.INFO, "demo.started", poll_interval=1.0)
    log_event(logger, logging.DEBUG, "demo.hidden")

    lines = [line for line in capsys.readouterr().err.splitlines() if line]
    assert len(lines) == 1
    payload = json.loads(lines[0])
    assert payload["event"] == "demo.started"
    assert payload["service"] == "ratio_breaker.demo"
    assert payload["poll_interval"] == 1.0
    assert payload["level"] == "info"
