"""Structured logging for breakers and the polling demo.

Breaker listeners and the demo log through ``log_event`` so they accept either
a structlog logger (fields become event keys) or a plain stdlib logger (fields
land on the ``LogRecord`` via ``extra``).
"""

from __future__ import annotations

import logging
import sys
from typing import Literal, Protocol

import structlog

LogFormat = Literal["auto", "console", "json"]

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_StdlibLogger = logging.Logger | logging.LoggerAdapter[logging.Logger]


class StructuredLogger(Protocol):
    """Logger that takes an event name and keyword fields at a numeric level."""

    def log(self, level: int, event: str, **kwargs: object) -> None:
        """Log ``event`` at ``level``."""


def get_log_level_value(level: str) -> int:
    """Return the stdlib level constant for a case-insensitive level name."""
    normalized = level.strip().upper()
    if normalized not in _LEVEL_NAMES:
        choices = ", ".join(sorted(_LEVEL_NAMES))
        raise ValueError(f"log_level must be one of: {choices}")
    return logging.getLevelNamesMapping()[normalized]


def log_event(
    logger: StructuredLogger | _StdlibLogger,
    level: int,
    event: str,
    **fields: object,
) -> None:
    """Log one breaker or demo event with structured fields."""
    if isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        logger.log(level, event, extra=fields)
        return
    logger.log(level, event, **fields)


def _select_renderer(log_format: LogFormat) -> structlog.types.Processor:
    if log_format == "auto":
        log_format = "console" if sys.stderr.isatty() else "json"
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_structlog(
    *,
    log_level: str,
    log_format: LogFormat = "auto",
    service: str = "ratio_breaker",
) -> structlog.stdlib.BoundLogger:
    """Route structlog and stdlib logging through one stderr handler.

    Calling it again replaces the previous handler. The returned logger has
    ``service`` bound so every demo and breaker event names its source.
    """
    level_value = get_log_level_value(log_level)
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            timestamper,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _select_renderer(log_format),
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logging.basicConfig(handlers=[handler], level=level_value, force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            timestamper,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return structlog.stdlib.get_logger("ratio_breaker").bind(service=service)
