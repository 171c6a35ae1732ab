from __future__ import annotations

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ratio_breaker.circuit_breaker import CircuitBreakerConfig
from ratio_breaker.circuit_breaker.config import (
    DEFAULT_FAILURE_RATIO_THRESHOLD,
    DEFAULT_HALF_OPEN_TIMEOUT,
    DEFAULT_MIN_FAILURES,
    DEFAULT_OPEN_TIMEOUT,
)
from ratio_breaker.logging import LogFormat, get_log_level_value


def prefixed_settings_config(prefix: str) -> SettingsConfigDict:
    """Build standard Pydantic settings config for prefixed environments."""
    return SettingsConfigDict(
        env_prefix=prefix,
        case_sensitive=False,
        allow_inf_nan=False,
    )


class BreakerSettings(BaseSettings):
    """Breaker tuning and log level loaded from ``RATIO_BREAKER_*`` variables."""

    model_config = prefixed_settings_config("RATIO_BREAKER_")

    open_timeout: float = DEFAULT_OPEN_TIMEOUT
    half_open_timeout: float = DEFAULT_HALF_OPEN_TIMEOUT
    min_failures: int = DEFAULT_MIN_FAILURES
    failure_ratio_threshold: float = DEFAULT_FAILURE_RATIO_THRESHOLD
    log_level: str = "INFO"
    log_format: LogFormat = "auto"

    @field_validator("log_format", mode="before")
    @classmethod
    def _normalize_log_format(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            get_log_level_value(value)
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _validate_breaker_settings(self) -> BreakerSettings:
        self.to_config()
        return self

    def to_config(self) -> CircuitBreakerConfig:
        """Build the immutable breaker configuration from these settings."""
        return CircuitBreakerConfig(
            open_timeout=self.open_timeout,
            half_open_timeout=self.half_open_timeout,
            min_failures=self.min_failures,
            failure_ratio_threshold=self.failure_ratio_threshold,
        )


class DemoSettings(BreakerSettings):
    """Settings for the polling demo against a flaky operation."""

    model_config = prefixed_settings_config("RATIO_BREAKER_DEMO_")

    half_open_timeout: float = 5.0
    min_failures: int = 2
    poll_interval: float = 1.0
    success_probability: float = 0.4
    iterations: int | None = None
    retry_attempts: int = 1
    retry_min_seconds: float = 0.1
    retry_max_seconds: float = 1.0

    @model_validator(mode="after")
    def _validate_demo_settings(self) -> DemoSettings:
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if not 0 <= self.success_probability <= 1:
            raise ValueError("success_probability must be in [0, 1]")
        if self.iterations is not None and self.iterations < 1:
            raise ValueError("iterations must be >= 1 when provided")
        if self.retry_attempts < 1:
            raise ValueError("retry_attempts must be >= 1")
        if self.retry_min_seconds < 0:
            raise ValueError("retry_min_seconds must be >= 0")
        if self.retry_max_seconds < self.retry_min_seconds:
            raise ValueError("retry_max_seconds must be >= retry_min_seconds")
        return self
