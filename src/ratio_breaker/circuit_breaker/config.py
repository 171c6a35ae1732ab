"""Circuit breaker configuration."""

import math
from dataclasses import dataclass

DEFAULT_OPEN_TIMEOUT = 5.0
DEFAULT_HALF_OPEN_TIMEOUT = 10.0
DEFAULT_MIN_FAILURES = 15
DEFAULT_FAILURE_RATIO_THRESHOLD = 50.0


@dataclass(frozen=True, slots=True)
class CircuitBreakerConfig:
    """Circuit breaker configuration values.

    Attributes:
        open_timeout: Seconds to stay ``OPEN`` before admitting probe calls.
        half_open_timeout: Seconds of one ``HALF_OPEN`` evidence window.
        min_failures: Failures required within a window before the breaker
            may decide to open.
        failure_ratio_threshold: Percentage of failed outcomes within the
            window required to open, in ``(0, 100]``.
        expected_exceptions: Exceptions that count as failures.
        excluded_exceptions: Exceptions passed through without being counted.
    """

    open_timeout: float = DEFAULT_OPEN_TIMEOUT
    half_open_timeout: float = DEFAULT_HALF_OPEN_TIMEOUT
    min_failures: int = DEFAULT_MIN_FAILURES
    failure_ratio_threshold: float = DEFAULT_FAILURE_RATIO_THRESHOLD
    expected_exceptions: tuple[type[Exception], ...] = (Exception,)
    excluded_exceptions: tuple[type[Exception], ...] = ()

    def __post_init__(self) -> None:
        if not (math.isfinite(self.open_timeout) and self.open_timeout > 0):
            raise ValueError("open_timeout must be a finite number > 0")
        if not (math.isfinite(self.half_open_timeout) and self.half_open_timeout > 0):
            raise ValueError("half_open_timeout must be a finite number > 0")
        if self.min_failures < 1:
            raise ValueError("min_failures must be >= 1")
        if not 0 < self.failure_ratio_threshold <= 100:
            raise ValueError("failure_ratio_threshold must be in (0, 100]")
        if not self.expected_exceptions:
            raise ValueError("expected_exceptions must not be empty")
