"""Shared error types for ratio_breaker."""


class TransientError(RuntimeError):
    """Generic retry-safe transient dependency failure."""
