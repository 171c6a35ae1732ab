"""Outcome tallies for circuit breakers."""

from dataclasses import dataclass


@dataclass(slots=True)
class OutcomeCounters:
    """Failure and success tally since the last reset.

    Attributes:
        failures: Failed outcomes observed since the last reset.
        successes: Successful outcomes observed since the last reset.
    """

    failures: int = 0
    successes: int = 0

    def record_success(self) -> int:
        """Count one success and return the new success count."""
        self.successes += 1
        return self.successes

    def record_failure(self) -> int:
        """Count one failure and return the new failure count."""
        self.failures += 1
        return self.failures

    def reset(self, *, failures: int = 0) -> None:
        """Zero both tallies, optionally seeding the failure count.

        Args:
            failures: Failure count to start from after the reset.
        """
        if failures < 0:
            raise ValueError("failures must be >= 0")
        self.failures = failures
        self.successes = 0

    def failure_ratio(self) -> float:
        """Return failures as a percentage of all observed outcomes."""
        total = self.failures + self.successes
        if total == 0:
            return 0.0
        return self.failures * 100 / total
