"""
Retry policy for transient failures.

Only rate limiting, server unavailability and transport failures are
retried. The server's retry-after hint wins over the computed backoff.
"""

from dataclasses import dataclass
from typing import Optional

from .exceptions import QueryError, is_transient_error


class RetryConfig:
    """Retry defaults."""

    MAX_ATTEMPTS = 9
    INITIAL_BACKOFF = 0.5  # seconds
    MAX_BACKOFF = 30.0  # seconds
    BACKOFF_MULTIPLIER = 2.0  # exponential backoff


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry policy.

    Attributes:
        max_attempts: Total attempts including the first one
        initial_backoff: Delay before the second attempt, in seconds
        max_backoff: Upper bound for computed delays
        backoff_multiplier: Growth factor between attempts
    """

    max_attempts: int = RetryConfig.MAX_ATTEMPTS
    initial_backoff: float = RetryConfig.INITIAL_BACKOFF
    max_backoff: float = RetryConfig.MAX_BACKOFF
    backoff_multiplier: float = RetryConfig.BACKOFF_MULTIPLIER

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_backoff < 0 or self.max_backoff < 0:
            raise ValueError("backoff delays must be non-negative")
        if self.backoff_multiplier < 1.0:
            raise ValueError("backoff_multiplier must be >= 1.0")

    def should_retry(self, error: QueryError, attempt: int) -> bool:
        """True if ``error`` on attempt number ``attempt`` (1-based) warrants another try."""
        return is_transient_error(error) and attempt < self.max_attempts

    def backoff(self, attempt: int) -> float:
        """Computed delay after attempt number ``attempt`` (1-based)."""
        return min(self.initial_backoff * (self.backoff_multiplier ** (attempt - 1)), self.max_backoff)

    def delay(self, error: QueryError, attempt: int) -> float:
        """
        Delay before the next attempt.

        A server hint is honored as-is so the caller never retries earlier
        than asked; without one the capped exponential backoff applies.
        """
        retry_after: Optional[float] = getattr(error, "retry_after", None)
        if retry_after is not None:
            return retry_after
        return self.backoff(attempt)
