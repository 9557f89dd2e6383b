"""Rate limiter interfaces.

The auth service depends on this abstraction, not on the concrete limiter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a login rate limit check.

    Attributes:
        allowed: Whether another attempt may proceed.
        remaining_attempts: Attempts left in the current window (0 when blocked).
        blocked_until: UNIX epoch seconds when the block lifts, if blocked.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    remaining_attempts: int
    blocked_until: float | None = None
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for attempt-based limiters (check, then record the outcome)."""

    @abstractmethod
    def check(self, key: str) -> RateLimitResult:
        """Decide whether the key may make another attempt.

        Args:
            key: Unique identifier (e.g., ``"203.0.113.7:admin@acme.io"``).

        Returns:
            RateLimitResult describing whether it is allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def record_attempt(self, key: str, success: bool) -> None:
        """Record the outcome of an attempt for the key."""
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key when ``key`` is None."""
        raise NotImplementedError
