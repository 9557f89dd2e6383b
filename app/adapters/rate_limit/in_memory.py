"""In-memory login rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _AttemptState:
    count: int
    last_attempt: float
    blocked_until: float | None = None


class InMemoryLoginRateLimiter(AbstractRateLimiter):
    """Fixed-window attempt counter with a block once the limit is reached.

    Failed attempts for a key are counted from the first failure; a window
    without failures resets the count. Reaching ``max_attempts`` blocks the
    key for ``block_seconds`` regardless of further attempts.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        window_seconds: int = 15 * 60,
        block_seconds: int = 15 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_attempts: Failed attempts allowed per window.
            window_seconds: Window length in seconds.
            block_seconds: Block length in seconds once the limit is hit.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If any limit is below 1.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        if block_seconds < 1:
            raise ValueError("block_seconds must be >= 1")

        self._max_attempts = max_attempts
        self._window_seconds = window_seconds
        self._block_seconds = block_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _AttemptState] = {}

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def _is_stale(self, state: _AttemptState, now: float) -> bool:
        window_over = now - state.last_attempt > self._window_seconds
        block_over = state.blocked_until is None or state.blocked_until < now
        return window_over and block_over

    def _cleanup_locked(self, now: float) -> None:
        stale = [k for k, s in self._state_by_key.items() if self._is_stale(s, now)]
        for key in stale:
            del self._state_by_key[key]

    def _blocked_result(self, blocked_until: float, now: float) -> RateLimitResult:
        return RateLimitResult(
            allowed=False,
            remaining_attempts=0,
            blocked_until=blocked_until,
            retry_after_seconds=max(0, int(math.ceil(blocked_until - now))),
        )

    def check(self, key: str) -> RateLimitResult:
        """Check whether ``key`` may attempt again, blocking it at the limit.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        with self._lock:
            self._cleanup_locked(now)
            state = self._state_by_key.get(key)

            if state is None:
                return RateLimitResult(allowed=True, remaining_attempts=self._max_attempts - 1)

            if state.blocked_until is not None and state.blocked_until > now:
                return self._blocked_result(state.blocked_until, now)

            if now - state.last_attempt > self._window_seconds:
                del self._state_by_key[key]
                return RateLimitResult(allowed=True, remaining_attempts=self._max_attempts - 1)

            if state.count >= self._max_attempts:
                state.blocked_until = now + self._block_seconds
                return self._blocked_result(state.blocked_until, now)

            return RateLimitResult(
                allowed=True,
                remaining_attempts=self._max_attempts - state.count - 1,
            )

    def record_attempt(self, key: str, success: bool) -> None:
        """Record an attempt; success clears the key, failure counts toward the limit."""
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        with self._lock:
            if success:
                self._state_by_key.pop(key, None)
                return

            state = self._state_by_key.get(key)
            if state is None or now - state.last_attempt > self._window_seconds:
                self._state_by_key[key] = _AttemptState(count=1, last_attempt=now)
                return

            state.count += 1
            state.last_attempt = now
            if state.count >= self._max_attempts:
                state.blocked_until = now + self._block_seconds

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._state_by_key.clear()
            else:
                self._state_by_key.pop(key, None)
