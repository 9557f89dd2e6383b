"""Login rate limiting wiring.

Failed sign-ins are throttled per ``"{ip}:{email}"`` so one noisy client
cannot lock out every account behind the same address, and one account
cannot be brute-forced from a single address.

IP resolution: first hop of ``X-Forwarded-For``, then the socket peer,
then ``"unknown"``.
"""

from __future__ import annotations

import logging

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryLoginRateLimiter
from app.core.config import settings

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int] | None = None


def get_login_rate_limiter() -> AbstractRateLimiter:
    """Return a process-wide login limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.login_max_attempts,
        settings.app.login_window_seconds,
        settings.app.login_block_seconds,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemoryLoginRateLimiter(
            max_attempts=settings.app.login_max_attempts,
            window_seconds=settings.app.login_window_seconds,
            block_seconds=settings.app.login_block_seconds,
        )
        _limiter_config = config
        logger.debug("rate_limit.login_limiter_built", extra={"config": config})

    return _limiter


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def build_login_rate_limit_key(ip: str, email: str) -> str:
    """Build the limiter key for a login attempt.

    Examples:
        >>> build_login_rate_limit_key("203.0.113.7", "Admin@Acme.io")
        '203.0.113.7:admin@acme.io'
    """
    return f"{ip}:{email.strip().lower()}"
