"""Super admin sign-in with brute-force protection.

Login flow:
1. Reject missing credentials (400).
2. Refuse keys currently blocked by the login limiter (429).
3. Verify credentials with the auth provider; count failures (401).
4. Only super admins may hold a console session; others are signed out
   again and the attempt counts as a failure (403).
5. On success the limiter entry for the key is cleared.
"""

from __future__ import annotations

import logging
import math

from app.adapters.backend.base import AbstractBackend
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.errors import (
    AuthenticationAppError,
    AuthorizationAppError,
    BackendAppError,
    RateLimitAppError,
    ValidationAppError,
)
from app.core.logging import hash_identifier
from app.core.rate_limit import build_login_rate_limit_key
from app.schemas.auth import LoginResponse, LoginUser

logger = logging.getLogger(__name__)


class AuthService:
    """Authenticates console users against the backend."""

    def __init__(
        self,
        backend: AbstractBackend,
        limiter: AbstractRateLimiter,
        *,
        rate_limit_enabled: bool = True,
    ) -> None:
        self.backend = backend
        self.limiter = limiter
        self.rate_limit_enabled = rate_limit_enabled

    def _ensure_not_blocked(self, key: str) -> None:
        if not self.rate_limit_enabled:
            return

        result = self.limiter.check(key)
        if result.allowed:
            return

        retry_after = result.retry_after_seconds or 0
        wait_minutes = max(1, math.ceil(retry_after / 60))
        logger.warning(
            "auth.login_blocked",
            extra={"key_hash": hash_identifier(key), "retry_after_s": retry_after},
        )
        raise RateLimitAppError(
            code="too_many_attempts",
            message=f"Too many failed attempts. Try again in {wait_minutes} minutes.",
            details={
                "blocked": True,
                "blocked_until": result.blocked_until,
                "retry_after": retry_after,
            },
        )

    def _record(self, key: str, success: bool) -> None:
        if self.rate_limit_enabled:
            self.limiter.record_attempt(key, success)

    async def login(self, email: str | None, password: str | None, *, client_ip: str) -> LoginResponse:
        """Sign a super admin in and return the session.

        Args:
            email: Account e-mail.
            password: Account password.
            client_ip: Caller address used to key the limiter.

        Raises:
            ValidationAppError: Missing e-mail or password.
            RateLimitAppError: The IP/e-mail pair is blocked.
            AuthenticationAppError: Wrong credentials.
            AuthorizationAppError: The account is not a super admin.
        """
        if not email or not password:
            raise ValidationAppError(code="missing_credentials", message="Email and password are required")

        key = build_login_rate_limit_key(client_ip, email)
        email_hash = hash_identifier(email)
        self._ensure_not_blocked(key)

        session = await self.backend.sign_in_with_password(email.strip(), password)
        if session is None:
            self._record(key, False)
            remaining = self.limiter.check(key).remaining_attempts if self.rate_limit_enabled else None
            logger.warning(
                "auth.login_failed",
                extra={"email_hash": email_hash, "reason": "invalid_credentials", "remaining_attempts": remaining},
            )
            details = {"remaining_attempts": remaining} if remaining is not None else None
            raise AuthenticationAppError(code="invalid_credentials", message="Invalid credentials", details=details)

        rows = await self.backend.select("profiles", eq={"id": session.user.id}, limit=1)
        if not rows or not rows[0].get("is_super_admin"):
            try:
                await self.backend.sign_out(session.access_token)
            except BackendAppError:
                logger.warning("auth.sign_out_failed", extra={"user_id": session.user.id})
            self._record(key, False)
            logger.warning(
                "auth.login_failed",
                extra={"email_hash": email_hash, "reason": "not_super_admin", "user_id": session.user.id},
            )
            raise AuthorizationAppError(code="access_restricted", message="Access restricted to administrators")

        self._record(key, True)
        logger.info("auth.login_succeeded", extra={"user_id": session.user.id})
        return LoginResponse(
            user=LoginUser(id=session.user.id, email=session.user.email),
            access_token=session.access_token,
            expires_at=session.expires_at,
        )

    async def logout(self, access_token: str, *, user_id: str | None = None) -> None:
        await self.backend.sign_out(access_token)
        logger.info("auth.logout", extra={"user_id": user_id})
