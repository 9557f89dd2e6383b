"""Bearer token authentication and role checks.

Tokens are issued by the auth provider on login; every protected route
resolves the token to an account, loads its profile, and checks the role
it needs.

Usage:
    @router.get("/protected")
    async def protected(ctx: AuthContext = Depends(verify_super_admin)):
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header

from app.adapters.backend.base import AbstractBackend, AuthUser
from app.adapters.backend.factory import get_backend
from app.core.errors import AuthenticationAppError, AuthorizationAppError
from app.schemas.profile import Profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """The caller of a protected route."""

    user: AuthUser
    profile: Profile
    access_token: str

    @property
    def user_id(self) -> str:
        return self.user.id


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Examples:
        >>> parse_bearer_token("Bearer abc")
        'abc'
        >>> parse_bearer_token("Basic abc") is None
        True
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_auth_context(
    authorization: Annotated[str | None, Header()] = None,
    backend: AbstractBackend = Depends(get_backend),
) -> AuthContext:
    """Resolve the bearer token to the caller's account and profile.

    Raises:
        AuthenticationAppError: 401 when the token is missing or invalid.
        AuthorizationAppError: 403 when the account has no profile.
    """
    token = parse_bearer_token(authorization)
    if token is None:
        logger.info("auth.missing_token", extra={"authorization_present": authorization is not None})
        raise AuthenticationAppError(code="not_authenticated", message="Unauthorized")

    user = await backend.get_user(token)
    if user is None:
        logger.info("auth.invalid_token")
        raise AuthenticationAppError(code="invalid_token", message="Unauthorized")

    rows = await backend.select("profiles", eq={"id": user.id}, limit=1)
    if not rows:
        logger.warning("auth.profile_missing", extra={"user_id": user.id})
        raise AuthorizationAppError(code="access_denied", message="Access denied")

    return AuthContext(user=user, profile=Profile.model_validate(rows[0]), access_token=token)


async def verify_super_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """FastAPI dependency allowing only platform super admins."""

    if not ctx.profile.is_super_admin:
        logger.warning("auth.super_admin_required", extra={"user_id": ctx.user_id})
        raise AuthorizationAppError(code="access_denied", message="Access denied")
    return ctx


async def require_business_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """FastAPI dependency allowing tenant admins (or super admins) assigned to a business."""

    if ctx.profile.role != "admin" and not ctx.profile.is_super_admin:
        logger.warning("auth.business_admin_required", extra={"user_id": ctx.user_id})
        raise AuthorizationAppError(
            code="insufficient_role",
            message="You do not have permission to create users",
        )
    if not ctx.profile.business_id:
        raise AuthorizationAppError(
            code="no_business_assigned",
            message="You are not assigned to any business",
        )
    return ctx
