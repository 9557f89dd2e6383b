from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.factory import get_backend
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.auth import AuthContext, get_auth_context
from app.core.config import settings
from app.core.rate_limit import get_client_ip, get_login_rate_limiter
from app.schemas.auth import LoginRequest, LoginResponse
from app.schemas.common import SuccessResponse
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_auth_service(
    backend: AbstractBackend = Depends(get_backend),
    limiter: AbstractRateLimiter = Depends(get_login_rate_limiter),
) -> AuthService:
    return AuthService(
        backend,
        limiter,
        rate_limit_enabled=settings.app.login_rate_limit_enabled,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Sign in a super admin.

    Failed attempts are throttled per client IP and e-mail; a blocked pair
    receives 429 with ``Retry-After``.

    Returns:
        LoginResponse: Bearer token and the signed-in user.
    """
    return await service.login(payload.email, payload.password, client_ip=get_client_ip(request))


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    ctx: AuthContext = Depends(get_auth_context),
    service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    """Revoke the caller's session."""
    await service.logout(ctx.access_token, user_id=ctx.user_id)
    return SuccessResponse()
