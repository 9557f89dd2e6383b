from __future__ import annotations

from fastapi import APIRouter, Depends

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.factory import get_backend
from app.core.auth import AuthContext, verify_super_admin
from app.schemas.profile import Profile, ProfileUpdate
from app.services.profile_service import ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])


def get_profile_service(backend: AbstractBackend = Depends(get_backend)) -> ProfileService:
    return ProfileService(backend)


@router.get("", response_model=Profile)
async def get_profile(
    ctx: AuthContext = Depends(verify_super_admin),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    return await service.get_profile(ctx.user_id)


@router.patch("", response_model=Profile)
async def update_profile(
    payload: ProfileUpdate,
    ctx: AuthContext = Depends(verify_super_admin),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    """Update the caller's display name."""
    return await service.update_full_name(ctx.user_id, payload.full_name)
