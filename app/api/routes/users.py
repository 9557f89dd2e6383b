from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.factory import get_backend
from app.core.auth import AuthContext, require_business_admin, verify_super_admin
from app.schemas.common import SuccessResponse
from app.schemas.profile import (
    Profile,
    TeamUser,
    TeamUserCreate,
    TeamUserCreatedResponse,
    UserCreate,
    UserCreatedResponse,
    UserRoleUpdate,
)
from app.services.user_service import UserService
from app.utils.query_cache import QueryCache, get_query_cache

router = APIRouter(
    prefix="/businesses/{business_id}/users",
    tags=["Users"],
    dependencies=[Depends(verify_super_admin)],
)

team_router = APIRouter(prefix="/team", tags=["Users"])


def get_user_service(
    backend: AbstractBackend = Depends(get_backend),
    cache: QueryCache = Depends(get_query_cache),
) -> UserService:
    return UserService(backend, cache)


@router.get("", response_model=list[Profile])
async def list_users(business_id: str, service: UserService = Depends(get_user_service)) -> list[Profile]:
    """List the users assigned to a business, newest first."""
    return await service.list_users(business_id)


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    business_id: str,
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserCreatedResponse:
    """Create a confirmed account inside the business.

    The password must have at least 8 characters, including an uppercase
    letter, a lowercase letter and a number.
    """
    user = await service.create_user(business_id, payload)
    return UserCreatedResponse(user_id=user.id)


@router.patch("/{user_id}", response_model=Profile)
async def update_user_role(
    business_id: str,
    user_id: str,
    payload: UserRoleUpdate,
    service: UserService = Depends(get_user_service),
) -> Profile:
    return await service.update_role(business_id, user_id, payload.role)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def remove_user(
    business_id: str,
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> SuccessResponse:
    """Unlink the user from the business. The account is kept."""
    await service.remove_from_business(business_id, user_id)
    return SuccessResponse()


@team_router.post("/users", response_model=TeamUserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_team_user(
    payload: TeamUserCreate,
    ctx: AuthContext = Depends(require_business_admin),
    service: UserService = Depends(get_user_service),
) -> TeamUserCreatedResponse:
    """Let a business admin add an account to their own business."""
    user = await service.create_team_user(ctx.profile.business_id, payload)
    return TeamUserCreatedResponse(user=TeamUser(id=user.id, email=user.email))
