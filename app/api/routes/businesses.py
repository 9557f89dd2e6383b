from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.factory import get_backend
from app.core.auth import verify_super_admin
from app.schemas.business import Business, BusinessCreate, BusinessStats, BusinessUpdate
from app.schemas.common import SuccessResponse
from app.services.business_service import BusinessService
from app.utils.query_cache import QueryCache, get_query_cache

router = APIRouter(
    prefix="/businesses",
    tags=["Businesses"],
    dependencies=[Depends(verify_super_admin)],
)


def get_business_service(
    backend: AbstractBackend = Depends(get_backend),
    cache: QueryCache = Depends(get_query_cache),
) -> BusinessService:
    return BusinessService(backend, cache)


@router.get("", response_model=list[Business])
async def list_businesses(service: BusinessService = Depends(get_business_service)) -> list[Business]:
    """List all businesses, newest first."""
    return await service.list_businesses()


@router.post("", response_model=Business, status_code=status.HTTP_201_CREATED)
async def create_business(
    payload: BusinessCreate,
    service: BusinessService = Depends(get_business_service),
) -> Business:
    """Create a business and enable the selected modules.

    Raises:
        ValidationAppError: 400 on invalid fields or a slug already in use.
    """
    return await service.create_business(payload)


@router.get("/{business_id}", response_model=Business)
async def get_business(business_id: str, service: BusinessService = Depends(get_business_service)) -> Business:
    return await service.get_business(business_id)


@router.patch("/{business_id}", response_model=Business)
async def update_business(
    business_id: str,
    payload: BusinessUpdate,
    service: BusinessService = Depends(get_business_service),
) -> Business:
    """Update only the fields present in the request body."""
    return await service.update_business(business_id, payload)


@router.delete("/{business_id}", response_model=SuccessResponse)
async def delete_business(
    business_id: str,
    service: BusinessService = Depends(get_business_service),
) -> SuccessResponse:
    await service.delete_business(business_id)
    return SuccessResponse()


@router.get("/{business_id}/stats", response_model=BusinessStats)
async def get_business_stats(
    business_id: str,
    service: BusinessService = Depends(get_business_service),
) -> BusinessStats:
    """Product, sale and user counts for the business, plus today's sales (UTC)."""
    return await service.get_stats(business_id)
