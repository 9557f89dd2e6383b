from __future__ import annotations

from fastapi import APIRouter, Depends

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.factory import get_backend
from app.core.auth import verify_super_admin
from app.schemas.module import BusinessModuleStatus, Module
from app.services.module_service import ModuleService
from app.utils.query_cache import QueryCache, get_query_cache

router = APIRouter(tags=["Modules"], dependencies=[Depends(verify_super_admin)])


def get_module_service(
    backend: AbstractBackend = Depends(get_backend),
    cache: QueryCache = Depends(get_query_cache),
) -> ModuleService:
    return ModuleService(backend, cache)


@router.get("/modules", response_model=list[Module])
async def list_modules(service: ModuleService = Depends(get_module_service)) -> list[Module]:
    """Module catalog ordered by name."""
    return await service.list_modules()


@router.get("/businesses/{business_id}/modules", response_model=list[BusinessModuleStatus])
async def list_business_modules(
    business_id: str,
    service: ModuleService = Depends(get_module_service),
) -> list[BusinessModuleStatus]:
    return await service.list_business_modules(business_id)


@router.put("/businesses/{business_id}/modules/{module_id}", response_model=BusinessModuleStatus)
async def enable_module(
    business_id: str,
    module_id: str,
    service: ModuleService = Depends(get_module_service),
) -> BusinessModuleStatus:
    """Enable a module for the business. Idempotent."""
    return await service.enable_module(business_id, module_id)


@router.delete("/businesses/{business_id}/modules/{module_id}", response_model=BusinessModuleStatus)
async def disable_module(
    business_id: str,
    module_id: str,
    service: ModuleService = Depends(get_module_service),
) -> BusinessModuleStatus:
    return await service.disable_module(business_id, module_id)
