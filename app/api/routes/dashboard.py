from __future__ import annotations

from fastapi import APIRouter, Depends

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.factory import get_backend
from app.core.auth import verify_super_admin
from app.schemas.dashboard import DashboardStats
from app.services.dashboard_service import DashboardService
from app.utils.query_cache import QueryCache, get_query_cache

router = APIRouter(tags=["Dashboard"], dependencies=[Depends(verify_super_admin)])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    backend: AbstractBackend = Depends(get_backend),
    cache: QueryCache = Depends(get_query_cache),
) -> DashboardStats:
    """Platform counters and the five newest businesses."""
    return await DashboardService(backend, cache).get_stats()
