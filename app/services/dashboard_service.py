"""Platform overview for the console home page."""

from __future__ import annotations

import logging

from app.adapters.backend.base import AbstractBackend
from app.schemas.business import Business
from app.schemas.dashboard import DashboardStats
from app.utils.query_cache import DASHBOARD_KEY, QueryCache

logger = logging.getLogger(__name__)

RECENT_BUSINESSES_LIMIT = 5


class DashboardService:
    def __init__(self, backend: AbstractBackend, cache: QueryCache) -> None:
        self.backend = backend
        self.cache = cache

    async def get_stats(self) -> DashboardStats:
        async def load() -> DashboardStats:
            recent = await self.backend.select(
                "businesses",
                order_by="created_at",
                descending=True,
                limit=RECENT_BUSINESSES_LIMIT,
            )
            stats = DashboardStats(
                total_businesses=await self.backend.count("businesses"),
                active_businesses=await self.backend.count("businesses", eq={"is_active": True}),
                total_users=await self.backend.count("profiles", eq={"is_super_admin": False}),
                total_products=await self.backend.count("productos"),
                recent_businesses=[Business.model_validate(row) for row in recent],
            )
            logger.debug("dashboard.computed", extra={"total_businesses": stats.total_businesses})
            return stats

        return await self.cache.fetch(DASHBOARD_KEY, load)
