"""Feature module catalog and per-business toggles."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from app.adapters.backend.base import AbstractBackend, Row
from app.core.errors import NotFoundAppError
from app.schemas.module import BusinessModuleStatus, Module
from app.services.business_service import ensure_business_exists
from app.utils.query_cache import MODULES_KEY, QueryCache, business_modules_key, invalidate_business_queries
from app.utils.validators import is_valid_uuid

logger = logging.getLogger(__name__)


class ModuleService:
    """Lists the module catalog and enables/disables modules per business."""

    def __init__(self, backend: AbstractBackend, cache: QueryCache) -> None:
        self.backend = backend
        self.cache = cache

    async def list_modules(self) -> list[Module]:
        async def load() -> list[Module]:
            rows = await self.backend.select("modules", order_by="name")
            return [Module.model_validate(row) for row in rows]

        return await self.cache.fetch(MODULES_KEY, load)

    async def _require_module(self, module_id: str) -> Row:
        rows = await self.backend.select("modules", eq={"id": module_id}, limit=1) if is_valid_uuid(module_id) else []
        if not rows:
            raise NotFoundAppError(
                code="module_not_found",
                message="Module not found",
                details={"module_id": module_id},
            )
        return rows[0]

    async def list_business_modules(self, business_id: str) -> list[BusinessModuleStatus]:
        """Return the catalog with an ``enabled`` flag for the business."""

        await ensure_business_exists(self.backend, business_id)

        async def load() -> list[BusinessModuleStatus]:
            catalog = await self.list_modules()
            links = await self.backend.select("business_modules", eq={"business_id": business_id})
            enabled = {link["module_id"] for link in links}
            return [
                BusinessModuleStatus(**module.model_dump(), enabled=module.id in enabled)
                for module in catalog
            ]

        return await self.cache.fetch(business_modules_key(business_id), load)

    async def enable_module(self, business_id: str, module_id: str) -> BusinessModuleStatus:
        """Enable a module for a business; enabling twice is a no-op."""

        await ensure_business_exists(self.backend, business_id)
        module = Module.model_validate(await self._require_module(module_id))

        scope = {"business_id": business_id, "module_id": module_id}
        if not await self.backend.select("business_modules", eq=scope, limit=1):
            await self.backend.insert(
                "business_modules",
                {**scope, "enabled_at": datetime.now(timezone.utc).isoformat()},
            )
            logger.info("module.enabled", extra=scope)

        invalidate_business_queries(self.cache, business_id)
        return BusinessModuleStatus(**module.model_dump(), enabled=True)

    async def disable_module(self, business_id: str, module_id: str) -> BusinessModuleStatus:
        await ensure_business_exists(self.backend, business_id)
        module = Module.model_validate(await self._require_module(module_id))

        scope = {"business_id": business_id, "module_id": module_id}
        removed = await self.backend.delete("business_modules", eq=scope)
        if removed:
            logger.info("module.disabled", extra=scope)

        invalidate_business_queries(self.cache, business_id)
        return BusinessModuleStatus(**module.model_dump(), enabled=False)
