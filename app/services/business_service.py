"""Business (tenant) management.

Handles listing, creation with initial modules, partial updates, deletion
and per-business activity counters. Reads go through the query cache;
every write invalidates the cached views derived from the business.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from app.adapters.backend.base import AbstractBackend, Row
from app.core.errors import NotFoundAppError, ValidationAppError
from app.schemas.business import Business, BusinessCreate, BusinessStats, BusinessUpdate
from app.utils.query_cache import (
    BUSINESSES_KEY,
    QueryCache,
    business_key,
    business_stats_key,
    invalidate_business_queries,
)
from app.utils.validators import (
    is_valid_name,
    is_valid_slug,
    is_valid_url,
    is_valid_uuid,
    limit_length,
    sanitize_for_db,
)

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def ensure_business_exists(backend: AbstractBackend, business_id: str) -> Row:
    """Load a business row or raise 404.

    Ids that are not UUIDs cannot exist, so they are rejected before
    reaching the database.

    Raises:
        NotFoundAppError: If the business does not exist.
    """
    if not is_valid_uuid(business_id):
        raise NotFoundAppError(code="business_not_found", message="Business not found")

    rows = await backend.select("businesses", eq={"id": business_id}, limit=1)
    if not rows:
        raise NotFoundAppError(
            code="business_not_found",
            message="Business not found",
            details={"business_id": business_id},
        )
    return rows[0]


class BusinessService:
    """Business CRUD and statistics on top of the backend and query cache."""

    def __init__(
        self,
        backend: AbstractBackend,
        cache: QueryCache,
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.backend = backend
        self.cache = cache
        self._now = now

    async def list_businesses(self) -> list[Business]:
        async def load() -> list[Business]:
            rows = await self.backend.select("businesses", order_by="created_at", descending=True)
            return [Business.model_validate(row) for row in rows]

        return await self.cache.fetch(BUSINESSES_KEY, load)

    async def get_business(self, business_id: str) -> Business:
        async def load() -> Business:
            return Business.model_validate(await ensure_business_exists(self.backend, business_id))

        return await self.cache.fetch(business_key(business_id), load)

    async def _slug_taken(self, slug: str, *, exclude_id: str | None = None) -> bool:
        neq = {"id": exclude_id} if exclude_id else None
        rows = await self.backend.select("businesses", eq={"slug": slug}, neq=neq, limit=1)
        return bool(rows)

    async def create_business(self, payload: BusinessCreate) -> Business:
        """Validate and insert a business, then enable the selected modules.

        Raises:
            ValidationAppError: On invalid name, slug or logo URL, or a duplicate slug.
        """
        if not payload.name or not is_valid_name(payload.name, NAME_MAX_LENGTH):
            raise ValidationAppError(
                code="invalid_name",
                message=f"Name is required (at most {NAME_MAX_LENGTH} characters)",
                details={"field": "name"},
            )
        if not payload.slug:
            raise ValidationAppError(code="slug_required", message="Slug is required", details={"field": "slug"})
        if not is_valid_slug(payload.slug):
            raise ValidationAppError(
                code="invalid_slug",
                message="Slug may only contain lowercase letters, numbers and hyphens",
                details={"field": "slug"},
            )
        if payload.logo_url and not is_valid_url(payload.logo_url):
            raise ValidationAppError(code="invalid_logo_url", message="Invalid logo URL", details={"field": "logo_url"})

        slug = sanitize_for_db(payload.slug).lower()
        if await self._slug_taken(slug):
            raise ValidationAppError(code="slug_taken", message="Slug is already in use", details={"field": "slug"})

        module_ids = list(dict.fromkeys(m for m in payload.module_ids if m))
        if module_ids:
            known = {row["id"] for row in await self.backend.select("modules")}
            if any(module_id not in known for module_id in module_ids):
                raise ValidationAppError(
                    code="unknown_module",
                    message="One or more selected modules do not exist",
                    details={"field": "module_ids"},
                )

        now = self._now().isoformat()
        inserted = await self.backend.insert(
            "businesses",
            {
                "name": limit_length(sanitize_for_db(payload.name), NAME_MAX_LENGTH),
                "slug": slug,
                "logo_url": sanitize_for_db(payload.logo_url) if payload.logo_url else None,
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            },
        )
        business = Business.model_validate(inserted[0])

        if module_ids:
            try:
                await self.backend.insert(
                    "business_modules",
                    [{"business_id": business.id, "module_id": module_id, "enabled_at": now} for module_id in module_ids],
                )
            except Exception:
                logger.warning("business.create_rolled_back", extra={"business_id": business.id})
                await self.backend.delete("businesses", eq={"id": business.id})
                raise

        invalidate_business_queries(self.cache)
        logger.info(
            "business.created",
            extra={"business_id": business.id, "slug": business.slug, "module_count": len(module_ids)},
        )
        return business

    async def update_business(self, business_id: str, payload: BusinessUpdate) -> Business:
        """Apply a partial update; only fields present in the request are written.

        Raises:
            NotFoundAppError: If the business does not exist.
            ValidationAppError: On invalid values or a slug used by another business.
        """
        await ensure_business_exists(self.backend, business_id)
        sent = payload.model_dump(exclude_unset=True)

        if "name" in sent and (sent["name"] is None or not sent["name"].strip()):
            raise ValidationAppError(code="invalid_name", message="Invalid name", details={"field": "name"})

        if "slug" in sent:
            slug = sent["slug"]
            if slug is None or not slug.strip():
                raise ValidationAppError(code="invalid_slug", message="Invalid slug", details={"field": "slug"})
            if not is_valid_slug(slug):
                raise ValidationAppError(
                    code="invalid_slug",
                    message="Slug may only contain lowercase letters, numbers and hyphens",
                    details={"field": "slug"},
                )
            if await self._slug_taken(slug.strip(), exclude_id=business_id):
                raise ValidationAppError(code="slug_taken", message="Slug is already in use", details={"field": "slug"})

        if "logo_url" in sent:
            logo_url = (sent["logo_url"] or "").strip()
            if logo_url and not is_valid_url(logo_url):
                raise ValidationAppError(code="invalid_logo_url", message="Invalid logo URL", details={"field": "logo_url"})

        values: dict[str, Any] = {}
        if "name" in sent:
            values["name"] = limit_length(sent["name"], NAME_MAX_LENGTH)
        if "slug" in sent:
            values["slug"] = sent["slug"].strip()
        if "logo_url" in sent:
            values["logo_url"] = (sent["logo_url"] or "").strip() or None
        if "is_active" in sent:
            values["is_active"] = bool(sent["is_active"])
        values["updated_at"] = self._now().isoformat()

        rows = await self.backend.update("businesses", values, eq={"id": business_id})
        if not rows:
            raise NotFoundAppError(code="business_not_found", message="Business not found")

        invalidate_business_queries(self.cache, business_id)
        logger.info("business.updated", extra={"business_id": business_id, "fields": sorted(sent)})
        return Business.model_validate(rows[0])

    async def delete_business(self, business_id: str) -> None:
        await ensure_business_exists(self.backend, business_id)
        await self.backend.delete("businesses", eq={"id": business_id})
        invalidate_business_queries(self.cache, business_id)
        logger.info("business.deleted", extra={"business_id": business_id})

    async def get_stats(self, business_id: str) -> BusinessStats:
        """Count products, sales and users of a business, plus today's sales (UTC)."""

        await ensure_business_exists(self.backend, business_id)

        async def load() -> BusinessStats:
            scope = {"business_id": business_id}
            start_of_day = self._now().replace(hour=0, minute=0, second=0, microsecond=0)
            return BusinessStats(
                total_products=await self.backend.count("productos", eq=scope),
                total_sales=await self.backend.count("ventas", eq=scope),
                total_users=await self.backend.count("profiles", eq=scope),
                sales_today=await self.backend.count(
                    "ventas",
                    eq=scope,
                    gte={"created_at": start_of_day.isoformat()},
                ),
            )

        return await self.cache.fetch(business_stats_key(business_id), load)
