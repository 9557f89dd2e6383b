"""Pydantic schemas for businesses (tenants)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Business(BaseModel):
    """A tenant as stored in the ``businesses`` table."""

    id: str
    name: str
    slug: str
    logo_url: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BusinessCreate(BaseModel):
    """Payload to create a business.

    Required fields are checked by the service so clients get the same
    400 envelope for every validation failure.
    """

    name: str | None = Field(None, description="Display name, at most 100 characters.")
    slug: str | None = Field(None, description="Unique URL-safe identifier, e.g. 'acme-store'.")
    logo_url: str | None = Field(None, description="Optional http(s) URL of the logo.")
    module_ids: list[str] = Field(
        default_factory=list,
        description="Modules to enable for the new business.",
    )


class BusinessUpdate(BaseModel):
    """Partial update; only the fields present in the request are written."""

    name: str | None = None
    slug: str | None = None
    logo_url: str | None = None
    is_active: bool | None = None


class BusinessStats(BaseModel):
    """Activity counters for one business."""

    total_products: int = Field(0, description="Rows in 'productos' for the business.")
    total_sales: int = Field(0, description="Rows in 'ventas' for the business.")
    total_users: int = Field(0, description="Profiles assigned to the business.")
    sales_today: int = Field(0, description="Sales created since 00:00 UTC today.")
