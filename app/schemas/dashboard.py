"""Pydantic schemas for the dashboard overview."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.business import Business


class DashboardStats(BaseModel):
    """Platform-wide counters and the latest tenants."""

    total_businesses: int = 0
    active_businesses: int = 0
    total_users: int = Field(0, description="Profiles that are not super admins.")
    total_products: int = 0
    recent_businesses: list[Business] = Field(default_factory=list, description="Five newest businesses.")
