"""Pydantic schemas for feature modules."""

from __future__ import annotations

from pydantic import BaseModel


class Module(BaseModel):
    """A catalog entry of the ``modules`` table."""

    id: str
    name: str
    description: str | None = None
    icon: str | None = None
    is_default: bool = False


class BusinessModuleStatus(Module):
    """A catalog module annotated with whether a business has it enabled."""

    enabled: bool = False
