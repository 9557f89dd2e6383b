"""Factory and FastAPI dependency for APK storage."""

from __future__ import annotations

from app.adapters.storage.base import AbstractStorageClient
from app.adapters.storage.bunny import BunnyStorageClient
from app.core.config import settings
from app.core.errors import StorageAppError


def create_storage_client() -> AbstractStorageClient:
    """Build a Bunny storage client from ``BUNNY_*`` settings.

    Raises:
        StorageAppError: If the storage zone or its password is missing.
    """
    cfg = settings.storage
    if not cfg.storage_zone or not cfg.storage_password:
        raise StorageAppError(
            code="storage_not_configured",
            message="Bunny Storage is not configured",
            details={"hint": "Set BUNNY_STORAGE_ZONE and BUNNY_STORAGE_PASSWORD"},
        )
    return BunnyStorageClient(
        storage_zone=cfg.storage_zone,
        access_key=cfg.storage_password,
        region=cfg.storage_region,
        pull_zone=cfg.pull_zone,
        timeout_seconds=cfg.timeout_seconds,
    )


async def get_storage_client():
    """FastAPI dependency yielding a storage client closed after the request."""
    client = create_storage_client()
    try:
        yield client
    finally:
        await client.aclose()
