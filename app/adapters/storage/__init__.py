"""Storage adapter layer for distributing the mobile app package."""

from app.adapters.storage.base import AbstractStorageClient
from app.adapters.storage.bunny import BunnyStorageClient
from app.adapters.storage.factory import create_storage_client, get_storage_client

__all__ = [
    "AbstractStorageClient",
    "BunnyStorageClient",
    "create_storage_client",
    "get_storage_client",
]
