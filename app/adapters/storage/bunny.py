"""Bunny Storage client built on httpx.

Uploads are a raw ``PUT`` of the file body to
``https://{region.}storage.bunnycdn.com/{zone}/{filename}`` authenticated
with the zone password in the ``AccessKey`` header; files are served from
the pull zone at ``https://{pull_zone}.b-cdn.net/{filename}``.
"""

from __future__ import annotations

import logging

import httpx

from app.adapters.storage.base import AbstractStorageClient
from app.core.errors import StorageAppError

logger = logging.getLogger(__name__)


class BunnyStorageClient(AbstractStorageClient):
    """Async client for a single Bunny storage zone."""

    def __init__(
        self,
        *,
        storage_zone: str,
        access_key: str,
        region: str = "",
        pull_zone: str | None = None,
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            storage_zone: Storage zone name.
            access_key: Storage zone password sent as ``AccessKey``.
            region: Region prefix (e.g. ``"ny"``), empty for the main region.
            pull_zone: Pull zone name serving the CDN URL.
            timeout_seconds: Timeout for storage requests in seconds.
            transport: Optional httpx transport (used by tests to mock the API).
        """
        self._storage_zone = storage_zone
        self._access_key = access_key
        self._region = region.strip()
        self._pull_zone = pull_zone
        self._client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    @property
    def storage_url(self) -> str:
        region_prefix = f"{self._region}." if self._region else ""
        return f"https://{region_prefix}storage.bunnycdn.com/{self._storage_zone}"

    @property
    def cdn_url(self) -> str:
        if not self._pull_zone:
            raise StorageAppError(
                code="storage_not_configured",
                message="Storage pull zone is not configured",
                details={"hint": "Set BUNNY_PULL_ZONE"},
            )
        return f"https://{self._pull_zone}.b-cdn.net"

    @property
    def access_key(self) -> str:
        return self._access_key

    def _headers(self, **extra: str) -> dict[str, str]:
        return {"AccessKey": self._access_key, **extra}

    async def upload(self, filename: str, data: bytes, *, content_type: str) -> str:
        # Resolved first so a missing pull zone fails before anything is stored.
        public_url = self.public_url(filename)
        url = f"{self.storage_url}/{filename}"
        try:
            response = await self._client.put(
                url,
                content=data,
                headers=self._headers(**{"Content-Type": content_type}),
            )
        except httpx.HTTPError as exc:
            logger.error("storage.upload_failed", extra={"storage_file": filename, "error_type": type(exc).__name__})
            raise StorageAppError(code="storage_upload_failed", message="Could not reach the storage service") from exc

        if response.is_error:
            logger.error(
                "storage.upload_rejected",
                extra={"storage_file": filename, "status_code": response.status_code, "body": response.text[:200]},
            )
            raise StorageAppError(
                code="storage_upload_failed",
                message="The storage service rejected the upload",
                details={"status_code": response.status_code},
            )

        logger.info("storage.uploaded", extra={"storage_file": filename, "size_bytes": len(data)})
        return public_url

    async def delete(self, filename: str) -> bool:
        url = f"{self.storage_url}/{filename}"
        try:
            response = await self._client.delete(url, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error("storage.delete_failed", extra={"storage_file": filename, "error_type": type(exc).__name__})
            raise StorageAppError(code="storage_delete_failed", message="Could not reach the storage service") from exc

        if response.status_code == 404:
            logger.info("storage.delete_missing", extra={"storage_file": filename})
            return False

        if response.is_error:
            logger.error(
                "storage.delete_rejected",
                extra={"storage_file": filename, "status_code": response.status_code, "body": response.text[:200]},
            )
            raise StorageAppError(
                code="storage_delete_failed",
                message="Could not delete the file from storage",
                details={"status_code": response.status_code},
            )

        logger.info("storage.deleted", extra={"storage_file": filename})
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
