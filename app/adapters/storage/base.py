"""Object storage interface used for APK distribution."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractStorageClient(ABC):
    """Interface for file storage behind a public CDN."""

    @property
    @abstractmethod
    def storage_url(self) -> str:
        """Base URL that accepts authenticated uploads."""
        raise NotImplementedError

    @property
    @abstractmethod
    def cdn_url(self) -> str:
        """Base URL that serves stored files publicly."""
        raise NotImplementedError

    @property
    @abstractmethod
    def access_key(self) -> str:
        """Credential a trusted client needs to upload directly."""
        raise NotImplementedError

    @abstractmethod
    async def upload(self, filename: str, data: bytes, *, content_type: str) -> str:
        """Store ``data`` under ``filename`` and return its public URL.

        Raises:
            StorageAppError: If the storage service rejects the upload.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, filename: str) -> bool:
        """Delete ``filename``; returns False when it did not exist.

        Raises:
            StorageAppError: If the storage service fails for another reason.
        """
        raise NotImplementedError

    def public_url(self, filename: str) -> str:
        return f"{self.cdn_url}/{filename}"

    async def aclose(self) -> None:
        return None
