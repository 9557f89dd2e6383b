"""APK distribution: storage credentials, uploads and the ``app_settings`` row.

There is a single ``app_settings`` row. It is created by the first upload
and its ``apk_*`` columns are cleared when the APK is deleted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from app.adapters.backend.base import AbstractBackend, Row
from app.adapters.storage.base import AbstractStorageClient
from app.core.config import settings
from app.core.errors import NotFoundAppError, ValidationAppError
from app.schemas.app_settings import ApkUploadRecord, AppSettingsRecord, DownloadInfo, UploadCredentials
from app.utils.file_validators import (
    APK_CONTENT_TYPE,
    format_size_mb,
    is_accepted_apk_mime,
    is_apk_filename,
    validate_apk_signature,
    validate_zip_safety,
)
from app.utils.validators import is_valid_url, is_valid_version

logger = logging.getLogger(__name__)

TABLE = "app_settings"
_APK_COLUMNS = ("apk_url", "apk_version", "apk_size", "apk_filename")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_apk_filename(version: str, prefix: str | None = None) -> str:
    """Name under which an APK version is stored, e.g. ``scanstock-v1.4.0.apk``."""
    return f"{prefix or settings.storage.apk_filename_prefix}-v{version.strip()}.apk"


class AppSettingsService:
    """Reads and writes the published APK metadata."""

    def __init__(self, backend: AbstractBackend, *, now: Callable[[], datetime] = _utcnow) -> None:
        self.backend = backend
        self._now = now

    async def _current_row(self) -> Row | None:
        rows = await self.backend.select(TABLE, limit=1)
        return rows[0] if rows else None

    async def get_settings(self) -> AppSettingsRecord | None:
        row = await self._current_row()
        return AppSettingsRecord.model_validate(row) if row else None

    @staticmethod
    def upload_credentials(storage: AbstractStorageClient) -> UploadCredentials:
        """Expose what a trusted client needs to PUT the APK straight to storage."""

        return UploadCredentials(
            storage_url=storage.storage_url,
            cdn_url=storage.cdn_url,
            api_key=storage.access_key,
        )

    async def record_upload(self, payload: ApkUploadRecord, *, user_id: str) -> AppSettingsRecord:
        """Store the metadata of an uploaded APK, creating the row on first use.

        Raises:
            ValidationAppError: If version, filename or url is missing.
        """
        if not payload.version or not payload.filename or not payload.url:
            raise ValidationAppError(code="missing_apk_fields", message="Missing required data: version, filename, url")

        values = {
            "apk_url": payload.url,
            "apk_version": payload.version,
            "apk_size": payload.size,
            "apk_filename": payload.filename,
            "updated_at": self._now().isoformat(),
            "updated_by": user_id,
        }

        existing = await self._current_row()
        if existing:
            rows = await self.backend.update(TABLE, values, eq={"id": existing["id"]})
        else:
            rows = await self.backend.insert(TABLE, values)

        logger.info(
            "apk.recorded",
            extra={"apk_version": payload.version, "apk_filename": payload.filename, "user_id": user_id},
        )
        return AppSettingsRecord.model_validate(rows[0])

    async def upload_apk(
        self,
        storage: AbstractStorageClient,
        *,
        version: str | None,
        filename: str | None,
        content_type: str | None,
        data: bytes,
        user_id: str,
    ) -> AppSettingsRecord:
        """Validate an APK, push it to storage, and record it.

        Raises:
            ValidationAppError: On an invalid version or a file that is not an APK.
            StorageAppError: If storage is misconfigured or rejects the upload.
        """
        if not version or not is_valid_version(version):
            raise ValidationAppError(
                code="invalid_version",
                message="Version must look like 1.2 or 1.2.3",
                details={"field": "version"},
            )
        if not is_apk_filename(filename):
            raise ValidationAppError(code="invalid_file_type", message="Only .apk files are accepted", details={"field": "apk_file"})
        if not is_accepted_apk_mime(content_type):
            raise ValidationAppError(code="invalid_file_type", message="Only .apk files are accepted", details={"field": "apk_file"})
        if not data:
            raise ValidationAppError(code="empty_file", message="Uploaded file is empty", details={"field": "apk_file"})
        if not validate_apk_signature(data):
            raise ValidationAppError(
                code="invalid_file_signature",
                message="File content is not a valid APK archive",
                details={"field": "apk_file"},
            )
        try:
            validate_zip_safety(data)
        except ValueError as exc:
            raise ValidationAppError(code="unsafe_archive", message=str(exc), details={"field": "apk_file"}) from exc

        stored_name = build_apk_filename(version)
        url = await storage.upload(stored_name, data, content_type=APK_CONTENT_TYPE)

        return await self.record_upload(
            ApkUploadRecord(
                version=version.strip(),
                filename=stored_name,
                size=format_size_mb(len(data)),
                url=url,
            ),
            user_id=user_id,
        )

    async def delete_apk(self, storage: AbstractStorageClient, *, user_id: str) -> None:
        """Remove the published APK from storage and clear its metadata.

        Raises:
            NotFoundAppError: If no APK is recorded.
            StorageAppError: If storage fails for a reason other than a missing file.
        """
        row = await self._current_row()
        if not row or not row.get("apk_filename"):
            raise NotFoundAppError(code="apk_not_found", message="There is no APK to delete")

        await storage.delete(row["apk_filename"])

        cleared = {column: None for column in _APK_COLUMNS}
        await self.backend.update(
            TABLE,
            {**cleared, "updated_at": self._now().isoformat(), "updated_by": user_id},
            eq={"id": row["id"]},
        )
        logger.info("apk.deleted", extra={"apk_filename": row["apk_filename"], "user_id": user_id})

    async def download_info(self) -> DownloadInfo:
        """Public description of the current APK for the download page."""

        row = await self._current_row()
        if not row or not row.get("apk_url") or not is_valid_url(row["apk_url"]):
            return DownloadInfo(available=False)

        return DownloadInfo(
            available=True,
            version=row.get("apk_version"),
            url=row["apk_url"],
            size=row.get("apk_size"),
            filename=row.get("apk_filename"),
            updated_at=row.get("updated_at"),
        )
