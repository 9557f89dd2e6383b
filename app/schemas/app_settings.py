"""Pydantic schemas for APK distribution settings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AppSettingsRecord(BaseModel):
    """The single ``app_settings`` row describing the published APK."""

    id: str
    apk_url: str | None = None
    apk_version: str | None = None
    apk_size: str | None = Field(None, description="Human-readable size, e.g. '12.3 MB'.")
    apk_filename: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


class UploadCredentials(BaseModel):
    """What a trusted client needs to upload the APK directly to storage."""

    storage_url: str = Field(..., description="Base URL accepting PUT uploads.")
    cdn_url: str = Field(..., description="Base URL serving the uploaded file.")
    api_key: str = Field(..., description="Value for the AccessKey header.")


class ApkUploadRecord(BaseModel):
    """Metadata of an APK the client already uploaded."""

    version: str | None = None
    filename: str | None = None
    size: str | None = None
    url: str | None = None


class DownloadInfo(BaseModel):
    """Public view of the current APK for the download page."""

    available: bool = False
    version: str | None = None
    url: str | None = None
    size: str | None = None
    filename: str | None = None
    updated_at: datetime | None = None
