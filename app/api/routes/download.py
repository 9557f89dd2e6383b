from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.routes.app_settings import get_app_settings_service
from app.schemas.app_settings import DownloadInfo
from app.services.app_settings_service import AppSettingsService

router = APIRouter(tags=["App distribution"])


@router.get("/download", response_model=DownloadInfo)
async def get_download_info(service: AppSettingsService = Depends(get_app_settings_service)) -> DownloadInfo:
    """Public endpoint describing the latest APK.

    Returns:
        DownloadInfo: ``available`` is false when no APK has been published.
    """
    return await service.download_info()
