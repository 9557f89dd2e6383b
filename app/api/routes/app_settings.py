from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.factory import get_backend
from app.adapters.storage.base import AbstractStorageClient
from app.adapters.storage.factory import get_storage_client
from app.core.auth import AuthContext, verify_super_admin
from app.core.file_validation import read_upload_file_limited
from app.schemas.app_settings import ApkUploadRecord, AppSettingsRecord, UploadCredentials
from app.schemas.common import SuccessResponse
from app.services.app_settings_service import AppSettingsService

router = APIRouter(tags=["App distribution"])


def get_app_settings_service(backend: AbstractBackend = Depends(get_backend)) -> AppSettingsService:
    return AppSettingsService(backend)


@router.get("/upload-apk", response_model=UploadCredentials)
async def get_upload_credentials(
    ctx: AuthContext = Depends(verify_super_admin),
    storage: AbstractStorageClient = Depends(get_storage_client),
) -> UploadCredentials:
    """Return storage URLs and the access key for a direct client upload.

    Raises:
        StorageAppError: 500 when the storage zone, password or pull zone is not configured.
    """
    return AppSettingsService.upload_credentials(storage)


@router.post("/upload-apk", response_model=SuccessResponse)
async def record_apk_upload(
    payload: ApkUploadRecord,
    ctx: AuthContext = Depends(verify_super_admin),
    service: AppSettingsService = Depends(get_app_settings_service),
) -> SuccessResponse:
    """Save the metadata of an APK the client uploaded to storage."""
    await service.record_upload(payload, user_id=ctx.user_id)
    return SuccessResponse()


@router.post("/upload-apk/file", response_model=AppSettingsRecord)
async def upload_apk_file(
    ctx: AuthContext = Depends(verify_super_admin),
    storage: AbstractStorageClient = Depends(get_storage_client),
    service: AppSettingsService = Depends(get_app_settings_service),
    version: str = Form(..., description="APK version, e.g. 1.4.0"),
    apk_file: UploadFile = File(..., description="Android package (.apk)"),
) -> AppSettingsRecord:
    """Upload the APK through the API and publish it.

    Raises:
        HTTPException: 413 if the file exceeds ``APP_MAX_APK_SIZE_MB``.
        ValidationAppError: 400 for an invalid version or a file that is not an APK.
    """
    data = await read_upload_file_limited(apk_file)
    return await service.upload_apk(
        storage,
        version=version,
        filename=apk_file.filename,
        content_type=apk_file.content_type,
        data=data,
        user_id=ctx.user_id,
    )


@router.delete("/upload-apk", response_model=SuccessResponse)
async def delete_apk(
    ctx: AuthContext = Depends(verify_super_admin),
    storage: AbstractStorageClient = Depends(get_storage_client),
    service: AppSettingsService = Depends(get_app_settings_service),
) -> SuccessResponse:
    """Delete the published APK from storage and clear its metadata."""
    await service.delete_apk(storage, user_id=ctx.user_id)
    return SuccessResponse()


@router.get("/app-settings", response_model=AppSettingsRecord | None)
async def get_app_settings(
    ctx: AuthContext = Depends(verify_super_admin),
    service: AppSettingsService = Depends(get_app_settings_service),
) -> AppSettingsRecord | None:
    return await service.get_settings()
