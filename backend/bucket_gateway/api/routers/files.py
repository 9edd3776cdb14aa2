import logging

from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from bucket_gateway.api.deps import get_app_settings, get_storage
from bucket_gateway.core.config import Settings
from bucket_gateway.core.errors import ApiError, StorageError
from bucket_gateway.schemas import DownloadResponse, ErrorResponse, UploadResponse
from bucket_gateway.services.staging import staged_upload
from bucket_gateway.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["files"])


@router.get(
    "/files",
    response_model=list[str],
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
async def list_files(storage: StorageService = Depends(get_storage)) -> list[str]:
    try:
        return await storage.list_keys()
    except StorageError as exc:
        logger.error("S3 list error: %s (code=%s)", exc.message, exc.code)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to list files", exc
        ) from exc


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def upload_file(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    storage: StorageService = Depends(get_storage),
) -> UploadResponse:
    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as exc:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "No file uploaded") from exc

    try:
        upload = form.get("file")
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "No file uploaded")

        # Stored under the client's file name verbatim.
        key = upload.filename
        async with staged_upload(upload, settings.upload_dir) as staged_path:
            try:
                location = await storage.upload_file(staged_path, key)
            except StorageError as exc:
                logger.error("S3 upload error for %s: %s (code=%s)", key, exc.message, exc.code)
                raise ApiError(
                    status.HTTP_500_INTERNAL_SERVER_ERROR, "Upload failed", exc
                ) from exc
    finally:
        await form.close()

    return UploadResponse(message="Upload successful", url=location)


@router.get(
    "/download/{filename:path}",
    response_model=DownloadResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def download_link(
    filename: str,
    storage: StorageService = Depends(get_storage),
) -> DownloadResponse:
    try:
        url = storage.create_presigned_get(filename)
    except StorageError as exc:
        # Every signing failure is reported as a missing object.
        logger.error("S3 download error for %s: %s (code=%s)", filename, exc.message, exc.code)
        raise ApiError(status.HTTP_404_NOT_FOUND, "File not found", exc) from exc
    return DownloadResponse(url=url)
