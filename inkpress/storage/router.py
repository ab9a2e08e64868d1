"""Upload endpoints for featured images and videos."""

from typing import Annotated

from fastapi import APIRouter, File, UploadFile

from inkpress.auth.dependencies import CurrentActor
from inkpress.storage.dependencies import StorageServiceDep
from inkpress.storage.magic_bytes import IMAGE_MIME_TYPES, VIDEO_MIME_TYPES
from inkpress.storage.schemas import StorageConfigResponse, StorageUploadResponse
from inkpress.storage.service import UploadKind


router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.get(
    "/config",
    response_model=StorageConfigResponse,
    summary="Get upload limits",
)
async def get_upload_config(storage: StorageServiceDep) -> StorageConfigResponse:
    return StorageConfigResponse(
        max_image_size_mb=storage.settings.upload_max_image_mb,
        max_video_size_mb=storage.settings.upload_max_video_mb,
        image_types=sorted(IMAGE_MIME_TYPES),
        video_types=sorted(VIDEO_MIME_TYPES),
    )


async def _store(
    storage: StorageServiceDep, kind: UploadKind, file: UploadFile
) -> StorageUploadResponse:
    content = await file.read()
    stored = storage.save(kind, content, file.content_type, file.filename)
    return StorageUploadResponse.model_validate(stored)


@router.post(
    "/images",
    response_model=StorageUploadResponse,
    status_code=201,
    summary="Upload image",
)
async def upload_image(
    storage: StorageServiceDep,
    actor: CurrentActor,
    file: Annotated[UploadFile, File(description="Image file to upload")],
) -> StorageUploadResponse:
    """Upload a featured image or video thumbnail."""
    return await _store(storage, UploadKind.IMAGE, file)


@router.post(
    "/videos",
    response_model=StorageUploadResponse,
    status_code=201,
    summary="Upload video",
)
async def upload_video(
    storage: StorageServiceDep,
    actor: CurrentActor,
    file: Annotated[UploadFile, File(description="Video file to upload")],
) -> StorageUploadResponse:
    """Upload a video; pass the response as ``video_file`` when submitting content."""
    return await _store(storage, UploadKind.VIDEO, file)
