"""Pydantic schemas for uploads."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StorageUploadResponse(BaseModel):
    """Response model for successful upload.

    The fields mirror the ``video_file`` object accepted by user content.
    """

    model_config = ConfigDict(from_attributes=True)

    success: bool = Field(default=True, description="Upload success status")
    filename: str = Field(..., description="Stored filename")
    original_name: str = Field(..., description="Original filename")
    mimetype: str = Field(..., description="Detected MIME type")
    size: int = Field(..., description="File size in bytes")
    path: str = Field(..., description="Path relative to the upload root")
    url: str = Field(..., description="Public URL of the file")
    uploaded_at: datetime = Field(..., description="Upload timestamp")


class StorageConfigResponse(BaseModel):
    """Upload limits."""

    max_image_size_mb: int
    max_video_size_mb: int
    image_types: list[str]
    video_types: list[str]
