"""Local disk storage for uploaded images and videos.

Files live under ``settings.upload_dir`` in ``images/`` and ``videos/``
and are served from ``settings.upload_url_prefix``. Entities keep the
returned relative path so they can delete their files when they are
deleted.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from uuid import uuid4

import structlog
from fastapi import status

from inkpress.config.settings import Settings
from inkpress.core.exceptions import DomainError

from .magic_bytes import IMAGE_MIME_TYPES, VIDEO_MIME_TYPES, validate_content_type


logger = structlog.get_logger(__name__)


class StorageError(DomainError):
    """Base error for storage operations."""


class FileTooLargeError(StorageError):
    """Error when file exceeds size limit."""

    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, size: int, max_size: int) -> None:
        message = (
            f"File size ({size / 1024 / 1024:.2f} MB) exceeds "
            f"maximum allowed ({max_size / 1024 / 1024:.2f} MB)"
        )
        super().__init__(message, "file_too_large")


class InvalidContentTypeError(StorageError):
    """Error when the file content is not an allowed type."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE

    def __init__(self, message: str) -> None:
        super().__init__(message, "invalid_content_type")


class UploadKind(str, Enum):
    IMAGE = "images"
    VIDEO = "videos"


@dataclass(frozen=True)
class StoredFile:
    filename: str
    original_name: str
    mimetype: str
    size: int
    path: str
    url: str
    uploaded_at: datetime


class LocalFileStorage:
    """Stores uploads on the local filesystem."""

    EXTENSION_MAP: dict[str, str] = {
        "image/jpeg": ".jpg",
        "image/png": ".png",
        "image/webp": ".webp",
        "image/gif": ".gif",
        "image/avif": ".avif",
        "image/heic": ".heic",
        "video/mp4": ".mp4",
        "video/webm": ".webm",
        "video/quicktime": ".mov",
        "video/x-msvideo": ".avi",
    }

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.root = Path(settings.upload_dir)

    def _limits(self, kind: UploadKind) -> tuple[int, frozenset[str]]:
        if kind == UploadKind.VIDEO:
            return self.settings.upload_max_video_mb * 1024 * 1024, VIDEO_MIME_TYPES
        return self.settings.upload_max_image_mb * 1024 * 1024, IMAGE_MIME_TYPES

    def save(
        self,
        kind: UploadKind,
        content: bytes,
        content_type: str | None,
        original_name: str | None,
    ) -> StoredFile:
        """Validate and write an upload.

        Raises:
            FileTooLargeError: content exceeds the per-kind limit
            InvalidContentTypeError: content is not an allowed image/video
        """
        max_size, allowed = self._limits(kind)
        if len(content) > max_size:
            raise FileTooLargeError(len(content), max_size)

        is_valid, detected, error = validate_content_type(
            content[:64], content_type, allowed
        )
        if not is_valid or detected is None:
            logger.warning(
                "upload_rejected",
                kind=kind.value,
                declared_type=content_type,
                detected_type=detected,
            )
            raise InvalidContentTypeError(error or "Invalid file")

        filename = f"{uuid4().hex}{self.EXTENSION_MAP.get(detected, '')}"
        relative = f"{kind.value}/{filename}"
        target = self.root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

        logger.info(
            "file_stored",
            kind=kind.value,
            path=relative,
            size=len(content),
            content_type=detected,
        )
        return StoredFile(
            filename=filename,
            original_name=original_name or filename,
            mimetype=detected,
            size=len(content),
            path=relative,
            url=f"{self.settings.upload_url_prefix.rstrip('/')}/{relative}",
            uploaded_at=datetime.now(UTC),
        )

    def resolve(self, path_or_url: str) -> Path | None:
        """Map a stored path (or its public URL) to a file under the root.

        Returns None for anything outside the upload root, such as external
        video URLs.
        """
        prefix = self.settings.upload_url_prefix.rstrip("/") + "/"
        relative = path_or_url
        if relative.startswith(prefix):
            relative = relative[len(prefix) :]
        candidate = (self.root / relative.lstrip("/")).resolve()
        root = self.root.resolve()
        if root not in candidate.parents:
            return None
        return candidate

    def delete_file(self, path_or_url: str | None) -> bool:
        """Delete a stored file. Missing or foreign paths are ignored.

        Returns:
            True if a file was removed
        """
        if not path_or_url:
            return False
        target = self.resolve(path_or_url)
        if target is None or not target.is_file():
            return False
        target.unlink()
        logger.info("file_deleted", path=str(target))
        return True
