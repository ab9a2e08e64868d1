"""Local file storage for uploads."""

from inkpress.storage.service import LocalFileStorage, StoredFile, UploadKind


__all__ = ["LocalFileStorage", "StoredFile", "UploadKind"]
