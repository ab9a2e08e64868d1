"""Dependencies for storage module."""

from typing import Annotated

from fastapi import Depends

from inkpress.config.settings import Settings, get_settings
from inkpress.storage.service import LocalFileStorage


_storage_service: LocalFileStorage | None = None


def get_storage_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> LocalFileStorage:
    """Get storage service instance (singleton)."""
    global _storage_service  # noqa: PLW0603

    if _storage_service is None:
        _storage_service = LocalFileStorage(settings)

    return _storage_service


StorageServiceDep = Annotated[LocalFileStorage, Depends(get_storage_service)]
