"""FastAPI dependencies for user content."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import UserContentService


async def get_user_content_service(request: Request) -> UserContentService:
    """Get user content service from app state."""
    service = getattr(request.app.state, "user_content_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User content service not available",
        )
    return service


UserContentServiceDep = Annotated[
    UserContentService, Depends(get_user_content_service)
]
