"""Moderation endpoints for user content (admin only)."""

from uuid import UUID

from fastapi import APIRouter

from inkpress.auth.dependencies import AdminActor

from .dependencies import UserContentServiceDep
from .schemas import (
    ApproveContentRequest,
    ModerationStatsResponse,
    PendingContentResponse,
    RejectContentRequest,
    UserContentMutationResponse,
)


router = APIRouter(prefix="/admin/content", tags=["moderation"])


@router.get(
    "/pending",
    response_model=PendingContentResponse,
    summary="Moderation queue",
)
async def list_pending_content(
    service: UserContentServiceDep,
    admin: AdminActor,
) -> PendingContentResponse:
    """All pending submissions, newest first."""
    return await service.list_pending(admin)


@router.put(
    "/{content_id}/approve",
    response_model=UserContentMutationResponse,
    summary="Approve content",
)
async def approve_content(
    content_id: UUID,
    service: UserContentServiceDep,
    admin: AdminActor,
    data: ApproveContentRequest | None = None,
) -> UserContentMutationResponse:
    data = data or ApproveContentRequest()
    content = await service.approve(
        content_id, admin, notes=data.notes, featured=data.featured
    )
    return UserContentMutationResponse(
        message="Content approved successfully",
        content=await service.present(content, admin),
    )


@router.put(
    "/{content_id}/reject",
    response_model=UserContentMutationResponse,
    summary="Reject content",
)
async def reject_content(
    content_id: UUID,
    data: RejectContentRequest,
    service: UserContentServiceDep,
    admin: AdminActor,
) -> UserContentMutationResponse:
    content = await service.reject(content_id, admin, data.notes)
    return UserContentMutationResponse(
        message="Content rejected",
        content=await service.present(content, admin),
    )


@router.put(
    "/{content_id}/publish",
    response_model=UserContentMutationResponse,
    summary="Publish approved content",
)
async def publish_content(
    content_id: UUID,
    service: UserContentServiceDep,
    admin: AdminActor,
) -> UserContentMutationResponse:
    content = await service.publish(content_id, admin)
    return UserContentMutationResponse(
        message="Content published successfully",
        content=await service.present(content, admin),
    )


@router.get(
    "/stats",
    response_model=ModerationStatsResponse,
    summary="Moderation statistics",
)
async def content_stats(
    service: UserContentServiceDep,
    admin: AdminActor,
) -> ModerationStatsResponse:
    return await service.stats(admin)
