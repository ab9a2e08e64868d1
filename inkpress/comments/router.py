"""Comment API endpoints.

Post comments are created here; user content comments go through
``/user-content/{id}/comment``. Editing, deleting, liking and moderation
work for both.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from inkpress.auth.dependencies import AdminActor, CurrentActor, OptionalActor
from inkpress.config import get_settings
from inkpress.engagement.schemas import LikeResponse

from .dependencies import CommentServiceDep
from .models import CommentTargetType
from .schemas import (
    AdminCommentListResponse,
    ApproveCommentRequest,
    CommentListResponse,
    CommentMutationResponse,
    CommentResponse,
    CreateCommentRequest,
    MessageResponse,
    UpdateCommentRequest,
)


settings = get_settings()

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get(
    "/post/{post_id}",
    response_model=CommentListResponse,
    summary="List post comments",
)
async def list_post_comments(
    post_id: UUID,
    comment_service: CommentServiceDep,
    actor: OptionalActor,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.comments_page_size, ge=1, le=100),
) -> CommentListResponse:
    """Approved top-level comments, newest first, with approved replies nested."""
    return await comment_service.list_for_target(
        CommentTargetType.POST, post_id, page=page, limit=limit, viewer=actor
    )


@router.post(
    "",
    response_model=CommentMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    actor: CurrentActor,
) -> CommentMutationResponse:
    comment = await comment_service.create_comment(
        actor=actor,
        target_type=CommentTargetType.POST,
        target_id=data.post_id,
        content=data.content,
        parent_id=data.parent_comment_id,
    )
    return CommentMutationResponse(
        message="Comment created successfully",
        comment=CommentResponse.from_comment(comment, actor.id),
    )


@router.put(
    "/{comment_id}",
    response_model=CommentMutationResponse,
    summary="Update comment",
)
async def update_comment(
    comment_id: UUID,
    data: UpdateCommentRequest,
    comment_service: CommentServiceDep,
    actor: CurrentActor,
) -> CommentMutationResponse:
    comment = await comment_service.update_comment(comment_id, actor, data.content)
    return CommentMutationResponse(
        message="Comment updated successfully",
        comment=CommentResponse.from_comment(comment, actor.id),
    )


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
    actor: CurrentActor,
) -> MessageResponse:
    """Delete a comment together with all of its replies."""
    await comment_service.delete_comment(comment_id, actor)
    return MessageResponse(message="Comment deleted successfully")


@router.post(
    "/{comment_id}/like",
    response_model=LikeResponse,
    summary="Like or unlike comment",
)
async def toggle_comment_like(
    comment_id: UUID,
    comment_service: CommentServiceDep,
    actor: CurrentActor,
) -> LikeResponse:
    toggle = await comment_service.toggle_like(comment_id, actor)
    return LikeResponse.from_toggle(toggle, "Comment")


# ==============================================================================
# Admin
# ==============================================================================


@router.get(
    "",
    response_model=AdminCommentListResponse,
    summary="List all comments (admin)",
)
async def list_all_comments(
    comment_service: CommentServiceDep,
    admin: AdminActor,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.admin_comments_page_size, ge=1, le=100),
    approved: bool | None = None,
    search: str | None = Query(default=None, max_length=200),
) -> AdminCommentListResponse:
    return await comment_service.list_all(
        admin, page=page, limit=limit, approved=approved, search=search
    )


@router.put(
    "/{comment_id}/approve",
    response_model=CommentMutationResponse,
    summary="Approve or disapprove comment (admin)",
)
async def approve_comment(
    comment_id: UUID,
    data: ApproveCommentRequest,
    comment_service: CommentServiceDep,
    admin: AdminActor,
) -> CommentMutationResponse:
    comment = await comment_service.set_approval(comment_id, admin, data.is_approved)
    verb = "approved" if data.is_approved else "disapproved"
    return CommentMutationResponse(
        message=f"Comment {verb} successfully",
        comment=CommentResponse.from_comment(comment, admin.id),
    )
