"""User content API endpoints.

Public reads only see approved and published content. Authors manage
their own submissions; comments posted here wait for approval.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from inkpress.auth.dependencies import CurrentActor, OptionalActor
from inkpress.comments.schemas import AddCommentRequest, CommentListResponse
from inkpress.config import get_settings
from inkpress.engagement.schemas import LikeResponse

from .dependencies import UserContentServiceDep
from .models import ContentCategory, ContentStatus, ContentType
from .schemas import (
    ContentCommentResponse,
    CreateUserContentRequest,
    MessageResponse,
    UpdateUserContentRequest,
    UserContentListResponse,
    UserContentMutationResponse,
    UserContentResponse,
)


settings = get_settings()

router = APIRouter(prefix="/user-content", tags=["user-content"])


@router.get(
    "",
    response_model=UserContentListResponse,
    summary="List public content",
)
async def list_user_content(
    service: UserContentServiceDep,
    actor: OptionalActor,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.user_content_page_size, ge=1, le=100),
    category: ContentCategory | None = None,
    content_type: ContentType | None = None,
    featured: bool | None = None,
    author: UUID | None = None,
) -> UserContentListResponse:
    return await service.list_public(
        page=page,
        limit=limit,
        category=category,
        content_type=content_type,
        featured=featured,
        author_id=author,
        viewer=actor,
    )


@router.get(
    "/my/content",
    response_model=UserContentListResponse,
    summary="List my submissions",
)
async def list_my_content(
    service: UserContentServiceDep,
    actor: CurrentActor,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.posts_page_size, ge=1, le=100),
    status_filter: str = Query(
        default="all",
        alias="status",
        pattern="^(all|draft|pending|approved|rejected|published)$",
    ),
) -> UserContentListResponse:
    """Every submission of the caller; ``status=all`` disables the filter."""
    content_status = None if status_filter == "all" else ContentStatus(status_filter)
    return await service.list_own(actor, page=page, limit=limit, status=content_status)


@router.get(
    "/{slug}",
    response_model=UserContentResponse,
    summary="Get content by slug",
)
async def get_user_content(
    slug: str,
    service: UserContentServiceDep,
    actor: OptionalActor,
) -> UserContentResponse:
    """Fetch approved or published content; each call counts one view."""
    return await service.get_public_by_slug(slug, viewer=actor)


@router.post(
    "",
    response_model=UserContentMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit content",
)
async def create_user_content(
    data: CreateUserContentRequest,
    service: UserContentServiceDep,
    actor: CurrentActor,
) -> UserContentMutationResponse:
    content = await service.create(actor, data)
    return UserContentMutationResponse(
        message="Content submitted successfully and is pending review",
        content=await service.present(content, actor),
    )


@router.put(
    "/{content_id}",
    response_model=UserContentMutationResponse,
    summary="Update content",
)
async def update_user_content(
    content_id: UUID,
    data: UpdateUserContentRequest,
    service: UserContentServiceDep,
    actor: CurrentActor,
) -> UserContentMutationResponse:
    content = await service.update(content_id, actor, data)
    return UserContentMutationResponse(
        message="Content updated successfully",
        content=await service.present(content, actor),
    )


@router.delete(
    "/{content_id}",
    response_model=MessageResponse,
    summary="Delete content",
)
async def delete_user_content(
    content_id: UUID,
    service: UserContentServiceDep,
    actor: CurrentActor,
) -> MessageResponse:
    await service.delete(content_id, actor)
    return MessageResponse(message="Content deleted successfully")


@router.post(
    "/{content_id}/like",
    response_model=LikeResponse,
    summary="Like or unlike content",
)
async def toggle_user_content_like(
    content_id: UUID,
    service: UserContentServiceDep,
    actor: CurrentActor,
) -> LikeResponse:
    toggle = await service.toggle_like(content_id, actor)
    return LikeResponse.from_toggle(toggle, "Content")


@router.post(
    "/{content_id}/comment",
    response_model=ContentCommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on content",
)
async def add_user_content_comment(
    content_id: UUID,
    data: AddCommentRequest,
    service: UserContentServiceDep,
    actor: CurrentActor,
) -> ContentCommentResponse:
    comment, count = await service.add_comment(
        content_id, actor, data.content, parent_id=data.parent_comment_id
    )
    return ContentCommentResponse(
        message="Comment added successfully and is pending approval",
        comment_id=comment.comment_id,
        comment_count=count,
    )


@router.get(
    "/{content_id}/comments",
    response_model=CommentListResponse,
    summary="List content comments",
)
async def list_user_content_comments(
    content_id: UUID,
    service: UserContentServiceDep,
    actor: OptionalActor,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.comments_page_size, ge=1, le=100),
) -> CommentListResponse:
    return await service.list_comments(content_id, page=page, limit=limit, viewer=actor)
