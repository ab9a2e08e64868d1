"""Post API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from inkpress.auth.dependencies import CurrentActor, OptionalActor
from inkpress.config import get_settings
from inkpress.engagement.schemas import LikeResponse

from .dependencies import PostServiceDep
from .models import PostSort
from .schemas import (
    CreatePostRequest,
    MessageResponse,
    PostListResponse,
    PostMutationResponse,
    PostResponse,
    UpdatePostRequest,
)


settings = get_settings()

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostListResponse, summary="List posts")
async def list_posts(
    post_service: PostServiceDep,
    actor: OptionalActor,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.posts_page_size, ge=1, le=100),
    category: str | None = Query(default=None, description="Category slug"),
    tag: str | None = None,
    author: UUID | None = None,
    featured: bool | None = None,
    sort: PostSort = PostSort.NEWEST,
    status_filter: str | None = Query(default=None, alias="status"),
) -> PostListResponse:
    """Published posts. Authors may pass ``status=all`` with their own id."""
    return await post_service.list_posts(
        page=page,
        limit=limit,
        category=category,
        tag=tag,
        author_id=author,
        featured=featured,
        sort=sort,
        status=status_filter,
        viewer=actor,
    )


@router.get(
    "/featured",
    response_model=list[PostResponse],
    summary="Featured posts",
)
async def list_featured_posts(
    post_service: PostServiceDep,
    limit: int = Query(default=5, ge=1, le=50),
) -> list[PostResponse]:
    return await post_service.list_featured(limit)


@router.get("/{slug}", response_model=PostResponse, summary="Get post by slug")
async def get_post(
    slug: str,
    post_service: PostServiceDep,
    actor: OptionalActor,
) -> PostResponse:
    """Fetch a published post; each call counts one view."""
    return await post_service.get_by_slug(slug, viewer=actor)


@router.post(
    "",
    response_model=PostMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create post",
)
async def create_post(
    data: CreatePostRequest,
    post_service: PostServiceDep,
    actor: CurrentActor,
) -> PostMutationResponse:
    post = await post_service.create(actor, data)
    return PostMutationResponse(
        message="Post created successfully",
        post=await post_service.present(post, actor),
    )


@router.put("/{post_id}", response_model=PostMutationResponse, summary="Update post")
async def update_post(
    post_id: UUID,
    data: UpdatePostRequest,
    post_service: PostServiceDep,
    actor: CurrentActor,
) -> PostMutationResponse:
    post = await post_service.update(post_id, actor, data)
    return PostMutationResponse(
        message="Post updated successfully",
        post=await post_service.present(post, actor),
    )


@router.delete("/{post_id}", response_model=MessageResponse, summary="Delete post")
async def delete_post(
    post_id: UUID,
    post_service: PostServiceDep,
    actor: CurrentActor,
) -> MessageResponse:
    await post_service.delete(post_id, actor)
    return MessageResponse(message="Post deleted successfully")


@router.post(
    "/{post_id}/like",
    response_model=LikeResponse,
    summary="Like or unlike post",
)
async def toggle_post_like(
    post_id: UUID,
    post_service: PostServiceDep,
    actor: CurrentActor,
) -> LikeResponse:
    toggle = await post_service.toggle_like(post_id, actor)
    return LikeResponse.from_toggle(toggle, "Post")
