"""Pydantic schemas for posts."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inkpress.auth.permissions import Actor
from inkpress.core.pagination import Pagination
from inkpress.engagement.likes import has_liked
from inkpress.engagement.text import normalize_tags

from .models import Post, PostStatus


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreatePostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    excerpt: str = Field("", max_length=300)
    category_id: UUID | None = Field(None, alias="category")
    tags: list[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    featured: bool = False
    featured_image: str = ""
    comments_enabled: bool = True

    @field_validator("title", "content")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Field cannot be empty"
            raise ValueError(msg)
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: list[str] | str | None) -> list[str]:
        return normalize_tags(v)


class UpdatePostRequest(BaseModel):
    """Partial update. Only fields present in the body are changed."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    excerpt: str | None = Field(None, max_length=300)
    category_id: UUID | None = Field(None, alias="category")
    tags: list[str] | None = None
    status: PostStatus | None = None
    featured: bool | None = None
    featured_image: str | None = None
    comments_enabled: bool | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: list[str] | str | None) -> list[str] | None:
        return None if v is None else normalize_tags(v)


# ==============================================================================
# Response Schemas
# ==============================================================================


class PostAuthorResponse(BaseModel):
    id: UUID
    name: str


class PostResponse(BaseModel):
    """Post as seen by a given caller. ``content`` is omitted in listings."""

    id: UUID
    title: str
    slug: str
    url: str
    content: str | None = None
    excerpt: str
    featured_image: str
    author: PostAuthorResponse
    category_id: UUID | None = None
    tags: list[str]
    status: PostStatus
    published_at: datetime | None = None
    views: int = 0
    like_count: int = 0
    comment_count: int = 0
    has_liked: bool = False
    comments_enabled: bool
    featured: bool
    reading_time: int | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(
        cls,
        post: Post,
        viewer: Actor | None = None,
        views: int = 0,
        comment_count: int = 0,
        include_content: bool = True,
    ) -> "PostResponse":
        return cls(
            id=post.post_id,
            title=post.title,
            slug=post.slug,
            url=post.url,
            content=post.content if include_content else None,
            excerpt=post.excerpt,
            featured_image=post.featured_image,
            author=PostAuthorResponse(id=post.author_id, name=post.author_name),
            category_id=post.category_id,
            tags=post.tags,
            status=post.status,
            published_at=post.published_at,
            views=views,
            like_count=post.like_count,
            comment_count=comment_count,
            has_liked=has_liked(post.likes, viewer.id if viewer else None),
            comments_enabled=post.comments_enabled,
            featured=post.featured,
            reading_time=post.reading_time,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination


class PostMutationResponse(BaseModel):
    message: str
    post: PostResponse


class MessageResponse(BaseModel):
    message: str
    success: bool = True
