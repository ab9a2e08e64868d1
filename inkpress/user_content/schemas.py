"""Pydantic schemas for user content.

Responses are role-aware: while content is pending or rejected its
moderation notes and moderator are shown to admins only.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl, field_validator

from inkpress.auth.permissions import Actor
from inkpress.core.pagination import Pagination
from inkpress.engagement.likes import has_liked
from inkpress.engagement.text import normalize_tags

from .models import (
    CONFIDENTIAL_STATUSES,
    ContentCategory,
    ContentStatus,
    ContentType,
    ExternalLink,
    UserContent,
    VideoFile,
)


# ==============================================================================
# Shared
# ==============================================================================


class VideoFileSchema(BaseModel):
    """Video metadata as returned by the upload endpoint."""

    filename: str | None = None
    original_name: str | None = None
    mimetype: str | None = None
    size: int | None = Field(None, ge=0)
    path: str | None = None
    url: str | None = None
    duration: int | None = Field(None, ge=0)
    thumbnail: str | None = None

    def to_entity(self) -> VideoFile:
        return VideoFile(**self.model_dump())


class ExternalLinkSchema(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    url: HttpUrl
    description: str = Field("", max_length=300)

    def to_entity(self) -> ExternalLink:
        return ExternalLink(
            title=self.title, url=str(self.url), description=self.description
        )


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateUserContentRequest(BaseModel):
    """Submission of a new article or video."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=500)
    content_type: ContentType
    category: ContentCategory
    text_content: str | None = None
    video_file: VideoFileSchema | None = None
    video_url: str | None = Field(None, max_length=500)
    tags: list[str] = Field(default_factory=list)
    featured_image: str = ""
    meta_title: str | None = Field(None, max_length=60)
    meta_description: str | None = Field(None, max_length=160)
    external_links: list[ExternalLinkSchema] = Field(default_factory=list)

    @field_validator("title", "description")
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


class UpdateUserContentRequest(BaseModel):
    """Partial update. Only fields present in the body are changed."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=500)
    category: ContentCategory | None = None
    text_content: str | None = None
    video_file: VideoFileSchema | None = None
    video_url: str | None = Field(None, max_length=500)
    tags: list[str] | None = None
    featured_image: str | None = None
    meta_title: str | None = Field(None, max_length=60)
    meta_description: str | None = Field(None, max_length=160)
    external_links: list[ExternalLinkSchema] | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: list[str] | str | None) -> list[str] | None:
        return None if v is None else normalize_tags(v)


class ApproveContentRequest(BaseModel):
    notes: str = Field("", max_length=1000)
    featured: bool = False


class RejectContentRequest(BaseModel):
    notes: str = Field("", max_length=1000)


# ==============================================================================
# Response Schemas
# ==============================================================================


class UserContentResponse(BaseModel):
    """User content as seen by a given caller."""

    id: UUID
    title: str
    slug: str
    url: str
    description: str
    content_type: ContentType
    text_content: str | None = None
    video_file: VideoFileSchema | None = None
    author_id: UUID
    author_name: str
    author_email: str
    category: ContentCategory
    tags: list[str]
    featured_image: str
    status: ContentStatus
    moderation_notes: str | None = None
    moderated_by: UUID | None = None
    moderated_at: datetime | None = None
    published_at: datetime | None = None
    featured: bool
    views: int = 0
    like_count: int = 0
    comment_count: int = 0
    has_liked: bool = False
    meta_title: str | None = None
    meta_description: str | None = None
    reading_time: int | None = None
    external_links: list[dict[str, str]] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_content(
        cls,
        content: UserContent,
        viewer: Actor | None = None,
        views: int = 0,
        comment_count: int = 0,
    ) -> "UserContentResponse":
        hide_moderation = content.status in CONFIDENTIAL_STATUSES and not (
            viewer and viewer.is_admin
        )
        video = content.video_file
        return cls(
            id=content.content_id,
            title=content.title,
            slug=content.slug,
            url=content.url,
            description=content.description,
            content_type=content.content_type,
            text_content=content.text_content,
            video_file=VideoFileSchema(**video.__dict__) if video else None,
            author_id=content.author_id,
            author_name=content.author_name,
            author_email=content.author_email,
            category=content.category,
            tags=content.tags,
            featured_image=content.featured_image,
            status=content.status,
            moderation_notes=None if hide_moderation else content.moderation_notes,
            moderated_by=None if hide_moderation else content.moderated_by,
            moderated_at=content.moderated_at,
            published_at=content.published_at,
            featured=content.featured,
            views=views,
            like_count=content.like_count,
            comment_count=comment_count,
            has_liked=has_liked(content.likes, viewer.id if viewer else None),
            meta_title=content.meta_title,
            meta_description=content.meta_description,
            reading_time=content.reading_time,
            external_links=[link.to_map() for link in content.external_links],
            created_at=content.created_at,
            updated_at=content.updated_at,
        )


class UserContentListResponse(BaseModel):
    content: list[UserContentResponse]
    pagination: Pagination


class PendingContentResponse(BaseModel):
    """Moderation queue, newest first."""

    content: list[UserContentResponse]
    count: int


class UserContentMutationResponse(BaseModel):
    message: str
    content: UserContentResponse


class ContentCommentResponse(BaseModel):
    message: str
    comment_id: UUID
    comment_count: int


class ModerationStatsResponse(BaseModel):
    """Counts per moderation state. ``total`` excludes the pending queue."""

    pending: int = 0
    approved: int = 0
    rejected: int = 0
    published: int = 0
    text_content: int = 0
    video_content: int = 0
    featured: int = 0
    total: int = 0


class MessageResponse(BaseModel):
    message: str
    success: bool = True
