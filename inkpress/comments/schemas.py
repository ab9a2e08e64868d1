"""Pydantic schemas for comments.

Request models validate and strip input; response models derive
``like_count``, ``reply_count`` and ``has_liked`` from the entity at
serialization time.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inkpress.core.pagination import Pagination
from inkpress.engagement.likes import has_liked

from .models import Comment, CommentStatus, CommentTargetType


MAX_COMMENT_LENGTH = 1000


def _strip_content(v: str) -> str:
    v = v.strip()
    if not v:
        msg = "Comment content is required"
        raise ValueError(msg)
    return v


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(BaseModel):
    """Request to comment on a post (optionally as a reply)."""

    model_config = ConfigDict(populate_by_name=True)

    post_id: UUID = Field(..., alias="post")
    parent_comment_id: UUID | None = Field(None, alias="parentComment")
    content: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_content(v)


class AddCommentRequest(BaseModel):
    """Request to comment on a target already named in the URL."""

    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)
    parent_comment_id: UUID | None = Field(None, alias="parentComment")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_content(v)


class UpdateCommentRequest(BaseModel):
    """Request to edit a comment."""

    content: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_content(v)


class ApproveCommentRequest(BaseModel):
    """Admin approval toggle."""

    model_config = ConfigDict(populate_by_name=True)

    is_approved: bool = Field(..., alias="isApproved")


# ==============================================================================
# Response Schemas
# ==============================================================================


class AuthorResponse(BaseModel):
    """Author snapshot stored on the comment."""

    id: UUID
    name: str


class CommentResponse(BaseModel):
    """Response for a single comment."""

    id: UUID
    target_type: CommentTargetType
    target_id: UUID
    parent_comment_id: UUID | None = None
    author: AuthorResponse
    content: str
    status: CommentStatus
    is_approved: bool
    is_edited: bool = False
    edited_at: datetime | None = None
    like_count: int = 0
    reply_count: int = 0
    has_liked: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_comment(
        cls, comment: Comment, viewer_id: UUID | None = None
    ) -> "CommentResponse":
        return cls(
            id=comment.comment_id,
            target_type=comment.target_type,
            target_id=comment.target_id,
            parent_comment_id=comment.parent_id,
            author=AuthorResponse(id=comment.author_id, name=comment.author_name),
            content=comment.content,
            status=comment.status,
            is_approved=comment.is_approved,
            is_edited=comment.is_edited,
            edited_at=comment.edited_at,
            like_count=comment.like_count,
            reply_count=comment.reply_count,
            has_liked=has_liked(comment.likes, viewer_id),
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class CommentThreadResponse(CommentResponse):
    """Top-level comment with its replies nested."""

    replies: list[CommentResponse] = Field(default_factory=list)


class CommentListResponse(BaseModel):
    """Paginated list of comment threads."""

    comments: list[CommentThreadResponse]
    pagination: Pagination


class AdminCommentListResponse(BaseModel):
    """Paginated flat list of comments for moderation."""

    comments: list[CommentResponse]
    pagination: Pagination


class CommentMutationResponse(BaseModel):
    """Envelope returned after creating, editing or moderating a comment."""

    message: str
    comment: CommentResponse
    comment_count: int | None = None


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
    success: bool = True
