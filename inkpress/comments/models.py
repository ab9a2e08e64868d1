"""Database models for threaded comments.

One ``comments`` table holds every comment whatever it is attached to
(a post or a piece of user content). Threading is one level deep: a reply
points at a top-level comment through ``parent_id`` and the parent keeps
the ordered ``reply_ids`` of its replies.

``comments_by_target`` is the per-target listing index; it carries
``parent_id`` and ``status`` so listings can filter without loading rows.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class CommentTargetType(str, Enum):
    """Kinds of entity a comment can be attached to."""

    POST = "post"
    USER_CONTENT = "user_content"


class CommentStatus(str, Enum):
    """Approval state of a comment."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COMMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    comment_id UUID PRIMARY KEY,
    target_type TEXT,
    target_id UUID,
    parent_id UUID,
    author_id UUID,
    author_name TEXT,
    content TEXT,
    status TEXT,
    reply_ids LIST<UUID>,
    is_edited BOOLEAN,
    edited_at TIMESTAMP,
    likes MAP<UUID, TIMESTAMP>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Partition per target, newest first
COMMENTS_BY_TARGET_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_target (
    target_type TEXT,
    target_id UUID,
    created_at TIMESTAMP,
    comment_id UUID,
    parent_id UUID,
    status TEXT,
    PRIMARY KEY ((target_type, target_id), created_at, comment_id)
) WITH CLUSTERING ORDER BY (created_at DESC, comment_id ASC)
"""

COMMENTS_TABLES_CQL = [
    COMMENT_TABLE_CQL,
    COMMENTS_BY_TARGET_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Comment:
    """Comment entity."""

    comment_id: UUID
    target_type: CommentTargetType
    target_id: UUID
    parent_id: UUID | None
    author_id: UUID
    author_name: str
    content: str
    status: CommentStatus
    reply_ids: list[UUID] = field(default_factory=list)
    is_edited: bool = False
    edited_at: datetime | None = None
    likes: dict[UUID, datetime] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_approved(self) -> bool:
        return self.status == CommentStatus.APPROVED

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def reply_count(self) -> int:
        return len(self.reply_ids)

    @staticmethod
    def is_complete_row(row: Any) -> bool:
        """False for rows an UPDATE recreated after the comment was deleted.

        Such rows carry only ``reply_ids``, ``likes`` or ``updated_at``.
        """
        return (
            row.target_type is not None
            and row.created_at is not None
            and row.status is not None
        )

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        """Create Comment from Cassandra row."""
        return cls(
            comment_id=row.comment_id,
            target_type=CommentTargetType(row.target_type),
            target_id=row.target_id,
            parent_id=row.parent_id,
            author_id=row.author_id,
            author_name=row.author_name or "Anonymous",
            content=row.content,
            status=CommentStatus(row.status),
            reply_ids=list(row.reply_ids or []),
            is_edited=row.is_edited or False,
            edited_at=row.edited_at,
            likes=dict(row.likes or {}),
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at,
        )


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_comment(
    target_type: CommentTargetType,
    target_id: UUID,
    author_id: UUID,
    author_name: str,
    content: str,
    status: CommentStatus,
    parent_id: UUID | None = None,
) -> Comment:
    """Create a new comment with default values."""
    now = datetime.now(UTC)
    return Comment(
        comment_id=uuid4(),
        target_type=target_type,
        target_id=target_id,
        parent_id=parent_id,
        author_id=author_id,
        author_name=author_name,
        content=content,
        status=status,
        reply_ids=[],
        is_edited=False,
        edited_at=None,
        likes={},
        created_at=now,
        updated_at=now,
    )
