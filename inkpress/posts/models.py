"""Database models for blog posts.

``posts`` is keyed by id. ``posts_by_status`` serves the public listing,
``posts_by_author`` an author's own listing and ``posts_by_category`` the
per-category published count.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from inkpress.comments.models import CommentTargetType
from inkpress.comments.targets import CommentTarget


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PostSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    VIEWS = "views"
    LIKES = "likes"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

POST_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts (
    post_id UUID PRIMARY KEY,
    title TEXT,
    slug TEXT,
    content TEXT,
    excerpt TEXT,
    featured_image TEXT,
    author_id UUID,
    author_name TEXT,
    category_id UUID,
    tags LIST<TEXT>,
    status TEXT,
    published_at TIMESTAMP,
    likes MAP<UUID, TIMESTAMP>,
    comments_enabled BOOLEAN,
    featured BOOLEAN,
    reading_time INT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

POSTS_BY_STATUS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts_by_status (
    status TEXT,
    created_at TIMESTAMP,
    post_id UUID,
    PRIMARY KEY ((status), created_at, post_id)
) WITH CLUSTERING ORDER BY (created_at DESC, post_id ASC)
"""

POSTS_BY_AUTHOR_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts_by_author (
    author_id UUID,
    created_at TIMESTAMP,
    post_id UUID,
    PRIMARY KEY ((author_id), created_at, post_id)
) WITH CLUSTERING ORDER BY (created_at DESC, post_id ASC)
"""

POSTS_BY_CATEGORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts_by_category (
    category_id UUID,
    post_id UUID,
    status TEXT,
    PRIMARY KEY ((category_id), post_id)
)
"""

POSTS_TABLES_CQL = [
    POST_TABLE_CQL,
    POSTS_BY_STATUS_TABLE_CQL,
    POSTS_BY_AUTHOR_TABLE_CQL,
    POSTS_BY_CATEGORY_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Post:
    """Blog post entity."""

    post_id: UUID
    title: str
    slug: str
    content: str
    author_id: UUID
    author_name: str = ""
    excerpt: str = ""
    featured_image: str = ""
    category_id: UUID | None = None
    tags: list[str] = field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    published_at: datetime | None = None
    likes: dict[UUID, datetime] = field(default_factory=dict)
    comments_enabled: bool = True
    featured: bool = False
    reading_time: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED

    @property
    def url(self) -> str:
        return f"/posts/{self.slug}"

    def mark_published(self, now: datetime | None = None) -> None:
        """Set ``published_at`` the first time the post is published."""
        if self.is_published and self.published_at is None:
            self.published_at = now or datetime.now(UTC)

    def as_comment_target(self) -> CommentTarget:
        return CommentTarget(
            type=CommentTargetType.POST,
            id=self.post_id,
            comments_enabled=self.comments_enabled,
            requires_approval=False,
        )

    @classmethod
    def from_row(cls, row: Any) -> "Post":
        """Create Post from Cassandra row."""
        return cls(
            post_id=row.post_id,
            title=row.title,
            slug=row.slug,
            content=row.content or "",
            excerpt=row.excerpt or "",
            featured_image=row.featured_image or "",
            author_id=row.author_id,
            author_name=row.author_name or "",
            category_id=row.category_id,
            tags=list(row.tags or []),
            status=PostStatus(row.status),
            published_at=row.published_at,
            likes=dict(row.likes or {}),
            comments_enabled=(
                row.comments_enabled if row.comments_enabled is not None else True
            ),
            featured=row.featured or False,
            reading_time=row.reading_time,
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at,
        )


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_post(
    title: str,
    content: str,
    author_id: UUID,
    author_name: str = "",
    status: PostStatus = PostStatus.DRAFT,
    **fields: Any,
) -> Post:
    """Create a new post; ``published_at`` is stamped when created published."""
    now = datetime.now(UTC)
    post = Post(
        post_id=fields.pop("post_id", None) or uuid4(),
        title=title,
        slug=fields.pop("slug", ""),
        content=content,
        author_id=author_id,
        author_name=author_name,
        status=status,
        created_at=now,
        updated_at=now,
        **fields,
    )
    post.mark_published(now)
    return post
