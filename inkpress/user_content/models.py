"""Database models for user-submitted content (articles and videos).

Every submission goes through moderation before it is publicly visible.
The main table is keyed by id; two index tables serve the moderation
queue / public listing (by status) and the "my content" listing (by
author). Status changes move the index rows in a logged batch.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from inkpress.comments.models import CommentTargetType
from inkpress.comments.targets import CommentTarget


class ContentType(str, Enum):
    TEXT = "text"
    VIDEO = "video"


class ContentStatus(str, Enum):
    """Moderation states.

    ``draft`` is reserved: no operation creates or enters it.
    """

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"


class ContentCategory(str, Enum):
    TECHNOLOGY = "technology"
    LIFESTYLE = "lifestyle"
    TRAVEL = "travel"
    FOOD = "food"
    BUSINESS = "business"
    HEALTH = "health"
    EDUCATION = "education"
    ENTERTAINMENT = "entertainment"
    SPORTS = "sports"
    GAMING = "gaming"
    MUSIC = "music"
    ART = "art"
    SCIENCE = "science"
    POLITICS = "politics"
    OTHER = "other"


# Statuses visible to the public
PUBLIC_STATUSES = frozenset({ContentStatus.APPROVED, ContentStatus.PUBLISHED})

# Statuses whose moderation details are hidden from non-admins
CONFIDENTIAL_STATUSES = frozenset({ContentStatus.PENDING, ContentStatus.REJECTED})


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

USER_CONTENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.user_content (
    content_id UUID PRIMARY KEY,
    title TEXT,
    slug TEXT,
    description TEXT,
    content_type TEXT,
    text_content TEXT,
    video_file FROZEN<MAP<TEXT, TEXT>>,
    author_id UUID,
    author_name TEXT,
    author_email TEXT,
    category TEXT,
    tags LIST<TEXT>,
    featured_image TEXT,
    status TEXT,
    moderation_notes TEXT,
    moderated_by UUID,
    moderated_at TIMESTAMP,
    published_at TIMESTAMP,
    featured BOOLEAN,
    likes MAP<UUID, TIMESTAMP>,
    meta_title TEXT,
    meta_description TEXT,
    reading_time INT,
    external_links LIST<FROZEN<MAP<TEXT, TEXT>>>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Moderation queue and public listing, newest first
USER_CONTENT_BY_STATUS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.user_content_by_status (
    status TEXT,
    created_at TIMESTAMP,
    content_id UUID,
    PRIMARY KEY ((status), created_at, content_id)
) WITH CLUSTERING ORDER BY (created_at DESC, content_id ASC)
"""

USER_CONTENT_BY_AUTHOR_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.user_content_by_author (
    author_id UUID,
    created_at TIMESTAMP,
    content_id UUID,
    status TEXT,
    PRIMARY KEY ((author_id), created_at, content_id)
) WITH CLUSTERING ORDER BY (created_at DESC, content_id ASC)
"""

USER_CONTENT_TABLES_CQL = [
    USER_CONTENT_TABLE_CQL,
    USER_CONTENT_BY_STATUS_TABLE_CQL,
    USER_CONTENT_BY_AUTHOR_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class VideoFile:
    """Uploaded video metadata, or just ``url`` for an external video."""

    filename: str | None = None
    original_name: str | None = None
    mimetype: str | None = None
    size: int | None = None
    path: str | None = None
    url: str | None = None
    duration: int | None = None
    thumbnail: str | None = None

    @property
    def has_source(self) -> bool:
        return bool(self.path or self.url)

    def to_map(self) -> dict[str, str]:
        return {k: str(v) for k, v in self.__dict__.items() if v is not None}

    @classmethod
    def from_map(cls, data: dict[str, str] | None) -> "VideoFile | None":
        if not data:
            return None
        return cls(
            filename=data.get("filename"),
            original_name=data.get("original_name"),
            mimetype=data.get("mimetype"),
            size=int(data["size"]) if data.get("size") else None,
            path=data.get("path"),
            url=data.get("url"),
            duration=int(data["duration"]) if data.get("duration") else None,
            thumbnail=data.get("thumbnail"),
        )


@dataclass
class ExternalLink:
    title: str
    url: str
    description: str = ""

    def to_map(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url, "description": self.description}


@dataclass
class UserContent:
    """User-submitted article or video."""

    content_id: UUID
    title: str
    slug: str
    description: str
    content_type: ContentType
    author_id: UUID
    author_name: str
    author_email: str
    category: ContentCategory
    status: ContentStatus
    text_content: str | None = None
    video_file: VideoFile | None = None
    tags: list[str] = field(default_factory=list)
    featured_image: str = ""
    moderation_notes: str = ""
    moderated_by: UUID | None = None
    moderated_at: datetime | None = None
    published_at: datetime | None = None
    featured: bool = False
    likes: dict[UUID, datetime] = field(default_factory=dict)
    meta_title: str | None = None
    meta_description: str | None = None
    reading_time: int | None = None
    external_links: list[ExternalLink] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def is_public(self) -> bool:
        return self.status in PUBLIC_STATUSES

    @property
    def url(self) -> str:
        return f"/content/{self.slug}"

    def as_comment_target(self) -> CommentTarget:
        return CommentTarget(
            type=CommentTargetType.USER_CONTENT,
            id=self.content_id,
            comments_enabled=True,
            requires_approval=True,
        )

    @classmethod
    def from_row(cls, row: Any) -> "UserContent":
        """Create UserContent from Cassandra row."""
        return cls(
            content_id=row.content_id,
            title=row.title,
            slug=row.slug,
            description=row.description or "",
            content_type=ContentType(row.content_type),
            text_content=row.text_content,
            video_file=VideoFile.from_map(row.video_file),
            author_id=row.author_id,
            author_name=row.author_name or "",
            author_email=row.author_email or "",
            category=ContentCategory(row.category),
            tags=list(row.tags or []),
            featured_image=row.featured_image or "",
            status=ContentStatus(row.status),
            moderation_notes=row.moderation_notes or "",
            moderated_by=row.moderated_by,
            moderated_at=row.moderated_at,
            published_at=row.published_at,
            featured=row.featured or False,
            likes=dict(row.likes or {}),
            meta_title=row.meta_title,
            meta_description=row.meta_description,
            reading_time=row.reading_time,
            external_links=[
                ExternalLink(
                    title=link.get("title", ""),
                    url=link.get("url", ""),
                    description=link.get("description", ""),
                )
                for link in (row.external_links or [])
            ],
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at,
        )


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_user_content(
    title: str,
    slug: str,
    description: str,
    content_type: ContentType,
    author_id: UUID,
    author_name: str,
    author_email: str,
    category: ContentCategory,
    **fields: Any,
) -> UserContent:
    """Create a new submission. Submissions always start pending."""
    now = datetime.now(UTC)
    return UserContent(
        content_id=fields.pop("content_id", None) or uuid4(),
        title=title,
        slug=slug,
        description=description,
        content_type=content_type,
        author_id=author_id,
        author_name=author_name,
        author_email=author_email,
        category=category,
        status=ContentStatus.PENDING,
        created_at=now,
        updated_at=now,
        **fields,
    )
