"""Database models for post categories.

Categories are a small, admin-managed set, so lookups by slug scan the
table instead of keeping a separate index.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from inkpress.engagement.text import generate_slug


DEFAULT_COLOR = "#3B82F6"


CATEGORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.categories (
    category_id UUID PRIMARY KEY,
    name TEXT,
    slug TEXT,
    description TEXT,
    color TEXT,
    post_count INT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

CATEGORIES_TABLES_CQL = [
    CATEGORY_TABLE_CQL,
]


@dataclass
class Category:
    category_id: UUID
    name: str
    slug: str
    description: str = ""
    color: str = DEFAULT_COLOR
    post_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_row(cls, row: Any) -> "Category":
        """Create Category from Cassandra row."""
        return cls(
            category_id=row.category_id,
            name=row.name,
            slug=row.slug,
            description=row.description or "",
            color=row.color or DEFAULT_COLOR,
            post_count=row.post_count or 0,
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at,
        )


def create_category(
    name: str, description: str = "", color: str | None = None
) -> Category:
    now = datetime.now(UTC)
    return Category(
        category_id=uuid4(),
        name=name,
        slug=generate_slug(name),
        description=description,
        color=color or DEFAULT_COLOR,
        post_count=0,
        created_at=now,
        updated_at=now,
    )
