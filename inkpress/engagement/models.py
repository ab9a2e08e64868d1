"""Cassandra tables backing slugs and view counters."""

from dataclasses import dataclass
from enum import Enum


class SlugScope(str, Enum):
    """Namespaces in which a slug must be unique."""

    POST = "post"
    USER_CONTENT = "user_content"


# Slug claims. Written with IF NOT EXISTS so two writers can never hold the
# same (scope, slug).
SLUGS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.slugs (
    scope TEXT,
    slug TEXT,
    entity_id UUID,
    claimed_at TIMESTAMP,
    PRIMARY KEY ((scope, slug))
)
"""

VIEW_COUNTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.view_counts (
    entity_type TEXT,
    entity_id UUID,
    views COUNTER,
    PRIMARY KEY ((entity_type, entity_id))
)
"""

ENGAGEMENT_TABLES_CQL = [
    SLUGS_TABLE_CQL,
    VIEW_COUNTS_TABLE_CQL,
]


@dataclass(frozen=True)
class LikeToggle:
    """Outcome of a like toggle."""

    liked: bool
    like_count: int
