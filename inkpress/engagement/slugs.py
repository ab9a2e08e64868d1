"""Slug registry with per-scope uniqueness.

A claim is an ``INSERT ... IF NOT EXISTS`` on ``(scope, slug)``. When the
base slug is taken by another entity the registry tries ``base-1``,
``base-2`` and so on, up to ``max_attempts`` candidates.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from inkpress.core.exceptions import ConflictError
from inkpress.engagement.models import SlugScope
from inkpress.engagement.text import generate_slug


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)

FALLBACK_SLUG = "untitled"


def slug_candidates(base: str, max_attempts: int):
    """Yield ``base``, ``base-1``, ``base-2`` ... (``max_attempts`` in total)."""
    for attempt in range(max_attempts):
        yield base if attempt == 0 else f"{base}-{attempt}"


class SlugRegistry:
    """Claims, resolves and releases slugs."""

    def __init__(self, session: "Session", keyspace: str, max_attempts: int = 1000):
        self.session = session
        self.keyspace = keyspace
        self.max_attempts = max_attempts
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._claim = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.slugs (scope, slug, entity_id, claimed_at)
            VALUES (?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self._resolve = self.session.prepare(f"""
            SELECT entity_id FROM {self.keyspace}.slugs
            WHERE scope = ? AND slug = ?
        """)
        self._release = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.slugs
            WHERE scope = ? AND slug = ?
            IF entity_id = ?
        """)

    async def _try_claim(self, scope: SlugScope, slug: str, entity_id: UUID) -> UUID:
        """Attempt one claim and return the id of the entity owning ``slug``."""
        result = await self.session.aexecute(
            self._claim, [scope.value, slug, entity_id, datetime.now(UTC)]
        )
        row = result.one()
        if row.applied:
            return entity_id
        return row.entity_id

    async def claim(self, scope: SlugScope, title: str, entity_id: UUID) -> str:
        """Reserve a unique slug derived from ``title`` for ``entity_id``.

        A slug already owned by ``entity_id`` is returned as-is, so
        re-claiming after an unchanged title is a no-op.

        Raises:
            ConflictError: every candidate is held by another entity.
        """
        base = generate_slug(title) or FALLBACK_SLUG
        for candidate in slug_candidates(base, self.max_attempts):
            owner = await self._try_claim(scope, candidate, entity_id)
            if owner == entity_id:
                if candidate != base:
                    logger.info(
                        "slug_suffixed",
                        scope=scope.value,
                        base=base,
                        slug=candidate,
                    )
                return candidate

        logger.warning(
            "slug_claim_exhausted",
            scope=scope.value,
            base=base,
            attempts=self.max_attempts,
        )
        raise ConflictError(f"Could not allocate a unique slug for '{base}'")

    async def resolve(self, scope: SlugScope, slug: str) -> UUID | None:
        result = await self.session.aexecute(self._resolve, [scope.value, slug])
        row = result.one()
        return row.entity_id if row else None

    async def release(self, scope: SlugScope, slug: str, entity_id: UUID) -> None:
        """Free ``slug`` if it is still held by ``entity_id``."""
        await self.session.aexecute(self._release, [scope.value, slug, entity_id])
