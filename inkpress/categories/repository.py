"""Cassandra persistence for categories."""

from typing import TYPE_CHECKING
from uuid import UUID

from .models import Category


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CategoryRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._upsert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.categories
            (category_id, name, slug, description, color, post_count,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.categories WHERE category_id = ?
        """)
        self._list = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.categories
        """)
        self._set_post_count = self.session.prepare(f"""
            UPDATE {self.keyspace}.categories SET post_count = ?, updated_at = ?
            WHERE category_id = ?
        """)

    async def get(self, category_id: UUID) -> Category | None:
        result = await self.session.aexecute(self._get, [category_id])
        row = result.one()
        return Category.from_row(row) if row else None

    async def list_all(self) -> list[Category]:
        """All categories sorted by name."""
        result = await self.session.aexecute(self._list)
        categories = [Category.from_row(row) for row in result]
        categories.sort(key=lambda c: c.name.lower())
        return categories

    async def save(self, category: Category) -> None:
        await self.session.aexecute(
            self._upsert,
            [
                category.category_id,
                category.name,
                category.slug,
                category.description,
                category.color,
                category.post_count,
                category.created_at,
                category.updated_at,
            ],
        )

    async def set_post_count(self, category: Category) -> None:
        await self.session.aexecute(
            self._set_post_count,
            [category.post_count, category.updated_at, category.category_id],
        )
