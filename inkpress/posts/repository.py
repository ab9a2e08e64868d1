"""Cassandra persistence for posts."""

from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from inkpress.engagement.likes import LikeLedger
from inkpress.engagement.models import LikeToggle

from .models import Post, PostStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session


class PostRepository:
    """Reads and writes post rows and their index tables."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()
        self.likes = LikeLedger(session, keyspace, "posts", "post_id")

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._upsert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.posts
            (post_id, title, slug, content, excerpt, featured_image, author_id,
             author_name, category_id, tags, status, published_at,
             comments_enabled, featured, reading_time, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.posts WHERE post_id = ?
        """)
        self._get_many = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.posts WHERE post_id IN ?
        """)
        self._delete = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.posts WHERE post_id = ?
        """)

        self._insert_by_status = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.posts_by_status (status, created_at, post_id)
            VALUES (?, ?, ?)
        """)
        self._delete_by_status = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.posts_by_status
            WHERE status = ? AND created_at = ? AND post_id = ?
        """)
        self._list_by_status = self.session.prepare(f"""
            SELECT post_id FROM {self.keyspace}.posts_by_status WHERE status = ?
        """)

        self._insert_by_author = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.posts_by_author (author_id, created_at, post_id)
            VALUES (?, ?, ?)
        """)
        self._delete_by_author = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.posts_by_author
            WHERE author_id = ? AND created_at = ? AND post_id = ?
        """)
        self._list_by_author = self.session.prepare(f"""
            SELECT post_id FROM {self.keyspace}.posts_by_author WHERE author_id = ?
        """)

        self._upsert_by_category = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.posts_by_category (category_id, post_id, status)
            VALUES (?, ?, ?)
        """)
        self._delete_by_category = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.posts_by_category
            WHERE category_id = ? AND post_id = ?
        """)
        self._list_by_category = self.session.prepare(f"""
            SELECT status FROM {self.keyspace}.posts_by_category WHERE category_id = ?
        """)

    def _row_values(self, post: Post) -> list:
        return [
            post.post_id,
            post.title,
            post.slug,
            post.content,
            post.excerpt,
            post.featured_image,
            post.author_id,
            post.author_name,
            post.category_id,
            post.tags,
            post.status.value,
            post.published_at,
            post.comments_enabled,
            post.featured,
            post.reading_time,
            post.created_at,
            post.updated_at,
        ]

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get(self, post_id: UUID) -> Post | None:
        result = await self.session.aexecute(self._get, [post_id])
        row = result.one()
        return Post.from_row(row) if row else None

    async def get_many(self, post_ids: list[UUID]) -> list[Post]:
        if not post_ids:
            return []
        result = await self.session.aexecute(self._get_many, [list(post_ids)])
        by_id = {row.post_id: Post.from_row(row) for row in result}
        return [by_id[pid] for pid in post_ids if pid in by_id]

    async def list_by_status(self, status: PostStatus) -> list[Post]:
        """Posts in ``status``, newest first."""
        result = await self.session.aexecute(self._list_by_status, [status.value])
        return await self.get_many([row.post_id for row in result])

    async def list_by_author(self, author_id: UUID) -> list[Post]:
        """Every post of an author, newest first."""
        result = await self.session.aexecute(self._list_by_author, [author_id])
        return await self.get_many([row.post_id for row in result])

    async def count_published_in_category(self, category_id: UUID) -> int:
        result = await self.session.aexecute(self._list_by_category, [category_id])
        return sum(1 for row in result if row.status == PostStatus.PUBLISHED.value)

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def save(
        self,
        post: Post,
        previous_status: PostStatus | None = None,
        previous_category_id: UUID | None = None,
    ) -> None:
        """Upsert the row (likes excluded) and keep the index tables in step."""
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(self._upsert, self._row_values(post))
        if previous_status is not None and previous_status != post.status:
            batch.add(
                self._delete_by_status,
                [previous_status.value, post.created_at, post.post_id],
            )
        batch.add(self._insert_by_status, [post.status.value, post.created_at, post.post_id])
        batch.add(self._insert_by_author, [post.author_id, post.created_at, post.post_id])
        if previous_category_id and previous_category_id != post.category_id:
            batch.add(self._delete_by_category, [previous_category_id, post.post_id])
        if post.category_id:
            batch.add(
                self._upsert_by_category,
                [post.category_id, post.post_id, post.status.value],
            )
        await self.session.aexecute(batch)

    async def delete(self, post: Post) -> None:
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(self._delete, [post.post_id])
        batch.add(
            self._delete_by_status, [post.status.value, post.created_at, post.post_id]
        )
        batch.add(
            self._delete_by_author, [post.author_id, post.created_at, post.post_id]
        )
        if post.category_id:
            batch.add(self._delete_by_category, [post.category_id, post.post_id])
        await self.session.aexecute(batch)

    async def toggle_like(self, post_id: UUID, user_id: UUID) -> LikeToggle | None:
        return await self.likes.toggle(post_id, user_id)
