"""Cassandra persistence for user content."""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from cassandra.query import BatchStatement, BatchType

from inkpress.engagement.likes import LikeLedger
from inkpress.engagement.models import LikeToggle

from .models import ContentStatus, UserContent


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


class UserContentRepository:
    """Reads and writes user content rows and their index tables."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()
        self.likes = LikeLedger(session, keyspace, "user_content", "content_id")

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._upsert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.user_content
            (content_id, title, slug, description, content_type, text_content,
             video_file, author_id, author_name, author_email, category, tags,
             featured_image, status, moderation_notes, moderated_by, moderated_at,
             published_at, featured, meta_title, meta_description, reading_time,
             external_links, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.user_content WHERE content_id = ?
        """)

        self._get_many = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.user_content WHERE content_id IN ?
        """)

        # Compare-and-set on status; two moderators cannot both win
        self._moderate = self.session.prepare(f"""
            UPDATE {self.keyspace}.user_content
            SET status = ?, moderation_notes = ?, moderated_by = ?, moderated_at = ?,
                published_at = ?, featured = ?, updated_at = ?
            WHERE content_id = ?
            IF status = ?
        """)

        # Author and admin edits; conditional so a concurrent moderation
        # transition is never overwritten
        self._edit = self.session.prepare(f"""
            UPDATE {self.keyspace}.user_content
            SET title = ?, slug = ?, description = ?, text_content = ?,
                video_file = ?, category = ?, tags = ?, featured_image = ?,
                status = ?, moderation_notes = ?, featured = ?, meta_title = ?,
                meta_description = ?, reading_time = ?, external_links = ?,
                updated_at = ?
            WHERE content_id = ?
            IF status = ?
        """)

        self._insert_by_status = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.user_content_by_status
            (status, created_at, content_id) VALUES (?, ?, ?)
        """)

        self._delete_by_status = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.user_content_by_status
            WHERE status = ? AND created_at = ? AND content_id = ?
        """)

        self._list_by_status = self.session.prepare(f"""
            SELECT content_id FROM {self.keyspace}.user_content_by_status
            WHERE status = ?
        """)

        self._upsert_by_author = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.user_content_by_author
            (author_id, created_at, content_id, status) VALUES (?, ?, ?, ?)
        """)

        self._delete_by_author = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.user_content_by_author
            WHERE author_id = ? AND created_at = ? AND content_id = ?
        """)

        self._list_by_author = self.session.prepare(f"""
            SELECT content_id FROM {self.keyspace}.user_content_by_author
            WHERE author_id = ?
        """)

        self._delete = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.user_content WHERE content_id = ?
        """)

    def _row_values(self, content: UserContent) -> list:
        return [
            content.content_id,
            content.title,
            content.slug,
            content.description,
            content.content_type.value,
            content.text_content,
            content.video_file.to_map() if content.video_file else None,
            content.author_id,
            content.author_name,
            content.author_email,
            content.category.value,
            content.tags,
            content.featured_image,
            content.status.value,
            content.moderation_notes,
            content.moderated_by,
            content.moderated_at,
            content.published_at,
            content.featured,
            content.meta_title,
            content.meta_description,
            content.reading_time,
            [link.to_map() for link in content.external_links],
            content.created_at,
            content.updated_at,
        ]

    def _add_index_move(
        self,
        batch: BatchStatement,
        content: UserContent,
        previous_status: ContentStatus | None,
    ) -> None:
        if previous_status is not None and previous_status != content.status:
            batch.add(
                self._delete_by_status,
                [previous_status.value, content.created_at, content.content_id],
            )
        batch.add(
            self._insert_by_status,
            [content.status.value, content.created_at, content.content_id],
        )
        batch.add(
            self._upsert_by_author,
            [
                content.author_id,
                content.created_at,
                content.content_id,
                content.status.value,
            ],
        )

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get(self, content_id: UUID) -> UserContent | None:
        result = await self.session.aexecute(self._get, [content_id])
        row = result.one()
        return UserContent.from_row(row) if row else None

    async def get_many(self, content_ids: list[UUID]) -> list[UserContent]:
        if not content_ids:
            return []
        result = await self.session.aexecute(self._get_many, [list(content_ids)])
        by_id = {row.content_id: UserContent.from_row(row) for row in result}
        return [by_id[cid] for cid in content_ids if cid in by_id]

    async def list_by_status(self, *statuses: ContentStatus) -> list[UserContent]:
        """Content in any of ``statuses``, newest first.

        The row's own ``status`` is authoritative. Index entries left behind
        by an interrupted index move are skipped, and each item appears once.
        """
        contents: dict[UUID, UserContent] = {}
        for content_status in statuses:
            result = await self.session.aexecute(
                self._list_by_status, [content_status.value]
            )
            for content in await self.get_many([row.content_id for row in result]):
                if content.status in statuses:
                    contents[content.content_id] = content
        return sorted(contents.values(), key=lambda c: c.created_at, reverse=True)

    async def list_by_author(self, author_id: UUID) -> list[UserContent]:
        result = await self.session.aexecute(self._list_by_author, [author_id])
        return await self.get_many([row.content_id for row in result])

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def insert(self, content: UserContent) -> None:
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(self._upsert, self._row_values(content))
        self._add_index_move(batch, content, None)
        await self.session.aexecute(batch)

    async def update(
        self, content: UserContent, previous_status: ContentStatus
    ) -> bool:
        """Write an edit if the stored status is still ``previous_status``.

        Moderation columns other than the notes are left alone. Index rows
        are moved only after the condition has been applied.

        Returns:
            False if the content was moderated or deleted since it was read
        """
        result = await self.session.aexecute(
            self._edit,
            [
                content.title,
                content.slug,
                content.description,
                content.text_content,
                content.video_file.to_map() if content.video_file else None,
                content.category.value,
                content.tags,
                content.featured_image,
                content.status.value,
                content.moderation_notes,
                content.featured,
                content.meta_title,
                content.meta_description,
                content.reading_time,
                [link.to_map() for link in content.external_links],
                content.updated_at,
                content.content_id,
                previous_status.value,
            ],
        )
        if not result.one().applied:
            logger.warning(
                "edit_conflict",
                content_id=str(content.content_id),
                expected_status=previous_status.value,
            )
            return False

        batch = BatchStatement(batch_type=BatchType.LOGGED)
        self._add_index_move(batch, content, previous_status)
        await self.session.aexecute(batch)
        return True

    async def transition(
        self, content: UserContent, expected_status: ContentStatus
    ) -> bool:
        """Persist a moderation transition if the stored status is still expected.

        The conditional update touches only the main row; the index move
        follows in its own logged batch once the condition has been applied.

        Returns:
            False if another writer changed the status first
        """
        result = await self.session.aexecute(
            self._moderate,
            [
                content.status.value,
                content.moderation_notes,
                content.moderated_by,
                content.moderated_at,
                content.published_at,
                content.featured,
                content.updated_at,
                content.content_id,
                expected_status.value,
            ],
        )
        if not result.one().applied:
            logger.warning(
                "moderation_conflict",
                content_id=str(content.content_id),
                expected_status=expected_status.value,
            )
            return False

        batch = BatchStatement(batch_type=BatchType.LOGGED)
        self._add_index_move(batch, content, expected_status)
        await self.session.aexecute(batch)
        return True

    async def delete(self, content: UserContent) -> None:
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(self._delete, [content.content_id])
        batch.add(
            self._delete_by_status,
            [content.status.value, content.created_at, content.content_id],
        )
        batch.add(
            self._delete_by_author,
            [content.author_id, content.created_at, content.content_id],
        )
        await self.session.aexecute(batch)

    async def toggle_like(self, content_id: UUID, user_id: UUID) -> LikeToggle | None:
        return await self.likes.toggle(content_id, user_id)
