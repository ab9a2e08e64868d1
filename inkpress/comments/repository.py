"""Cassandra persistence for comments.

Multi-row changes (reply creation, cascade delete, status change) are
written as one LOGGED batch so the ``comments`` row, its listing index
entry and the parent's ``reply_ids`` never diverge.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from cassandra.query import BatchStatement, BatchType

from inkpress.engagement.likes import LikeLedger
from inkpress.engagement.models import LikeToggle

from .models import Comment, CommentStatus, CommentTargetType


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


class CommentRepository:
    """Reads and writes comment rows and their listing index."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()
        self.likes = LikeLedger(session, keyspace, "comments", "comment_id")

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments
            (comment_id, target_type, target_id, parent_id, author_id, author_name,
             content, status, reply_ids, is_edited, edited_at, likes,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_by_target = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_target
            (target_type, target_id, created_at, comment_id, parent_id, status)
            VALUES (?, ?, ?, ?, ?, ?)
        """)

        self._get_comment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments WHERE comment_id = ?
        """)

        self._get_comments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments WHERE comment_id IN ?
        """)

        self._get_all_comments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments
        """)

        self._get_target_index = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments_by_target
            WHERE target_type = ? AND target_id = ?
        """)

        self._append_reply = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET reply_ids = reply_ids + ?, updated_at = ?
            WHERE comment_id = ?
        """)

        self._remove_reply = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET reply_ids = reply_ids - ?, updated_at = ?
            WHERE comment_id = ?
        """)

        self._update_content = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET content = ?, is_edited = ?, edited_at = ?, updated_at = ?
            WHERE comment_id = ?
        """)

        self._update_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET status = ?, updated_at = ?
            WHERE comment_id = ?
        """)

        self._update_index_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments_by_target
            SET status = ?
            WHERE target_type = ? AND target_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_comment = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments WHERE comment_id = ?
        """)

        self._delete_index_entry = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_target
            WHERE target_type = ? AND target_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_target_index = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_target
            WHERE target_type = ? AND target_id = ?
        """)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get(self, comment_id: UUID) -> Comment | None:
        result = await self.session.aexecute(self._get_comment, [comment_id])
        row = result.one()
        if row is None or not Comment.is_complete_row(row):
            return None
        return Comment.from_row(row)

    async def get_many(self, comment_ids: list[UUID]) -> list[Comment]:
        """Load comments keeping the order of ``comment_ids``."""
        if not comment_ids:
            return []
        result = await self.session.aexecute(self._get_comments, [list(comment_ids)])
        by_id = {
            row.comment_id: Comment.from_row(row)
            for row in result
            if Comment.is_complete_row(row)
        }
        return [by_id[cid] for cid in comment_ids if cid in by_id]

    async def list_for_target(
        self, target_type: CommentTargetType, target_id: UUID
    ) -> list[Comment]:
        """All comments on a target, newest first."""
        result = await self.session.aexecute(
            self._get_target_index, [target_type.value, target_id]
        )
        ids = [row.comment_id for row in result]
        return await self.get_many(ids)

    async def count_approved(
        self, target_type: CommentTargetType, target_id: UUID
    ) -> int:
        result = await self.session.aexecute(
            self._get_target_index, [target_type.value, target_id]
        )
        return sum(1 for row in result if row.status == CommentStatus.APPROVED.value)

    async def list_all(self) -> list[Comment]:
        """Every comment, newest first. Used by the admin listing."""
        result = await self.session.aexecute(self._get_all_comments)
        comments = [
            Comment.from_row(row) for row in result if Comment.is_complete_row(row)
        ]
        comments.sort(key=lambda c: c.created_at, reverse=True)
        return comments

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def insert(self, comment: Comment) -> bool:
        """Persist a comment; a reply is also appended to its parent's reply_ids.

        If the parent was deleted while the reply was being written, the
        reply and the partial parent row recreated by the append are removed.

        Returns:
            False if the reply was rolled back because its parent is gone
        """
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._insert_comment,
            [
                comment.comment_id,
                comment.target_type.value,
                comment.target_id,
                comment.parent_id,
                comment.author_id,
                comment.author_name,
                comment.content,
                comment.status.value,
                comment.reply_ids,
                comment.is_edited,
                comment.edited_at,
                comment.likes,
                comment.created_at,
                comment.updated_at,
            ],
        )
        batch.add(
            self._insert_by_target,
            [
                comment.target_type.value,
                comment.target_id,
                comment.created_at,
                comment.comment_id,
                comment.parent_id,
                comment.status.value,
            ],
        )
        if comment.parent_id:
            batch.add(
                self._append_reply,
                [[comment.comment_id], comment.created_at, comment.parent_id],
            )
        await self.session.aexecute(batch)

        if comment.parent_id and await self.get(comment.parent_id) is None:
            rollback = BatchStatement(batch_type=BatchType.LOGGED)
            self._add_delete(rollback, comment)
            rollback.add(self._delete_comment, [comment.parent_id])
            await self.session.aexecute(rollback)
            logger.warning(
                "reply_parent_vanished",
                comment_id=str(comment.comment_id),
                parent_id=str(comment.parent_id),
            )
            return False
        return True

    async def update_content(self, comment: Comment) -> None:
        await self.session.aexecute(
            self._update_content,
            [
                comment.content,
                comment.is_edited,
                comment.edited_at,
                comment.updated_at,
                comment.comment_id,
            ],
        )

    async def update_status(self, comment: Comment) -> None:
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._update_status,
            [comment.status.value, comment.updated_at, comment.comment_id],
        )
        batch.add(
            self._update_index_status,
            [
                comment.status.value,
                comment.target_type.value,
                comment.target_id,
                comment.created_at,
                comment.comment_id,
            ],
        )
        await self.session.aexecute(batch)

    def _add_delete(self, batch: BatchStatement, comment: Comment) -> None:
        batch.add(self._delete_comment, [comment.comment_id])
        batch.add(
            self._delete_index_entry,
            [
                comment.target_type.value,
                comment.target_id,
                comment.created_at,
                comment.comment_id,
            ],
        )

    async def delete_thread(self, comment: Comment, replies: list[Comment]) -> int:
        """Delete ``comment`` with its replies and unlink it from its parent.

        Returns:
            Number of comment rows removed
        """
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        for reply in replies:
            self._add_delete(batch, reply)
        self._add_delete(batch, comment)
        if comment.parent_id:
            batch.add(
                self._remove_reply,
                [[comment.comment_id], comment.updated_at, comment.parent_id],
            )
        await self.session.aexecute(batch)
        return len(replies) + 1

    async def delete_for_target(
        self, target_type: CommentTargetType, target_id: UUID
    ) -> int:
        """Delete every comment attached to a target."""
        result = await self.session.aexecute(
            self._get_target_index, [target_type.value, target_id]
        )
        ids = [row.comment_id for row in result]

        batch = BatchStatement(batch_type=BatchType.LOGGED)
        for comment_id in ids:
            batch.add(self._delete_comment, [comment_id])
        batch.add(self._delete_target_index, [target_type.value, target_id])
        await self.session.aexecute(batch)

        logger.info(
            "target_comments_deleted",
            target_type=target_type.value,
            target_id=str(target_id),
            count=len(ids),
        )
        return len(ids)

    async def toggle_like(self, comment_id: UUID, user_id: UUID) -> LikeToggle | None:
        return await self.likes.toggle(comment_id, user_id)
