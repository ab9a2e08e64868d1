"""Comment engine service layer.

Business logic for:
- Comment creation with one level of threading
- Editing, cascade deletion and like toggling
- Approval gating and the admin moderation listing
- Caching of the first public comment page per target (Redis, optional)
"""

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from inkpress.auth.permissions import Actor, can_manage
from inkpress.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from inkpress.core.pagination import paginate
from inkpress.core.redis import comment_page_key
from inkpress.engagement.models import LikeToggle

from .models import Comment, CommentStatus, CommentTargetType, create_comment
from .schemas import (
    AdminCommentListResponse,
    CommentListResponse,
    CommentResponse,
    CommentThreadResponse,
)
from .targets import CommentTarget, CommentTargetResolver


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from .repository import CommentRepository


logger = structlog.get_logger(__name__)


class CommentService:
    """Service for threaded comments on posts and user content."""

    def __init__(
        self,
        repository: "CommentRepository",
        targets: dict[CommentTargetType, CommentTargetResolver],
        redis: "Redis | None" = None,
        cache_ttl_seconds: int = 300,
    ):
        self.repository = repository
        self.targets = targets
        self.redis = redis
        self.cache_ttl_seconds = cache_ttl_seconds

    async def _resolve_target(
        self, target_type: CommentTargetType, target_id: UUID
    ) -> CommentTarget:
        resolver = self.targets.get(target_type)
        target = await resolver.resolve(target_id) if resolver else None
        if target is None:
            label = "Post" if target_type == CommentTargetType.POST else "Content"
            raise NotFoundError(f"{label} not found")
        return target

    async def _get_comment(self, comment_id: UUID) -> Comment:
        comment = await self.repository.get(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    # ==========================================================================
    # Comment CRUD
    # ==========================================================================

    async def create_comment(
        self,
        actor: Actor,
        target_type: CommentTargetType,
        target_id: UUID,
        content: str,
        parent_id: UUID | None = None,
    ) -> Comment:
        """Create a comment, or a reply when ``parent_id`` is given.

        The reply is linked into its parent's ``reply_ids`` in the same batch
        that inserts it, and rolled back if the parent is deleted meanwhile.

        Raises:
            NotFoundError: target or parent does not exist
            ForbiddenError: commenting is disabled on the target
            ValidationError: parent is on another target, or is itself a reply
        """
        target = await self._resolve_target(target_type, target_id)
        if not target.comments_enabled:
            raise ForbiddenError("Comments are disabled for this post")

        if parent_id is not None:
            parent = await self.repository.get(parent_id)
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.target_type != target_type or parent.target_id != target_id:
                raise ValidationError("Parent comment does not belong to this post")
            if parent.is_reply:
                raise ValidationError("Replies cannot be nested more than one level")

        comment = create_comment(
            target_type=target_type,
            target_id=target_id,
            author_id=actor.id,
            author_name=actor.display_name or "Anonymous",
            content=content,
            status=target.initial_status,
            parent_id=parent_id,
        )
        if not await self.repository.insert(comment):
            raise NotFoundError("Parent comment not found")
        await self._invalidate_cache(target_type, target_id)

        logger.info(
            "comment_created",
            comment_id=str(comment.comment_id),
            target_type=target_type.value,
            target_id=str(target_id),
            parent_id=str(parent_id) if parent_id else None,
            status=comment.status.value,
        )
        return comment

    async def update_comment(
        self, comment_id: UUID, actor: Actor, content: str
    ) -> Comment:
        """Edit a comment's content (author or admin)."""
        comment = await self._get_comment(comment_id)
        if not can_manage(actor, comment.author_id):
            raise ForbiddenError("Not authorized to update this comment")

        now = datetime.now(UTC)
        comment.content = content
        comment.is_edited = True
        comment.edited_at = now
        comment.updated_at = now
        await self.repository.update_content(comment)
        await self._invalidate_cache(comment.target_type, comment.target_id)

        logger.info("comment_updated", comment_id=str(comment_id))
        return comment

    async def delete_comment(self, comment_id: UUID, actor: Actor) -> int:
        """Delete a comment and its replies (author or admin).

        Returns:
            Number of comments removed
        """
        comment = await self._get_comment(comment_id)
        if not can_manage(actor, comment.author_id):
            raise ForbiddenError("Not authorized to delete this comment")

        replies = await self.repository.get_many(comment.reply_ids)
        comment.updated_at = datetime.now(UTC)
        removed = await self.repository.delete_thread(comment, replies)
        await self._invalidate_cache(comment.target_type, comment.target_id)

        logger.info(
            "comment_deleted",
            comment_id=str(comment_id),
            replies_removed=len(replies),
            by_admin=actor.is_admin,
        )
        return removed

    async def toggle_like(self, comment_id: UUID, actor: Actor) -> LikeToggle:
        comment = await self._get_comment(comment_id)
        toggle = await self.repository.toggle_like(comment_id, actor.id)
        if toggle is None:
            raise NotFoundError("Comment not found")
        await self._invalidate_cache(comment.target_type, comment.target_id)
        return toggle

    async def set_approval(
        self, comment_id: UUID, actor: Actor, is_approved: bool
    ) -> Comment:
        """Approve or disapprove a single comment. Replies are not affected."""
        if not actor.is_admin:
            raise ForbiddenError("Access denied. Admin privileges required.")

        comment = await self._get_comment(comment_id)
        comment.status = (
            CommentStatus.APPROVED if is_approved else CommentStatus.REJECTED
        )
        comment.updated_at = datetime.now(UTC)
        await self.repository.update_status(comment)
        await self._invalidate_cache(comment.target_type, comment.target_id)

        logger.info(
            "comment_moderated",
            comment_id=str(comment_id),
            status=comment.status.value,
            moderator_id=str(actor.id),
        )
        return comment

    # ==========================================================================
    # Listings
    # ==========================================================================

    async def list_for_target(
        self,
        target_type: CommentTargetType,
        target_id: UUID,
        page: int = 1,
        limit: int = 10,
        viewer: Actor | None = None,
    ) -> CommentListResponse:
        """Approved top-level comments, newest first, with approved replies nested."""
        await self._resolve_target(target_type, target_id)

        cacheable = viewer is None and page == 1
        if cacheable:
            cached = await self._get_cached(target_type, target_id, limit)
            if cached is not None:
                return cached

        comments = await self.repository.list_for_target(target_type, target_id)
        top_level = [c for c in comments if not c.is_reply and c.is_approved]
        page_items, pagination = paginate(top_level, page, limit)

        by_id = {c.comment_id: c for c in comments}
        viewer_id = viewer.id if viewer else None
        threads = []
        for comment in page_items:
            thread = CommentThreadResponse(
                **CommentResponse.from_comment(comment, viewer_id).model_dump()
            )
            thread.replies = [
                CommentResponse.from_comment(by_id[reply_id], viewer_id)
                for reply_id in comment.reply_ids
                if reply_id in by_id and by_id[reply_id].is_approved
            ]
            threads.append(thread)

        response = CommentListResponse(comments=threads, pagination=pagination)
        if cacheable:
            await self._set_cached(target_type, target_id, limit, response)
        return response

    async def list_all(
        self,
        actor: Actor,
        page: int = 1,
        limit: int = 20,
        approved: bool | None = None,
        search: str | None = None,
    ) -> AdminCommentListResponse:
        """All comments for moderation, newest first."""
        if not actor.is_admin:
            raise ForbiddenError("Access denied. Admin privileges required.")

        comments = await self.repository.list_all()
        if approved is not None:
            comments = [c for c in comments if c.is_approved == approved]
        if search:
            needle = search.lower()
            comments = [c for c in comments if needle in c.content.lower()]

        page_items, pagination = paginate(comments, page, limit)
        return AdminCommentListResponse(
            comments=[CommentResponse.from_comment(c, actor.id) for c in page_items],
            pagination=pagination,
        )

    async def count_approved(
        self, target_type: CommentTargetType, target_id: UUID
    ) -> int:
        return await self.repository.count_approved(target_type, target_id)

    async def delete_for_target(
        self, target_type: CommentTargetType, target_id: UUID
    ) -> int:
        """Remove every comment on a target that is being deleted."""
        removed = await self.repository.delete_for_target(target_type, target_id)
        await self._invalidate_cache(target_type, target_id)
        return removed

    # ==========================================================================
    # Cache (Redis)
    # ==========================================================================

    async def _get_cached(
        self, target_type: CommentTargetType, target_id: UUID, limit: int
    ) -> CommentListResponse | None:
        if not self.redis:
            return None
        cached = await self.redis.hget(
            comment_page_key(target_type.value, str(target_id)), str(limit)
        )
        if not cached:
            return None
        return CommentListResponse.model_validate(json.loads(cached))

    async def _set_cached(
        self,
        target_type: CommentTargetType,
        target_id: UUID,
        limit: int,
        response: CommentListResponse,
    ) -> None:
        if not self.redis:
            return
        key = comment_page_key(target_type.value, str(target_id))
        await self.redis.hset(key, str(limit), response.model_dump_json())
        await self.redis.expire(key, self.cache_ttl_seconds)

    async def _invalidate_cache(
        self, target_type: CommentTargetType, target_id: UUID
    ) -> None:
        if self.redis:
            await self.redis.delete(comment_page_key(target_type.value, str(target_id)))
