"""User content service layer.

Business logic for:
- Submission of text and video content (always queued as pending)
- Public reads by slug with view counting, public and "my content" listings
- Author edits (locked once approved, rejected content is resubmitted)
- Moderation: approve, reject, publish, queue and statistics
- Likes and comments, delegated to the shared engagement and comment engines
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

import structlog

from inkpress.auth.permissions import Actor, can_manage
from inkpress.comments.models import Comment, CommentTargetType
from inkpress.comments.schemas import CommentListResponse
from inkpress.core.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from inkpress.core.pagination import paginate
from inkpress.engagement.models import LikeToggle, SlugScope
from inkpress.engagement.text import reading_time

from . import moderation
from .models import (
    ContentCategory,
    ContentStatus,
    ContentType,
    UserContent,
    VideoFile,
    create_user_content,
)
from .schemas import (
    CreateUserContentRequest,
    ModerationStatsResponse,
    PendingContentResponse,
    UpdateUserContentRequest,
    UserContentListResponse,
    UserContentResponse,
)


if TYPE_CHECKING:
    from inkpress.comments.service import CommentService
    from inkpress.engagement.slugs import SlugRegistry
    from inkpress.engagement.views import ViewCounter
    from inkpress.storage.service import LocalFileStorage

    from .repository import UserContentRepository


logger = structlog.get_logger(__name__)

VIEW_ENTITY = CommentTargetType.USER_CONTENT.value

# Fields copied verbatim from an update request onto the entity
_PLAIN_UPDATE_FIELDS = (
    "description",
    "category",
    "tags",
    "featured_image",
    "meta_title",
    "meta_description",
)


def _require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise ForbiddenError("Access denied. Admin privileges required.")


def validate_body(content: UserContent) -> None:
    """Check that the body matches the content type.

    Raises:
        ValidationError: text without ``text_content`` or video without a source
    """
    if content.content_type == ContentType.TEXT:
        if not content.text_content or not content.text_content.strip():
            raise ValidationError("Text content is required for text posts")
    elif not (content.video_file and content.video_file.has_source):
        raise ValidationError("Video file or video URL is required for video posts")


def _video_from_request(
    video_file: Any, video_url: str | None
) -> VideoFile | None:
    if video_file is not None:
        return video_file.to_entity()
    if video_url:
        return VideoFile(url=video_url)
    return None


class UserContentService:
    """Service for user-submitted articles and videos."""

    def __init__(
        self,
        repository: "UserContentRepository",
        comments: "CommentService",
        slugs: "SlugRegistry",
        views: "ViewCounter",
        storage: "LocalFileStorage | None" = None,
        words_per_minute: int = 200,
    ):
        self.repository = repository
        self.comments = comments
        self.slugs = slugs
        self.views = views
        self.storage = storage
        self.words_per_minute = words_per_minute

    async def _get(self, content_id: UUID) -> UserContent:
        content = await self.repository.get(content_id)
        if content is None:
            raise NotFoundError("Content not found")
        return content

    def _reading_time(self, content: UserContent) -> int | None:
        if content.content_type != ContentType.TEXT or not content.text_content:
            return None
        return reading_time(content.text_content, self.words_per_minute)

    async def present(
        self, content: UserContent, viewer: Actor | None = None
    ) -> UserContentResponse:
        """Build the caller-specific representation with live counters."""
        views = await self.views.get(VIEW_ENTITY, content.content_id)
        comment_count = await self.comments.count_approved(
            CommentTargetType.USER_CONTENT, content.content_id
        )
        return UserContentResponse.from_content(
            content, viewer, views=views, comment_count=comment_count
        )

    async def _present_page(
        self,
        contents: list[UserContent],
        page: int,
        limit: int,
        viewer: Actor | None,
    ) -> UserContentListResponse:
        page_items, pagination = paginate(contents, page, limit)
        return UserContentListResponse(
            content=[await self.present(c, viewer) for c in page_items],
            pagination=pagination,
        )

    # ==========================================================================
    # Author operations
    # ==========================================================================

    async def create(
        self, actor: Actor, data: CreateUserContentRequest
    ) -> UserContent:
        """Submit new content. It is stored as pending until moderated.

        Raises:
            ValidationError: body does not match the content type
            ConflictError: no unique slug could be allocated
        """
        content_id = uuid4()
        content = create_user_content(
            title=data.title,
            slug="",
            description=data.description,
            content_type=data.content_type,
            author_id=actor.id,
            author_name=actor.display_name,
            author_email=actor.email,
            category=data.category,
            content_id=content_id,
            text_content=(
                data.text_content if data.content_type == ContentType.TEXT else None
            ),
            video_file=(
                _video_from_request(data.video_file, data.video_url)
                if data.content_type == ContentType.VIDEO
                else None
            ),
            tags=data.tags,
            featured_image=data.featured_image,
            meta_title=data.meta_title,
            meta_description=data.meta_description,
            external_links=[link.to_entity() for link in data.external_links],
        )
        validate_body(content)
        content.reading_time = self._reading_time(content)

        content.slug = await self.slugs.claim(
            SlugScope.USER_CONTENT, content.title, content_id
        )
        try:
            await self.repository.insert(content)
        except Exception:
            await self.slugs.release(SlugScope.USER_CONTENT, content.slug, content_id)
            raise

        logger.info(
            "content_submitted",
            content_id=str(content_id),
            content_type=content.content_type.value,
            slug=content.slug,
            author_id=str(actor.id),
        )
        return content

    async def update(
        self, content_id: UUID, actor: Actor, data: UpdateUserContentRequest
    ) -> UserContent:
        """Apply a partial update.

        Non-admin authors cannot touch approved or published content; editing
        rejected content sends it back to the moderation queue.

        Raises:
            NotFoundError: content does not exist
            ForbiddenError: actor is neither the author nor an admin
            InvalidStateError: content is locked for its author, or its status
                changed after it was read
            ValidationError: the edit breaks the text/video body rule
        """
        content = await self._get(content_id)
        if not can_manage(actor, content.author_id):
            raise ForbiddenError("Not authorized to update this content")
        moderation.check_editable(content, actor)

        changes = data.model_dump(exclude_unset=True)
        for name in _PLAIN_UPDATE_FIELDS:
            if name in changes and changes[name] is not None:
                setattr(content, name, getattr(data, name))
        if "text_content" in changes:
            content.text_content = data.text_content
        if "video_file" in changes or "video_url" in changes:
            content.video_file = _video_from_request(data.video_file, data.video_url)
        if data.external_links is not None:
            content.external_links = [link.to_entity() for link in data.external_links]
        validate_body(content)

        old_slug = None
        if data.title and data.title != content.title:
            new_slug = await self.slugs.claim(
                SlugScope.USER_CONTENT, data.title, content_id
            )
            if new_slug != content.slug:
                old_slug = content.slug
            content.title = data.title
            content.slug = new_slug

        previous_status = content.status
        resubmitted = moderation.resubmit_on_edit(content, actor)
        content.reading_time = self._reading_time(content)
        content.updated_at = datetime.now(UTC)

        try:
            if not await self.repository.update(content, previous_status):
                raise InvalidStateError(
                    "Content was moderated while being edited; reload and try again"
                )
        except Exception:
            if old_slug:
                await self.slugs.release(
                    SlugScope.USER_CONTENT, content.slug, content_id
                )
            raise
        if old_slug:
            await self.slugs.release(SlugScope.USER_CONTENT, old_slug, content_id)

        logger.info(
            "content_updated",
            content_id=str(content_id),
            fields=sorted(changes),
            resubmitted=resubmitted,
            by_admin=actor.is_admin,
        )
        return content

    async def delete(self, content_id: UUID, actor: Actor) -> None:
        """Delete content with its files, comments, slug and view counter."""
        content = await self._get(content_id)
        if not can_manage(actor, content.author_id):
            raise ForbiddenError("Not authorized to delete this content")

        if self.storage:
            video = content.video_file
            if video:
                self.storage.delete_file(video.path)
                self.storage.delete_file(video.thumbnail)
            self.storage.delete_file(content.featured_image)

        removed = await self.comments.delete_for_target(
            CommentTargetType.USER_CONTENT, content_id
        )
        await self.repository.delete(content)
        await self.slugs.release(SlugScope.USER_CONTENT, content.slug, content_id)
        await self.views.reset(VIEW_ENTITY, content_id)

        logger.info(
            "content_deleted",
            content_id=str(content_id),
            comments_removed=removed,
            by_admin=actor.is_admin,
        )

    async def toggle_like(self, content_id: UUID, actor: Actor) -> LikeToggle:
        toggle = await self.repository.toggle_like(content_id, actor.id)
        if toggle is None:
            raise NotFoundError("Content not found")
        return toggle

    async def add_comment(
        self,
        content_id: UUID,
        actor: Actor,
        text: str,
        parent_id: UUID | None = None,
    ) -> tuple[Comment, int]:
        """Comment on content. New comments wait for approval.

        Returns:
            The comment and the current approved comment count
        """
        comment = await self.comments.create_comment(
            actor=actor,
            target_type=CommentTargetType.USER_CONTENT,
            target_id=content_id,
            content=text,
            parent_id=parent_id,
        )
        count = await self.comments.count_approved(
            CommentTargetType.USER_CONTENT, content_id
        )
        return comment, count

    async def list_comments(
        self,
        content_id: UUID,
        page: int = 1,
        limit: int = 10,
        viewer: Actor | None = None,
    ) -> CommentListResponse:
        return await self.comments.list_for_target(
            CommentTargetType.USER_CONTENT,
            content_id,
            page=page,
            limit=limit,
            viewer=viewer,
        )

    # ==========================================================================
    # Public reads
    # ==========================================================================

    async def get_public_by_slug(
        self, slug: str, viewer: Actor | None = None
    ) -> UserContentResponse:
        """Fetch publicly visible content and count one view."""
        content_id = await self.slugs.resolve(SlugScope.USER_CONTENT, slug)
        content = await self.repository.get(content_id) if content_id else None
        if content is None or not content.is_public:
            raise NotFoundError("Content not found")

        await self.views.increment(VIEW_ENTITY, content.content_id)
        return await self.present(content, viewer)

    async def list_public(
        self,
        page: int = 1,
        limit: int = 12,
        category: ContentCategory | None = None,
        content_type: ContentType | None = None,
        featured: bool | None = None,
        author_id: UUID | None = None,
        viewer: Actor | None = None,
    ) -> UserContentListResponse:
        """Approved and published content, most recently published first."""
        contents = await self.repository.list_by_status(
            ContentStatus.APPROVED, ContentStatus.PUBLISHED
        )
        if category:
            contents = [c for c in contents if c.category == category]
        if content_type:
            contents = [c for c in contents if c.content_type == content_type]
        if featured:
            contents = [c for c in contents if c.featured]
        if author_id:
            contents = [c for c in contents if c.author_id == author_id]
        contents.sort(
            key=lambda c: (c.published_at or c.created_at, c.created_at), reverse=True
        )
        return await self._present_page(contents, page, limit, viewer)

    async def list_own(
        self,
        actor: Actor,
        page: int = 1,
        limit: int = 10,
        status: ContentStatus | None = None,
    ) -> UserContentListResponse:
        """The caller's submissions in any state, newest first."""
        contents = await self.repository.list_by_author(actor.id)
        if status is not None:
            contents = [c for c in contents if c.status == status]
        contents.sort(key=lambda c: c.created_at, reverse=True)
        return await self._present_page(contents, page, limit, actor)

    # ==========================================================================
    # Moderation
    # ==========================================================================

    async def _transition(
        self, content: UserContent, expected_status: ContentStatus, message: str
    ) -> None:
        if not await self.repository.transition(content, expected_status):
            raise InvalidStateError(message)

    async def list_pending(self, actor: Actor) -> PendingContentResponse:
        _require_admin(actor)
        contents = await self.repository.list_by_status(ContentStatus.PENDING)
        return PendingContentResponse(
            content=[await self.present(c, actor) for c in contents],
            count=len(contents),
        )

    async def approve(
        self,
        content_id: UUID,
        actor: Actor,
        notes: str = "",
        featured: bool = False,
    ) -> UserContent:
        _require_admin(actor)
        content = await self._get(content_id)
        moderation.approve(content, actor.id, notes)
        if featured:
            content.featured = True
        await self._transition(
            content, ContentStatus.PENDING, "Only pending content can be approved"
        )
        logger.info(
            "content_approved",
            content_id=str(content_id),
            moderator_id=str(actor.id),
            featured=content.featured,
        )
        return content

    async def reject(self, content_id: UUID, actor: Actor, notes: str) -> UserContent:
        _require_admin(actor)
        content = await self._get(content_id)
        moderation.reject(content, actor.id, notes)
        await self._transition(
            content, ContentStatus.PENDING, "Only pending content can be rejected"
        )
        logger.info(
            "content_rejected",
            content_id=str(content_id),
            moderator_id=str(actor.id),
        )
        return content

    async def publish(self, content_id: UUID, actor: Actor) -> UserContent:
        _require_admin(actor)
        content = await self._get(content_id)
        moderation.publish(content, actor.id)
        await self._transition(
            content, ContentStatus.APPROVED, "Only approved content can be published"
        )
        logger.info(
            "content_published",
            content_id=str(content_id),
            moderator_id=str(actor.id),
        )
        return content

    async def stats(self, actor: Actor) -> ModerationStatsResponse:
        """Counts per state; type and featured counts cover visible content."""
        _require_admin(actor)
        by_status = {
            content_status: await self.repository.list_by_status(content_status)
            for content_status in (
                ContentStatus.PENDING,
                ContentStatus.APPROVED,
                ContentStatus.REJECTED,
                ContentStatus.PUBLISHED,
            )
        }
        visible = by_status[ContentStatus.APPROVED] + by_status[ContentStatus.PUBLISHED]
        counts = {s: len(items) for s, items in by_status.items()}
        return ModerationStatsResponse(
            pending=counts[ContentStatus.PENDING],
            approved=counts[ContentStatus.APPROVED],
            rejected=counts[ContentStatus.REJECTED],
            published=counts[ContentStatus.PUBLISHED],
            text_content=sum(1 for c in visible if c.content_type == ContentType.TEXT),
            video_content=sum(
                1 for c in visible if c.content_type == ContentType.VIDEO
            ),
            featured=sum(1 for c in visible if c.featured),
            total=counts[ContentStatus.APPROVED]
            + counts[ContentStatus.REJECTED]
            + counts[ContentStatus.PUBLISHED],
        )
