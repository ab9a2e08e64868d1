"""Post service layer.

Business logic for:
- Post CRUD with per-author ownership (admins may edit any post)
- Slug allocation, reading time and first-publication timestamp
- Public listing with filters and sorting, featured posts
- Views, likes and category post counts
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import structlog

from inkpress.auth.permissions import Actor, can_manage
from inkpress.comments.models import CommentTargetType
from inkpress.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from inkpress.core.pagination import paginate
from inkpress.engagement.models import LikeToggle, SlugScope
from inkpress.engagement.text import reading_time

from .models import Post, PostSort, PostStatus, create_post
from .schemas import (
    CreatePostRequest,
    PostListResponse,
    PostResponse,
    UpdatePostRequest,
)


if TYPE_CHECKING:
    from inkpress.categories.service import CategoryService
    from inkpress.comments.service import CommentService
    from inkpress.engagement.slugs import SlugRegistry
    from inkpress.engagement.views import ViewCounter
    from inkpress.storage.service import LocalFileStorage

    from .repository import PostRepository


logger = structlog.get_logger(__name__)

VIEW_ENTITY = CommentTargetType.POST.value

_PLAIN_UPDATE_FIELDS = (
    "excerpt",
    "tags",
    "featured",
    "featured_image",
    "comments_enabled",
)


class PostService:
    """Service for blog posts."""

    def __init__(
        self,
        repository: "PostRepository",
        comments: "CommentService",
        categories: "CategoryService",
        slugs: "SlugRegistry",
        views: "ViewCounter",
        storage: "LocalFileStorage | None" = None,
        words_per_minute: int = 200,
    ):
        self.repository = repository
        self.comments = comments
        self.categories = categories
        self.slugs = slugs
        self.views = views
        self.storage = storage
        self.words_per_minute = words_per_minute

    async def _get(self, post_id: UUID) -> Post:
        post = await self.repository.get(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def _check_category(self, category_id: UUID | None) -> None:
        if category_id and not await self.categories.exists(category_id):
            raise ValidationError("Category not found")

    async def _recount(self, *category_ids: UUID | None) -> None:
        for category_id in {c for c in category_ids if c}:
            await self.categories.update_post_count(category_id)

    async def present(
        self, post: Post, viewer: Actor | None = None, include_content: bool = True
    ) -> PostResponse:
        views = await self.views.get(VIEW_ENTITY, post.post_id)
        comment_count = await self.comments.count_approved(
            CommentTargetType.POST, post.post_id
        )
        return PostResponse.from_post(
            post,
            viewer,
            views=views,
            comment_count=comment_count,
            include_content=include_content,
        )

    # ==========================================================================
    # CRUD
    # ==========================================================================

    async def create(self, actor: Actor, data: CreatePostRequest) -> Post:
        """Create a post owned by ``actor``.

        Raises:
            ValidationError: the category does not exist
            ConflictError: no unique slug could be allocated
        """
        await self._check_category(data.category_id)

        post_id = uuid4()
        post = create_post(
            title=data.title,
            content=data.content,
            author_id=actor.id,
            author_name=actor.display_name,
            status=data.status,
            post_id=post_id,
            excerpt=data.excerpt,
            featured_image=data.featured_image,
            category_id=data.category_id,
            tags=data.tags,
            featured=data.featured,
            comments_enabled=data.comments_enabled,
            reading_time=reading_time(data.content, self.words_per_minute),
        )
        post.slug = await self.slugs.claim(SlugScope.POST, post.title, post_id)
        try:
            await self.repository.save(post)
        except Exception:
            await self.slugs.release(SlugScope.POST, post.slug, post_id)
            raise
        await self._recount(post.category_id)

        logger.info(
            "post_created",
            post_id=str(post_id),
            slug=post.slug,
            status=post.status.value,
            author_id=str(actor.id),
        )
        return post

    async def update(
        self, post_id: UUID, actor: Actor, data: UpdatePostRequest
    ) -> Post:
        """Apply a partial update (author or admin).

        Raises:
            NotFoundError: post does not exist
            ForbiddenError: actor is neither the author nor an admin
            ValidationError: the new category does not exist
        """
        post = await self._get(post_id)
        if not can_manage(actor, post.author_id):
            raise ForbiddenError("Not authorized to update this post")

        changes = data.model_dump(exclude_unset=True)
        if changes.get("category_id"):
            await self._check_category(data.category_id)

        previous_status = post.status
        previous_category_id = post.category_id

        for name in _PLAIN_UPDATE_FIELDS:
            if changes.get(name) is not None:
                setattr(post, name, getattr(data, name))
        # An explicit null removes the post from its category
        if "category_id" in changes:
            post.category_id = data.category_id
        if data.status:
            post.status = data.status
            post.mark_published()
        if data.content and data.content != post.content:
            post.content = data.content
            post.reading_time = reading_time(post.content, self.words_per_minute)

        old_slug = None
        if data.title and data.title != post.title:
            new_slug = await self.slugs.claim(SlugScope.POST, data.title, post_id)
            if new_slug != post.slug:
                old_slug = post.slug
            post.title = data.title
            post.slug = new_slug

        post.updated_at = datetime.now(UTC)
        try:
            await self.repository.save(post, previous_status, previous_category_id)
        except Exception:
            if old_slug:
                await self.slugs.release(SlugScope.POST, post.slug, post_id)
            raise
        if old_slug:
            await self.slugs.release(SlugScope.POST, old_slug, post_id)
        if previous_category_id != post.category_id or previous_status != post.status:
            await self._recount(previous_category_id, post.category_id)

        logger.info(
            "post_updated",
            post_id=str(post_id),
            fields=sorted(changes),
            by_admin=actor.is_admin and actor.id != post.author_id,
        )
        return post

    async def delete(self, post_id: UUID, actor: Actor) -> None:
        """Delete a post with its image, comments, slug and view counter."""
        post = await self._get(post_id)
        if not can_manage(actor, post.author_id):
            raise ForbiddenError("Not authorized to delete this post")

        if self.storage:
            self.storage.delete_file(post.featured_image)
        removed = await self.comments.delete_for_target(CommentTargetType.POST, post_id)
        await self.repository.delete(post)
        await self.slugs.release(SlugScope.POST, post.slug, post_id)
        await self.views.reset(VIEW_ENTITY, post_id)
        await self._recount(post.category_id)

        logger.info(
            "post_deleted",
            post_id=str(post_id),
            comments_removed=removed,
        )

    async def toggle_like(self, post_id: UUID, actor: Actor) -> LikeToggle:
        toggle = await self.repository.toggle_like(post_id, actor.id)
        if toggle is None:
            raise NotFoundError("Post not found")
        return toggle

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get_by_slug(self, slug: str, viewer: Actor | None = None) -> PostResponse:
        """Fetch a published post and count one view."""
        post_id = await self.slugs.resolve(SlugScope.POST, slug)
        post = await self.repository.get(post_id) if post_id else None
        if post is None or not post.is_published:
            raise NotFoundError("Post not found")

        await self.views.increment(VIEW_ENTITY, post.post_id)
        return await self.present(post, viewer)

    async def list_posts(
        self,
        page: int = 1,
        limit: int = 10,
        category: str | None = None,
        tag: str | None = None,
        author_id: UUID | None = None,
        featured: bool | None = None,
        sort: PostSort = PostSort.NEWEST,
        status: str | None = None,
        viewer: Actor | None = None,
    ) -> PostListResponse:
        """Published posts; an author asking for ``status=all`` sees all their own.

        ``category`` is a category slug; an unknown slug does not filter.
        """
        own_posts = (
            status == "all"
            and viewer is not None
            and author_id is not None
            and author_id == viewer.id
        )
        if own_posts:
            posts = await self.repository.list_by_author(author_id)
        else:
            posts = await self.repository.list_by_status(PostStatus.PUBLISHED)
            if author_id:
                posts = [p for p in posts if p.author_id == author_id]

        if category:
            found = await self.categories.get_by_slug(category)
            if found:
                posts = [p for p in posts if p.category_id == found.category_id]
        if tag:
            needle = tag.strip().lower()
            posts = [p for p in posts if needle in p.tags]
        if featured:
            posts = [p for p in posts if p.featured]

        posts = await self._sort(posts, sort)
        page_items, pagination = paginate(posts, page, limit)
        return PostListResponse(
            posts=[
                await self.present(p, viewer, include_content=False) for p in page_items
            ],
            pagination=pagination,
        )

    async def _sort(self, posts: list[Post], sort: PostSort) -> list[Post]:
        def published(post: Post) -> datetime:
            return post.published_at or post.created_at

        if sort == PostSort.OLDEST:
            return sorted(posts, key=published)
        if sort == PostSort.LIKES:
            return sorted(posts, key=lambda p: (p.like_count, published(p)), reverse=True)
        if sort == PostSort.VIEWS:
            views = await self.views.get_many(VIEW_ENTITY, [p.post_id for p in posts])
            return sorted(
                posts, key=lambda p: (views.get(p.post_id, 0), published(p)), reverse=True
            )
        return sorted(posts, key=published, reverse=True)

    async def list_featured(self, limit: int = 5) -> list[PostResponse]:
        posts = await self.repository.list_by_status(PostStatus.PUBLISHED)
        featured = await self._sort([p for p in posts if p.featured], PostSort.NEWEST)
        return [await self.present(p, include_content=False) for p in featured[:limit]]
