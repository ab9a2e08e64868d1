"""Tests for PostService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from inkpress.auth.permissions import Actor
from inkpress.categories.models import Category, create_category
from inkpress.comments.models import CommentTargetType
from inkpress.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from inkpress.engagement.models import SlugScope
from inkpress.posts.models import PostSort, PostStatus
from inkpress.posts.schemas import CreatePostRequest, UpdatePostRequest
from inkpress.posts.service import VIEW_ENTITY, PostService


@pytest.fixture
def category(category_repo) -> Category:
    category = create_category("Engineering", "How we build")
    category_repo.rows[category.category_id] = category
    return category


def post_request(title: str = "Hello World", **overrides) -> CreatePostRequest:
    payload = {"title": title, "content": "lorem " * 250, "tags": ["Python", " web "]}
    payload.update(overrides)
    return CreatePostRequest(**payload)


class TestCreate:
    @pytest.mark.asyncio
    async def test_draft_by_default(
        self, post_service: PostService, post_repo, author: Actor
    ) -> None:
        post = await post_service.create(author, post_request())

        stored = post_repo.rows[post.post_id]
        assert stored.status == PostStatus.DRAFT
        assert stored.published_at is None
        assert stored.slug == "hello-world"
        assert stored.tags == ["python", "web"]
        assert stored.reading_time == 2
        assert stored.author_name == "Ada Author"

    @pytest.mark.asyncio
    async def test_created_published(
        self, post_service: PostService, author: Actor
    ) -> None:
        post = await post_service.create(author, post_request(status="published"))

        assert post.published_at is not None

    @pytest.mark.asyncio
    async def test_unknown_category(
        self, post_service: PostService, slugs, author: Actor
    ) -> None:
        with pytest.raises(ValidationError, match="Category not found"):
            await post_service.create(author, post_request(category=str(uuid4())))
        assert slugs.claims == {}

    @pytest.mark.asyncio
    async def test_published_post_counts_in_category(
        self, post_service: PostService, category_repo, category: Category, author
    ) -> None:
        await post_service.create(
            author, post_request(category=str(category.category_id), status="published")
        )
        await post_service.create(
            author, post_request("Draft", category=str(category.category_id))
        )

        assert category_repo.rows[category.category_id].post_count == 1


class TestUpdate:
    @pytest.mark.asyncio
    async def test_published_at_is_set_once(
        self, post_service: PostService, author: Actor
    ) -> None:
        post = await post_service.create(author, post_request())

        published = await post_service.update(
            post.post_id, author, UpdatePostRequest(status="published")
        )
        first = published.published_at
        await post_service.update(
            post.post_id, author, UpdatePostRequest(status="archived")
        )
        again = await post_service.update(
            post.post_id, author, UpdatePostRequest(status="published")
        )

        assert first is not None
        assert again.published_at == first

    @pytest.mark.asyncio
    async def test_retitle_and_reading_time(
        self, post_service: PostService, slugs, author: Actor
    ) -> None:
        post = await post_service.create(author, post_request())

        updated = await post_service.update(
            post.post_id,
            author,
            UpdatePostRequest(title="Goodbye World", content="short text"),
        )

        assert updated.slug == "goodbye-world"
        assert updated.reading_time == 1
        assert await slugs.resolve(SlugScope.POST, "hello-world") is None

    @pytest.mark.asyncio
    async def test_stranger_cannot_update(
        self, post_service: PostService, author: Actor, reader: Actor
    ) -> None:
        post = await post_service.create(author, post_request())
        with pytest.raises(ForbiddenError, match="Not authorized to update this post"):
            await post_service.update(post.post_id, reader, UpdatePostRequest(title="x"))

    @pytest.mark.asyncio
    async def test_admin_can_update(
        self, post_service: PostService, author: Actor, admin: Actor
    ) -> None:
        post = await post_service.create(author, post_request())
        updated = await post_service.update(
            post.post_id, admin, UpdatePostRequest(featured=True)
        )
        assert updated.featured is True

    @pytest.mark.asyncio
    async def test_moving_category_recounts_both(
        self,
        post_service: PostService,
        category_repo,
        category: Category,
        author: Actor,
    ) -> None:
        other = create_category("Design")
        category_repo.rows[other.category_id] = other
        post = await post_service.create(
            author, post_request(category=str(category.category_id), status="published")
        )

        await post_service.update(
            post.post_id, author, UpdatePostRequest(category=str(other.category_id))
        )

        assert category_repo.rows[category.category_id].post_count == 0
        assert category_repo.rows[other.category_id].post_count == 1

    @pytest.mark.asyncio
    async def test_category_can_be_cleared(
        self,
        post_service: PostService,
        post_repo,
        category_repo,
        category: Category,
        author: Actor,
    ) -> None:
        post = await post_service.create(
            author, post_request(category=str(category.category_id), status="published")
        )

        await post_service.update(
            post.post_id, author, UpdatePostRequest(category=None)
        )

        assert post_repo.rows[post.post_id].category_id is None
        assert category_repo.rows[category.category_id].post_count == 0

    @pytest.mark.asyncio
    async def test_omitted_category_is_kept(
        self, post_service: PostService, post_repo, category: Category, author: Actor
    ) -> None:
        post = await post_service.create(
            author, post_request(category=str(category.category_id))
        )

        await post_service.update(post.post_id, author, UpdatePostRequest(featured=True))

        assert post_repo.rows[post.post_id].category_id == category.category_id

    @pytest.mark.asyncio
    async def test_failed_save_releases_new_slug(
        self, post_service: PostService, post_repo, slugs, author: Actor
    ) -> None:
        post = await post_service.create(author, post_request())
        post_repo.save = AsyncMock(side_effect=RuntimeError("cluster down"))

        with pytest.raises(RuntimeError):
            await post_service.update(
                post.post_id, author, UpdatePostRequest(title="Renamed")
            )

        assert await slugs.resolve(SlugScope.POST, "renamed") is None
        assert await slugs.resolve(SlugScope.POST, "hello-world") == post.post_id


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_cascades(
        self,
        post_service: PostService,
        comment_service,
        post_repo,
        comment_repo,
        slugs,
        views,
        storage,
        category_repo,
        category: Category,
        author: Actor,
        reader: Actor,
    ) -> None:
        post = await post_service.create(
            author,
            post_request(
                status="published",
                category=str(category.category_id),
                featured_image="images/hero.png",
            ),
        )
        await post_service.get_by_slug(post.slug)
        await comment_service.create_comment(reader, CommentTargetType.POST, post.post_id, "First!")

        await post_service.delete(post.post_id, author)

        assert post_repo.rows == {}
        assert comment_repo.rows == {}
        assert slugs.claims == {}
        assert (VIEW_ENTITY, post.post_id) not in views.counts
        assert storage.deleted == ["images/hero.png"]
        assert category_repo.rows[category.category_id].post_count == 0

    @pytest.mark.asyncio
    async def test_missing_post(self, post_service: PostService, author: Actor) -> None:
        with pytest.raises(NotFoundError):
            await post_service.delete(uuid4(), author)


class TestReads:
    @pytest.mark.asyncio
    async def test_drafts_are_not_public(
        self, post_service: PostService, author: Actor
    ) -> None:
        post = await post_service.create(author, post_request())
        with pytest.raises(NotFoundError):
            await post_service.get_by_slug(post.slug)

    @pytest.mark.asyncio
    async def test_get_by_slug_counts_views(
        self, post_service: PostService, author: Actor
    ) -> None:
        post = await post_service.create(author, post_request(status="published"))

        await post_service.get_by_slug(post.slug)
        response = await post_service.get_by_slug(post.slug, viewer=author)

        assert response.views == 2
        assert response.content is not None

    @pytest.mark.asyncio
    async def test_listing_filters(
        self,
        post_service: PostService,
        category: Category,
        author: Actor,
        reader: Actor,
    ) -> None:
        in_category = await post_service.create(
            author,
            post_request("A", status="published", category=str(category.category_id)),
        )
        tagged = await post_service.create(
            reader, post_request("B", status="published", tags="news", featured=True)
        )
        await post_service.create(author, post_request("C"))

        everything = await post_service.list_posts()
        by_category = await post_service.list_posts(category=category.slug)
        by_tag = await post_service.list_posts(tag="News")
        by_author = await post_service.list_posts(author_id=reader.id)
        unknown_category = await post_service.list_posts(category="missing")

        assert everything.pagination.total_items == 2
        assert everything.posts[0].content is None
        assert [p.id for p in by_category.posts] == [in_category.post_id]
        assert [p.id for p in by_tag.posts] == [tagged.post_id]
        assert [p.id for p in by_author.posts] == [tagged.post_id]
        assert unknown_category.pagination.total_items == 2

    @pytest.mark.asyncio
    async def test_status_all_shows_own_drafts(
        self, post_service: PostService, author: Actor, reader: Actor
    ) -> None:
        await post_service.create(author, post_request("Mine", status="published"))
        await post_service.create(author, post_request("Draft"))

        own = await post_service.list_posts(
            status="all", author_id=author.id, viewer=author
        )
        someone_else = await post_service.list_posts(
            status="all", author_id=author.id, viewer=reader
        )

        assert own.pagination.total_items == 2
        assert someone_else.pagination.total_items == 1

    @pytest.mark.asyncio
    async def test_sorting(
        self,
        post_service: PostService,
        post_repo,
        views,
        author: Actor,
        reader: Actor,
    ) -> None:
        old = await post_service.create(author, post_request("Old", status="published"))
        new = await post_service.create(author, post_request("New", status="published"))
        base = datetime(2024, 1, 1, tzinfo=UTC)
        post_repo.rows[old.post_id].published_at = base
        post_repo.rows[new.post_id].published_at = base + timedelta(days=1)
        await post_service.toggle_like(old.post_id, reader)
        await views.increment(VIEW_ENTITY, old.post_id)

        def ids(listing):
            return [p.id for p in listing.posts]

        assert ids(await post_service.list_posts()) == [new.post_id, old.post_id]
        assert ids(await post_service.list_posts(sort=PostSort.OLDEST)) == [
            old.post_id,
            new.post_id,
        ]
        assert ids(await post_service.list_posts(sort=PostSort.LIKES))[0] == old.post_id
        assert ids(await post_service.list_posts(sort=PostSort.VIEWS))[0] == old.post_id

    @pytest.mark.asyncio
    async def test_featured(
        self, post_service: PostService, author: Actor
    ) -> None:
        featured = await post_service.create(
            author, post_request("Star", status="published", featured=True)
        )
        await post_service.create(author, post_request("Plain", status="published"))
        await post_service.create(author, post_request("Hidden", featured=True))

        result = await post_service.list_featured()

        assert [p.id for p in result] == [featured.post_id]

    @pytest.mark.asyncio
    async def test_like_toggle(
        self, post_service: PostService, author: Actor, reader: Actor
    ) -> None:
        post = await post_service.create(author, post_request(status="published"))

        liked = await post_service.toggle_like(post.post_id, reader)
        response = await post_service.get_by_slug(post.slug, viewer=reader)

        assert liked.liked is True
        assert response.has_liked is True
        assert response.like_count == 1
