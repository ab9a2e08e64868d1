"""Tests for the comment engine.

Covers reply linkage, cascade deletion, nesting limits, approval gating,
like toggling and the first-page cache.
"""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from inkpress.auth.permissions import Actor
from inkpress.comments.models import CommentStatus, CommentTargetType
from inkpress.comments.service import CommentService
from inkpress.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from inkpress.posts.models import Post, PostStatus, create_post
from inkpress.user_content.models import (
    ContentCategory,
    ContentType,
    UserContent,
    create_user_content,
)


POST = CommentTargetType.POST
USER_CONTENT = CommentTargetType.USER_CONTENT


@pytest.fixture
def post(post_repo, author: Actor) -> Post:
    post = create_post(
        title="Threads",
        content="body",
        author_id=author.id,
        status=PostStatus.PUBLISHED,
        slug="threads",
    )
    post_repo.rows[post.post_id] = post
    return post


@pytest.fixture
def closed_post(post_repo, author: Actor) -> Post:
    post = create_post(
        title="Closed",
        content="body",
        author_id=author.id,
        status=PostStatus.PUBLISHED,
        slug="closed",
        comments_enabled=False,
    )
    post_repo.rows[post.post_id] = post
    return post


@pytest.fixture
def content(content_repo, author: Actor) -> UserContent:
    content = create_user_content(
        title="Essay",
        slug="essay",
        description="An essay",
        content_type=ContentType.TEXT,
        author_id=author.id,
        author_name=author.display_name,
        author_email=author.email,
        category=ContentCategory.ART,
        text_content="words",
    )
    content_repo.rows[content.content_id] = content
    return content


class TestCreateComment:
    @pytest.mark.asyncio
    async def test_post_comment_is_auto_approved(
        self, comment_service: CommentService, post: Post, reader: Actor
    ) -> None:
        comment = await comment_service.create_comment(
            reader, POST, post.post_id, "Nice post"
        )
        assert comment.status == CommentStatus.APPROVED
        assert comment.author_id == reader.id
        assert comment.author_name == "Rita Reader"
        assert comment.is_edited is False
        assert comment.edited_at is None

    @pytest.mark.asyncio
    async def test_user_content_comment_waits_for_approval(
        self, comment_service: CommentService, content: UserContent, reader: Actor
    ) -> None:
        comment = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "Great"
        )
        assert comment.status == CommentStatus.PENDING
        assert await comment_service.count_approved(USER_CONTENT, content.content_id) == 0

    @pytest.mark.asyncio
    async def test_missing_target(
        self, comment_service: CommentService, reader: Actor
    ) -> None:
        with pytest.raises(NotFoundError, match="Post not found"):
            await comment_service.create_comment(reader, POST, uuid4(), "Hi")
        with pytest.raises(NotFoundError, match="Content not found"):
            await comment_service.create_comment(reader, USER_CONTENT, uuid4(), "Hi")

    @pytest.mark.asyncio
    async def test_disabled_comments(
        self, comment_service: CommentService, closed_post: Post, reader: Actor
    ) -> None:
        with pytest.raises(ForbiddenError):
            await comment_service.create_comment(
                reader, POST, closed_post.post_id, "Hi"
            )

    @pytest.mark.asyncio
    async def test_reply_is_linked_to_parent(
        self, comment_service: CommentService, comment_repo, post: Post, reader: Actor
    ) -> None:
        parent = await comment_service.create_comment(reader, POST, post.post_id, "A")
        reply = await comment_service.create_comment(
            reader, POST, post.post_id, "B", parent_id=parent.comment_id
        )

        stored_parent = comment_repo.rows[parent.comment_id]
        assert stored_parent.reply_ids == [reply.comment_id]
        assert comment_repo.rows[reply.comment_id].parent_id == parent.comment_id

    @pytest.mark.asyncio
    async def test_missing_parent(
        self, comment_service: CommentService, post: Post, reader: Actor
    ) -> None:
        with pytest.raises(NotFoundError, match="Parent comment not found"):
            await comment_service.create_comment(
                reader, POST, post.post_id, "B", parent_id=uuid4()
            )

    @pytest.mark.asyncio
    async def test_parent_deleted_during_reply(
        self,
        comment_service: CommentService,
        comment_repo,
        post: Post,
        author: Actor,
        reader: Actor,
    ) -> None:
        parent = await comment_service.create_comment(author, POST, post.post_id, "A")
        insert = comment_repo.insert

        async def insert_after_parent_deleted(comment):
            await comment_service.delete_comment(parent.comment_id, author)
            return await insert(comment)

        comment_repo.insert = insert_after_parent_deleted

        with pytest.raises(NotFoundError, match="Parent comment not found"):
            await comment_service.create_comment(
                reader, POST, post.post_id, "B", parent_id=parent.comment_id
            )
        assert comment_repo.rows == {}

    @pytest.mark.asyncio
    async def test_parent_on_other_target(
        self,
        comment_service: CommentService,
        post: Post,
        content: UserContent,
        reader: Actor,
    ) -> None:
        parent = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "A"
        )
        with pytest.raises(ValidationError):
            await comment_service.create_comment(
                reader, POST, post.post_id, "B", parent_id=parent.comment_id
            )

    @pytest.mark.asyncio
    async def test_reply_to_reply_rejected(
        self, comment_service: CommentService, post: Post, reader: Actor
    ) -> None:
        parent = await comment_service.create_comment(reader, POST, post.post_id, "A")
        reply = await comment_service.create_comment(
            reader, POST, post.post_id, "B", parent_id=parent.comment_id
        )
        with pytest.raises(ValidationError, match="nested"):
            await comment_service.create_comment(
                reader, POST, post.post_id, "C", parent_id=reply.comment_id
            )


class TestUpdateComment:
    @pytest.mark.asyncio
    async def test_author_edit_marks_edited(
        self, comment_service: CommentService, comment_repo, post: Post, reader: Actor
    ) -> None:
        comment = await comment_service.create_comment(reader, POST, post.post_id, "A")
        await comment_service.update_comment(comment.comment_id, reader, "A2")

        stored = comment_repo.rows[comment.comment_id]
        assert stored.content == "A2"
        assert stored.is_edited is True
        assert stored.edited_at is not None

    @pytest.mark.asyncio
    async def test_stranger_cannot_edit(
        self, comment_service: CommentService, post: Post, reader: Actor
    ) -> None:
        comment = await comment_service.create_comment(reader, POST, post.post_id, "A")
        with pytest.raises(ForbiddenError):
            await comment_service.update_comment(
                comment.comment_id, Actor(id=uuid4()), "hijack"
            )

    @pytest.mark.asyncio
    async def test_admin_can_edit(
        self, comment_service: CommentService, post: Post, reader: Actor, admin: Actor
    ) -> None:
        comment = await comment_service.create_comment(reader, POST, post.post_id, "A")
        updated = await comment_service.update_comment(comment.comment_id, admin, "ok")
        assert updated.content == "ok"


class TestDeleteComment:
    @pytest.mark.asyncio
    async def test_cascade_removes_parent_and_replies(
        self, comment_service: CommentService, comment_repo, post: Post, reader: Actor
    ) -> None:
        parent = await comment_service.create_comment(reader, POST, post.post_id, "A")
        for i in range(3):
            await comment_service.create_comment(
                reader, POST, post.post_id, f"r{i}", parent_id=parent.comment_id
            )
        other = await comment_service.create_comment(reader, POST, post.post_id, "Z")

        removed = await comment_service.delete_comment(parent.comment_id, reader)

        assert removed == 4
        assert set(comment_repo.rows) == {other.comment_id}

    @pytest.mark.asyncio
    async def test_deleting_reply_unlinks_it(
        self, comment_service: CommentService, comment_repo, post: Post, reader: Actor
    ) -> None:
        parent = await comment_service.create_comment(reader, POST, post.post_id, "A")
        keep = await comment_service.create_comment(
            reader, POST, post.post_id, "keep", parent_id=parent.comment_id
        )
        drop = await comment_service.create_comment(
            reader, POST, post.post_id, "drop", parent_id=parent.comment_id
        )

        assert await comment_service.delete_comment(drop.comment_id, reader) == 1

        assert comment_repo.rows[parent.comment_id].reply_ids == [keep.comment_id]
        assert drop.comment_id not in comment_repo.rows

    @pytest.mark.asyncio
    async def test_stranger_cannot_delete(
        self, comment_service: CommentService, post: Post, reader: Actor
    ) -> None:
        comment = await comment_service.create_comment(reader, POST, post.post_id, "A")
        with pytest.raises(ForbiddenError):
            await comment_service.delete_comment(comment.comment_id, Actor(id=uuid4()))

    @pytest.mark.asyncio
    async def test_missing_comment(
        self, comment_service: CommentService, reader: Actor
    ) -> None:
        with pytest.raises(NotFoundError):
            await comment_service.delete_comment(uuid4(), reader)

    @pytest.mark.asyncio
    async def test_delete_for_target(
        self,
        comment_service: CommentService,
        comment_repo,
        post: Post,
        content: UserContent,
        reader: Actor,
    ) -> None:
        await comment_service.create_comment(reader, POST, post.post_id, "A")
        await comment_service.create_comment(reader, POST, post.post_id, "B")
        survivor = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "C"
        )

        assert await comment_service.delete_for_target(POST, post.post_id) == 2
        assert set(comment_repo.rows) == {survivor.comment_id}


class TestLikesAndApproval:
    @pytest.mark.asyncio
    async def test_toggle_like_twice(
        self, comment_service: CommentService, post: Post, reader: Actor, admin: Actor
    ) -> None:
        comment = await comment_service.create_comment(reader, POST, post.post_id, "A")

        liked = await comment_service.toggle_like(comment.comment_id, admin)
        unliked = await comment_service.toggle_like(comment.comment_id, admin)

        assert (liked.liked, liked.like_count) == (True, 1)
        assert (unliked.liked, unliked.like_count) == (False, 0)

    @pytest.mark.asyncio
    async def test_like_missing_comment(
        self, comment_service: CommentService, reader: Actor
    ) -> None:
        with pytest.raises(NotFoundError):
            await comment_service.toggle_like(uuid4(), reader)

    @pytest.mark.asyncio
    async def test_approval_is_admin_only(
        self, comment_service: CommentService, content: UserContent, reader: Actor
    ) -> None:
        comment = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "A"
        )
        with pytest.raises(ForbiddenError):
            await comment_service.set_approval(comment.comment_id, reader, True)

    @pytest.mark.asyncio
    async def test_approve_then_disapprove(
        self,
        comment_service: CommentService,
        content: UserContent,
        reader: Actor,
        admin: Actor,
    ) -> None:
        comment = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "A"
        )

        approved = await comment_service.set_approval(comment.comment_id, admin, True)
        assert approved.status == CommentStatus.APPROVED
        assert await comment_service.count_approved(USER_CONTENT, content.content_id) == 1

        rejected = await comment_service.set_approval(comment.comment_id, admin, False)
        assert rejected.status == CommentStatus.REJECTED
        assert await comment_service.count_approved(USER_CONTENT, content.content_id) == 0

    @pytest.mark.asyncio
    async def test_approval_does_not_cascade(
        self,
        comment_service: CommentService,
        comment_repo,
        content: UserContent,
        reader: Actor,
        admin: Actor,
    ) -> None:
        parent = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "A"
        )
        reply = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "B", parent_id=parent.comment_id
        )

        await comment_service.set_approval(parent.comment_id, admin, True)

        assert comment_repo.rows[reply.comment_id].status == CommentStatus.PENDING


class TestListing:
    @pytest.mark.asyncio
    async def test_public_listing_shows_approved_threads(
        self,
        comment_service: CommentService,
        content: UserContent,
        reader: Actor,
        admin: Actor,
    ) -> None:
        visible = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "visible"
        )
        await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "hidden"
        )
        shown_reply = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "r1", parent_id=visible.comment_id
        )
        await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "r2", parent_id=visible.comment_id
        )
        await comment_service.set_approval(visible.comment_id, admin, True)
        await comment_service.set_approval(shown_reply.comment_id, admin, True)

        page = await comment_service.list_for_target(USER_CONTENT, content.content_id)

        assert [c.id for c in page.comments] == [visible.comment_id]
        assert [r.id for r in page.comments[0].replies] == [shown_reply.comment_id]
        assert page.comments[0].reply_count == 2
        assert page.pagination.total_items == 1

    @pytest.mark.asyncio
    async def test_newest_first_with_pagination(
        self, comment_service: CommentService, comment_repo, post: Post, reader: Actor
    ) -> None:
        created = [
            await comment_service.create_comment(reader, POST, post.post_id, f"c{i}")
            for i in range(5)
        ]
        base = datetime(2024, 1, 1, tzinfo=UTC)
        for i, comment in enumerate(created):
            comment_repo.rows[comment.comment_id].created_at = base + timedelta(minutes=i)

        first = await comment_service.list_for_target(POST, post.post_id, page=1, limit=2)
        last = await comment_service.list_for_target(POST, post.post_id, page=3, limit=2)

        assert first.comments[0].id == created[-1].comment_id
        assert first.pagination.total == 3
        assert first.pagination.has_next is True
        assert last.pagination.has_prev is True
        assert [c.id for c in last.comments] == [created[0].comment_id]

    @pytest.mark.asyncio
    async def test_has_liked_per_viewer(
        self, comment_service: CommentService, post: Post, reader: Actor, admin: Actor
    ) -> None:
        comment = await comment_service.create_comment(reader, POST, post.post_id, "A")
        await comment_service.toggle_like(comment.comment_id, reader)

        mine = await comment_service.list_for_target(POST, post.post_id, viewer=reader)
        theirs = await comment_service.list_for_target(POST, post.post_id, viewer=admin)

        assert mine.comments[0].has_liked is True
        assert theirs.comments[0].has_liked is False
        assert theirs.comments[0].like_count == 1

    @pytest.mark.asyncio
    async def test_listing_unknown_target(self, comment_service: CommentService) -> None:
        with pytest.raises(NotFoundError):
            await comment_service.list_for_target(POST, uuid4())

    @pytest.mark.asyncio
    async def test_admin_listing_filters(
        self,
        comment_service: CommentService,
        post: Post,
        content: UserContent,
        reader: Actor,
        admin: Actor,
    ) -> None:
        await comment_service.create_comment(reader, POST, post.post_id, "Spam offer")
        pending = await comment_service.create_comment(
            reader, USER_CONTENT, content.content_id, "Pending note"
        )

        everything = await comment_service.list_all(admin)
        unapproved = await comment_service.list_all(admin, approved=False)
        spam = await comment_service.list_all(admin, search="SPAM")

        assert everything.pagination.total_items == 2
        assert [c.id for c in unapproved.comments] == [pending.comment_id]
        assert [c.content for c in spam.comments] == ["Spam offer"]

    @pytest.mark.asyncio
    async def test_admin_listing_requires_admin(
        self, comment_service: CommentService, reader: Actor
    ) -> None:
        with pytest.raises(ForbiddenError):
            await comment_service.list_all(reader)


class TestFirstPageCache:
    @pytest.fixture
    def redis(self) -> AsyncMock:
        redis = AsyncMock()
        redis.hget.return_value = None
        return redis

    @pytest.fixture
    def cached_service(self, comment_repo, comment_service, redis) -> CommentService:
        return CommentService(comment_repo, comment_service.targets, redis=redis)

    @pytest.mark.asyncio
    async def test_anonymous_first_page_is_stored(
        self, cached_service: CommentService, redis: AsyncMock, post: Post, reader: Actor
    ) -> None:
        await cached_service.create_comment(reader, POST, post.post_id, "A")

        await cached_service.list_for_target(POST, post.post_id, limit=10)

        key, field, payload = redis.hset.await_args.args
        assert key == f"comments:post:{post.post_id}:page1"
        assert field == "10"
        assert json.loads(payload)["pagination"]["total_items"] == 1
        redis.expire.assert_awaited_with(key, 300)

    @pytest.mark.asyncio
    async def test_cache_hit_skips_repository(
        self,
        cached_service: CommentService,
        comment_repo,
        redis: AsyncMock,
        post: Post,
        reader: Actor,
    ) -> None:
        await cached_service.create_comment(reader, POST, post.post_id, "A")
        await cached_service.list_for_target(POST, post.post_id)
        redis.hget.return_value = redis.hset.await_args.args[2]
        comment_repo.rows.clear()

        page = await cached_service.list_for_target(POST, post.post_id)

        assert len(page.comments) == 1

    @pytest.mark.asyncio
    async def test_viewer_pages_are_not_cached(
        self, cached_service: CommentService, redis: AsyncMock, post: Post, reader: Actor
    ) -> None:
        await cached_service.list_for_target(POST, post.post_id, viewer=reader)
        await cached_service.list_for_target(POST, post.post_id, page=2)

        redis.hget.assert_not_awaited()
        redis.hset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_writes_invalidate(
        self, cached_service: CommentService, redis: AsyncMock, post: Post, reader: Actor
    ) -> None:
        comment = await cached_service.create_comment(reader, POST, post.post_id, "A")
        await cached_service.toggle_like(comment.comment_id, reader)
        await cached_service.update_comment(comment.comment_id, reader, "B")
        await cached_service.delete_comment(comment.comment_id, reader)

        key = f"comments:post:{post.post_id}:page1"
        assert [call.args for call in redis.delete.await_args_list] == [(key,)] * 4
