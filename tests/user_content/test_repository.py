"""Tests for UserContentRepository against a mocked Cassandra session."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from inkpress.user_content import repository as repository_module
from inkpress.user_content.models import (
    ContentCategory,
    ContentStatus,
    ContentType,
    UserContent,
    create_user_content,
)
from inkpress.user_content.repository import UserContentRepository


class RecordingBatch:
    """Stands in for ``BatchStatement`` and keeps what was added."""

    def __init__(self, batch_type=None) -> None:
        self.statements: list[tuple[str, list]] = []

    def add(self, statement, parameters=None) -> None:
        self.statements.append((statement, parameters))


def make_content(status: ContentStatus = ContentStatus.PENDING) -> UserContent:
    content = create_user_content(
        title="My Trip",
        slug="my-trip",
        description="Two weeks on the road",
        content_type=ContentType.TEXT,
        author_id=uuid4(),
        author_name="Ada Author",
        author_email="ada@example.com",
        category=ContentCategory.TRAVEL,
        text_content="words " * 50,
    )
    content.status = status
    return content


def make_session() -> Mock:
    session = Mock()
    session.prepare = Mock(side_effect=lambda cql: cql)
    session.aexecute = AsyncMock()
    return session


@pytest.fixture(autouse=True)
def recording_batches(monkeypatch) -> None:
    monkeypatch.setattr(repository_module, "BatchStatement", RecordingBatch)


class TestListByStatus:
    @pytest.mark.asyncio
    async def test_stale_index_entries_are_skipped(self) -> None:
        pending = make_content()
        moved_on = make_content(ContentStatus.APPROVED)
        index = {"pending": [moved_on.content_id, pending.content_id]}
        rows = {c.content_id: c for c in (pending, moved_on)}

        session = make_session()
        session.aexecute.side_effect = lambda statement, params: [
            SimpleNamespace(content_id=cid) for cid in index.get(params[0], [])
        ]
        repo = UserContentRepository(session, "ks")
        repo.get_many = AsyncMock(
            side_effect=lambda ids: [rows[i] for i in ids if i in rows]
        )

        found = await repo.list_by_status(ContentStatus.PENDING)

        assert [c.content_id for c in found] == [pending.content_id]

    @pytest.mark.asyncio
    async def test_item_indexed_under_two_statuses_is_listed_once(self) -> None:
        published = make_content(ContentStatus.PUBLISHED)
        index = {
            "approved": [published.content_id],
            "published": [published.content_id],
        }

        session = make_session()
        session.aexecute.side_effect = lambda statement, params: [
            SimpleNamespace(content_id=cid) for cid in index.get(params[0], [])
        ]
        repo = UserContentRepository(session, "ks")
        repo.get_many = AsyncMock(
            side_effect=lambda ids: [published for i in ids if i == published.content_id]
        )

        found = await repo.list_by_status(
            ContentStatus.APPROVED, ContentStatus.PUBLISHED
        )

        assert len(found) == 1


class TestUpdate:
    @pytest.mark.asyncio
    async def test_edit_is_conditional_on_previous_status(self) -> None:
        content = make_content(ContentStatus.PENDING)
        session = make_session()
        session.aexecute.return_value = Mock(
            one=Mock(return_value=SimpleNamespace(applied=True))
        )
        repo = UserContentRepository(session, "ks")

        assert await repo.update(content, ContentStatus.REJECTED) is True

        statement, params = session.aexecute.await_args_list[0].args
        assert "IF status = ?" in statement
        assert params[-2:] == [content.content_id, "rejected"]
        assert "moderated_by" not in statement
        assert "published_at" not in statement

        batch = session.aexecute.await_args_list[1].args[0]
        moved = [params for statement, params in batch.statements]
        assert ["rejected", content.created_at, content.content_id] in moved
        assert ["pending", content.created_at, content.content_id] in moved

    @pytest.mark.asyncio
    async def test_lost_condition_leaves_indexes_alone(self) -> None:
        content = make_content(ContentStatus.PENDING)
        session = make_session()
        session.aexecute.return_value = Mock(
            one=Mock(return_value=SimpleNamespace(applied=False, status="approved"))
        )
        repo = UserContentRepository(session, "ks")

        assert await repo.update(content, ContentStatus.PENDING) is False
        assert session.aexecute.await_count == 1
