"""Shared fixtures: actors, in-memory services and an API client."""

import os


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_REQUESTS", "false")

from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from inkpress.auth.permissions import Actor, UserRole  # noqa: E402
from inkpress.auth.security import create_access_token  # noqa: E402
from inkpress.categories.service import CategoryService  # noqa: E402
from inkpress.comments.models import CommentTargetType  # noqa: E402
from inkpress.comments.service import CommentService  # noqa: E402
from inkpress.comments.targets import CommentTargetResolver  # noqa: E402
from inkpress.posts.service import PostService  # noqa: E402
from inkpress.user_content.service import UserContentService  # noqa: E402

from tests.fakes import (  # noqa: E402
    FakeCategoryRepository,
    FakeCommentRepository,
    FakePostRepository,
    FakeSlugRegistry,
    FakeUserContentRepository,
    FakeViewCounter,
    RecordingStorage,
)


# ==============================================================================
# Actors
# ==============================================================================


@pytest.fixture
def author() -> Actor:
    return Actor(id=uuid4(), display_name="Ada Author", email="ada@example.com")


@pytest.fixture
def reader() -> Actor:
    return Actor(id=uuid4(), display_name="Rita Reader", email="rita@example.com")


@pytest.fixture
def admin() -> Actor:
    return Actor(
        id=uuid4(),
        role=UserRole.ADMIN,
        display_name="Morgan Admin",
        email="admin@example.com",
    )


def bearer(actor: Actor) -> dict[str, str]:
    token = create_access_token(
        {
            "sub": str(actor.id),
            "role": actor.role.value,
            "name": actor.display_name,
            "email": actor.email,
        }
    )
    return {"Authorization": f"Bearer {token}"}


# ==============================================================================
# Stores
# ==============================================================================


@pytest.fixture
def comment_repo() -> FakeCommentRepository:
    return FakeCommentRepository()


@pytest.fixture
def content_repo() -> FakeUserContentRepository:
    return FakeUserContentRepository()


@pytest.fixture
def post_repo() -> FakePostRepository:
    return FakePostRepository()


@pytest.fixture
def category_repo() -> FakeCategoryRepository:
    return FakeCategoryRepository()


@pytest.fixture
def slugs() -> FakeSlugRegistry:
    return FakeSlugRegistry()


@pytest.fixture
def views() -> FakeViewCounter:
    return FakeViewCounter()


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


# ==============================================================================
# Services
# ==============================================================================


@pytest.fixture
def comment_service(comment_repo, post_repo, content_repo) -> CommentService:
    return CommentService(
        comment_repo,
        targets={
            CommentTargetType.POST: CommentTargetResolver(post_repo),
            CommentTargetType.USER_CONTENT: CommentTargetResolver(content_repo),
        },
    )


@pytest.fixture
def category_service(category_repo, post_repo) -> CategoryService:
    return CategoryService(
        category_repo, count_published_posts=post_repo.count_published_in_category
    )


@pytest.fixture
def post_service(
    post_repo, comment_service, category_service, slugs, views, storage
) -> PostService:
    return PostService(
        post_repo,
        comments=comment_service,
        categories=category_service,
        slugs=slugs,
        views=views,
        storage=storage,
    )


@pytest.fixture
def user_content_service(
    content_repo, comment_service, slugs, views, storage
) -> UserContentService:
    return UserContentService(
        content_repo,
        comments=comment_service,
        slugs=slugs,
        views=views,
        storage=storage,
    )


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def app(comment_service, category_service, post_service, user_content_service):
    from inkpress.main import create_app

    application = create_app()
    application.state.comment_service = comment_service
    application.state.category_service = category_service
    application.state.post_service = post_service
    application.state.user_content_service = user_content_service
    return application


@pytest.fixture
def client(app) -> TestClient:
    """Client without lifespan: no Cassandra or Redis is contacted."""
    return TestClient(app)
