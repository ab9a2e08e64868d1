"""inkpress API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkpress.categories.repository import CategoryRepository
from inkpress.categories.router import router as categories_router
from inkpress.categories.service import CategoryService
from inkpress.comments.models import CommentTargetType
from inkpress.comments.repository import CommentRepository
from inkpress.comments.router import router as comments_router
from inkpress.comments.service import CommentService
from inkpress.comments.targets import CommentTargetResolver
from inkpress.config import Settings, get_settings
from inkpress.core.context import get_request_id
from inkpress.core.database import init_async_cassandra, shutdown_async_cassandra
from inkpress.core.exceptions import DomainError, error_body
from inkpress.core.logging import configure_structlog, get_logger
from inkpress.core.middleware import RequestContextMiddleware
from inkpress.core.redis import init_redis, shutdown_redis
from inkpress.engagement.slugs import SlugRegistry
from inkpress.engagement.views import ViewCounter
from inkpress.health.router import router as health_router
from inkpress.posts.repository import PostRepository
from inkpress.posts.router import router as posts_router
from inkpress.posts.service import PostService
from inkpress.storage.dependencies import get_storage_service
from inkpress.storage.router import router as storage_router
from inkpress.user_content.admin_router import router as moderation_router
from inkpress.user_content.repository import UserContentRepository
from inkpress.user_content.router import router as user_content_router
from inkpress.user_content.service import UserContentService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def build_services(
    app: FastAPI, session: Any, settings: Settings, redis: Any = None
) -> None:
    """Wire repositories and services onto ``app.state``."""
    keyspace = settings.cassandra_keyspace

    posts = PostRepository(session, keyspace)
    user_content = UserContentRepository(session, keyspace)
    slugs = SlugRegistry(session, keyspace, max_attempts=settings.slug_max_attempts)
    views = ViewCounter(session, keyspace)
    storage = get_storage_service(settings)

    comment_service = CommentService(
        CommentRepository(session, keyspace),
        targets={
            CommentTargetType.POST: CommentTargetResolver(posts),
            CommentTargetType.USER_CONTENT: CommentTargetResolver(user_content),
        },
        redis=redis,
        cache_ttl_seconds=settings.comment_cache_ttl_seconds,
    )
    category_service = CategoryService(
        CategoryRepository(session, keyspace),
        count_published_posts=posts.count_published_in_category,
    )

    app.state.comment_service = comment_service
    app.state.category_service = category_service
    app.state.post_service = PostService(
        posts,
        comments=comment_service,
        categories=category_service,
        slugs=slugs,
        views=views,
        storage=storage,
        words_per_minute=settings.reading_words_per_minute,
    )
    app.state.user_content_service = UserContentService(
        user_content,
        comments=comment_service,
        slugs=slugs,
        views=views,
        storage=storage,
        words_per_minute=settings.reading_words_per_minute,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Redis only backs the comment cache
    app.state.redis = None
    try:
        app.state.redis = await init_redis()
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - comment cache disabled",
        )

    try:
        session = await init_async_cassandra()
        build_services(app, session, settings, redis=app.state.redis)
        logger.info("services_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def _request_id(request: Request) -> str | None:
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return get_request_id()


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure is answered with the same JSON error body."""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> ORJSONResponse:
        logger.info(
            "domain_error",
            code=exc.code,
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=error_body(
                exc.message, exc.status_code, _request_id(request), exc.errors
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=error_body(message, exc.status_code, _request_id(request)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        errors = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                "Validation failed",
                status.HTTP_400_BAD_REQUEST,
                _request_id(request),
                errors,
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Log the cause; the caller only gets a generic message."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "An unexpected error occurred. Please try again later.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _request_id(request),
            ),
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug stays off so Starlette never renders tracebacks
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Blogging platform API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    for router in (
        posts_router,
        categories_router,
        comments_router,
        user_content_router,
        moderation_router,
        storage_router,
    ):
        app.include_router(router, prefix=settings.api_prefix)

    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        return {
            "message": "inkpress API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
