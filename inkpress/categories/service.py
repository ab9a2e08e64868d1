"""Category bookkeeping.

Posts reference categories by id. The service answers whether a category
exists and keeps each category's ``post_count`` equal to the number of its
published posts.
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from inkpress.auth.permissions import Actor
from inkpress.core.exceptions import ForbiddenError, NotFoundError, ValidationError

from .models import Category, create_category


if TYPE_CHECKING:
    from .repository import CategoryRepository


logger = structlog.get_logger(__name__)

PublishedPostCounter = Callable[[UUID], Awaitable[int]]


class CategoryService:
    def __init__(
        self,
        repository: "CategoryRepository",
        count_published_posts: PublishedPostCounter | None = None,
    ):
        self.repository = repository
        self.count_published_posts = count_published_posts

    async def exists(self, category_id: UUID) -> bool:
        return await self.repository.get(category_id) is not None

    async def get(self, category_id: UUID) -> Category:
        category = await self.repository.get(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def get_by_slug(self, slug: str) -> Category | None:
        for category in await self.repository.list_all():
            if category.slug == slug:
                return category
        return None

    async def list_categories(self) -> list[Category]:
        return await self.repository.list_all()

    async def create(
        self, actor: Actor, name: str, description: str = "", color: str | None = None
    ) -> Category:
        """Create a category (admin only).

        Raises:
            ForbiddenError: actor is not an admin
            ValidationError: a category with the same name or slug exists
        """
        if not actor.is_admin:
            raise ForbiddenError("Access denied. Admin privileges required.")

        category = create_category(name, description, color)
        for existing in await self.repository.list_all():
            if existing.name.lower() == name.lower() or existing.slug == category.slug:
                raise ValidationError("Category already exists")

        await self.repository.save(category)
        logger.info(
            "category_created",
            category_id=str(category.category_id),
            slug=category.slug,
        )
        return category

    async def update_post_count(self, category_id: UUID) -> None:
        """Recount the published posts of a category. Unknown ids are ignored."""
        if self.count_published_posts is None:
            return
        category = await self.repository.get(category_id)
        if category is None:
            return
        category.post_count = await self.count_published_posts(category_id)
        category.updated_at = datetime.now(UTC)
        await self.repository.set_post_count(category)
        logger.debug(
            "category_post_count_updated",
            category_id=str(category_id),
            post_count=category.post_count,
        )
