"""Pydantic schemas for categories."""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from .models import Category


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field("", max_length=200)
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Category name is required"
            raise ValueError(msg)
        return v


class CategoryResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    description: str
    color: str
    post_count: int

    @classmethod
    def from_category(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.category_id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            color=category.color,
            post_count=category.post_count,
        )


class CategoryMutationResponse(BaseModel):
    message: str
    category: CategoryResponse
