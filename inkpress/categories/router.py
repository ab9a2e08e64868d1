"""Category API endpoints."""

from fastapi import APIRouter, status

from inkpress.auth.dependencies import AdminActor
from inkpress.core.exceptions import NotFoundError

from .dependencies import CategoryServiceDep
from .schemas import CategoryMutationResponse, CategoryResponse, CreateCategoryRequest


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse], summary="List categories")
async def list_categories(service: CategoryServiceDep) -> list[CategoryResponse]:
    return [CategoryResponse.from_category(c) for c in await service.list_categories()]


@router.get("/{slug}", response_model=CategoryResponse, summary="Get category")
async def get_category(slug: str, service: CategoryServiceDep) -> CategoryResponse:
    category = await service.get_by_slug(slug)
    if category is None:
        raise NotFoundError("Category not found")
    return CategoryResponse.from_category(category)


@router.post(
    "",
    response_model=CategoryMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category (admin)",
)
async def create_category(
    data: CreateCategoryRequest,
    service: CategoryServiceDep,
    admin: AdminActor,
) -> CategoryMutationResponse:
    category = await service.create(admin, data.name, data.description, data.color)
    return CategoryMutationResponse(
        message="Category created successfully",
        category=CategoryResponse.from_category(category),
    )
