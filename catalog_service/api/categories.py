"""
Category administration API endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from catalog_service.core.errors import ErrorResponseModel
from catalog_service.dependencies.category import get_category_service
from catalog_service.schemas.category import (
    CategoryBulkDeleteRequest,
    CategoryBulkDeleteResponse,
    CategoryCreate,
    CategoryDepthResponse,
    CategoryListResponse,
    CategoryOrderUpdateRequest,
    CategoryOrderUpdateResponse,
    CategoryResponse,
    CategoryUpdate,
)
from catalog_service.services.category import CategoryService

router = APIRouter()


@router.get(
    "",
    response_model=CategoryListResponse,
)
async def list_categories(
    search: str = Query(None, description="Search text in name or description"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    parent_id: str = Query(None, alias="parentId", description="Only direct children of this node"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("order", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    service: CategoryService = Depends(get_category_service),
):
    """
    List categories with search, status filter and pagination.
    """
    return await service.list_categories(
        search=search, is_active=is_active, parent_id=parent_id,
        page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )


@router.get(
    "/roots",
    response_model=List[CategoryResponse],
)
async def list_root_categories(service: CategoryService = Depends(get_category_service)):
    """Root categories in display order"""
    return await service.get_children(None)


@router.post(
    "/bulk-delete",
    response_model=CategoryBulkDeleteResponse,
    responses={409: {"model": ErrorResponseModel}},
)
async def bulk_delete_categories(
    request: CategoryBulkDeleteRequest,
    service: CategoryService = Depends(get_category_service),
):
    """
    Delete several categories. Categories that still have children are
    skipped and reported in failed_ids.
    """
    return await service.bulk_delete_categories(request.ids)


@router.put(
    "/order",
    response_model=CategoryOrderUpdateResponse,
    responses={400: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def update_category_order(
    request: CategoryOrderUpdateRequest,
    service: CategoryService = Depends(get_category_service),
):
    return await service.bulk_update_order(request.items)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponseModel}},
)
async def get_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    return await service.get_category(category_id)


@router.get(
    "/{category_id}/children",
    response_model=List[CategoryResponse],
    responses={404: {"model": ErrorResponseModel}},
)
async def get_category_children(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    return await service.get_children(category_id)


@router.get(
    "/{category_id}/depth",
    response_model=CategoryDepthResponse,
    responses={404: {"model": ErrorResponseModel}},
)
async def get_category_depth(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    """Level of the category in the tree: 1 for a root, at most 3"""
    return CategoryDepthResponse(id=category_id, depth=await service.get_depth(category_id))


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
        409: {"model": ErrorResponseModel},
    },
)
async def create_category(
    category: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
):
    """
    Create a category. A parent at the maximum depth is rejected.
    """
    return await service.create_category(category)


@router.patch(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        400: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
        409: {"model": ErrorResponseModel},
    },
)
async def update_category(
    category_id: str,
    category: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
):
    """
    Update a category. Sending parentId moves the node; the move is
    rejected if it would create a cycle or exceed the maximum depth.
    """
    return await service.update_category(category_id, category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponseModel}, 409: {"model": ErrorResponseModel}},
)
async def delete_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    """
    Delete a category. Refused while the category has subcategories.
    """
    await service.delete_category(category_id)
