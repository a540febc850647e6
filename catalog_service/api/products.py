"""
Vendor product API endpoints
"""

from fastapi import APIRouter, Depends, Query, status

from catalog_service.core.errors import ErrorResponseModel
from catalog_service.dependencies.product import get_product_service
from catalog_service.dependencies.vendor import get_vendor_id
from catalog_service.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from catalog_service.services.product import ProductService

router = APIRouter()


@router.get(
    "",
    response_model=ProductListResponse,
    responses={401: {"model": ErrorResponseModel}},
)
async def list_vendor_products(
    search: str = Query(None, description="Search text in name or description"),
    stock: str = Query(None, description="Filter by stock status"),
    category_id: str = Query(None, alias="categoryId"),
    page: int = Query(1, ge=1),
    limit: int = Query(None, ge=1, le=100),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    vendor_id: str = Depends(get_vendor_id),
    service: ProductService = Depends(get_product_service),
):
    """
    List the calling vendor's products, including hidden ones.
    """
    return await service.list_vendor_products(
        vendor_id, search=search, stock=stock, category_id=category_id,
        page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={401: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def get_vendor_product(
    product_id: str,
    vendor_id: str = Depends(get_vendor_id),
    service: ProductService = Depends(get_product_service),
):
    return await service.get_vendor_product(product_id, vendor_id)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponseModel},
        401: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
        409: {"model": ErrorResponseModel},
    },
)
async def create_product(
    product: ProductCreate,
    vendor_id: str = Depends(get_vendor_id),
    service: ProductService = Depends(get_product_service),
):
    """
    Create a product. Variants are validated as a whole and the SKU is
    generated unless one is supplied.
    """
    return await service.create_product(vendor_id, product)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponseModel},
        401: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
        409: {"model": ErrorResponseModel},
    },
)
async def update_product(
    product_id: str,
    product: ProductUpdate,
    vendor_id: str = Depends(get_vendor_id),
    service: ProductService = Depends(get_product_service),
):
    """
    Update a product. Supplied variants replace the existing ones.
    """
    return await service.update_product(product_id, vendor_id, product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def delete_product(
    product_id: str,
    vendor_id: str = Depends(get_vendor_id),
    service: ProductService = Depends(get_product_service),
):
    """
    Soft delete a product.
    """
    await service.delete_product(product_id, vendor_id)
