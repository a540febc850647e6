"""
Public storefront API endpoints
"""

from fastapi import APIRouter, Depends, Query, Response

from catalog_service.core.errors import ErrorResponseModel, NotFoundError
from catalog_service.dependencies.product import get_product_service
from catalog_service.schemas.product import ProductListResponse, ProductResponse
from catalog_service.services.product import ProductService

router = APIRouter()


@router.get(
    "/products",
    response_model=ProductListResponse,
)
async def list_storefront_products(
    response: Response,
    search: str = Query(None, description="Search text in name or description"),
    category_id: str = Query(None, alias="categoryId", description="Category node at any depth"),
    subcategory_id: str = Query(None, alias="subcategoryId"),
    brand_id: str = Query(None, alias="brandId"),
    vendor_id: str = Query(None, alias="vendorId"),
    min_price: float = Query(None, ge=0, alias="minPrice"),
    max_price: float = Query(None, ge=0, alias="maxPrice"),
    has_discount: bool = Query(False, alias="hasDiscount"),
    page: int = Query(1, ge=1),
    limit: int = Query(None, ge=1, le=100),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    service: ProductService = Depends(get_product_service),
):
    """
    List visible products. A category filter matches the product fields
    appropriate to the category's depth in the tree.
    """
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"

    return await service.list_storefront_products(
        search=search, category_id=category_id, subcategory_id=subcategory_id,
        brand_id=brand_id, vendor_id=vendor_id, min_price=min_price, max_price=max_price,
        has_discount=has_discount, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponseModel}},
)
async def get_storefront_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
):
    """
    Get a product by its ID.
    """
    product = await service.get_product(product_id)
    if not product.is_visible:
        raise NotFoundError("Product not found", field="product_id", value=product_id)
    return product
