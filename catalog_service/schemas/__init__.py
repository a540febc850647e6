"""
Schemas module initialization
"""

from .category import (
    CategoryBulkDeleteRequest,
    CategoryBulkDeleteResponse,
    CategoryCreate,
    CategoryDepthResponse,
    CategoryListResponse,
    CategoryOrderItem,
    CategoryOrderUpdateRequest,
    CategoryOrderUpdateResponse,
    CategoryResponse,
    CategoryUpdate,
)
from .product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ProductVariantsInput,
)

__all__ = [
    "CategoryBulkDeleteRequest",
    "CategoryBulkDeleteResponse",
    "CategoryCreate",
    "CategoryDepthResponse",
    "CategoryListResponse",
    "CategoryOrderItem",
    "CategoryOrderUpdateRequest",
    "CategoryOrderUpdateResponse",
    "CategoryResponse",
    "CategoryUpdate",
    "ProductCreate",
    "ProductListResponse",
    "ProductResponse",
    "ProductUpdate",
    "ProductVariantsInput",
]
