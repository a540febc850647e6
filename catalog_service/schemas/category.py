"""
API schemas for Category endpoints
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from catalog_service.models.category import Category

# A parent reference may arrive as a bare id or an embedded {"_id"/"id": ...} object
Reference = Optional[Union[str, Dict[str, Any]]]


class CategoryCreate(BaseModel):
    """Schema for creating a new category"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Reference = Field(None, alias="parentId")
    order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = Field(None, alias="isActive")


class CategoryUpdate(BaseModel):
    """
    Schema for updating a category.
    Only fields present in the request are applied; an explicit null
    parent_id turns the node into a root.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Reference = Field(None, alias="parentId")
    order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = Field(None, alias="isActive")


class CategoryResponse(Category):
    """Schema for category responses"""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class CategoryListResponse(BaseModel):
    """Paginated category listing"""
    categories: List[CategoryResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class CategoryOrderItem(BaseModel):
    id: str
    order: Union[int, str]


class CategoryOrderUpdateRequest(BaseModel):
    items: List[CategoryOrderItem] = Field(..., min_length=1)


class CategoryOrderUpdateResponse(BaseModel):
    updated_count: int
    categories: List[CategoryResponse]


class CategoryBulkDeleteRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class CategoryBulkDeleteResponse(BaseModel):
    deleted_count: int
    failed_ids: List[str]


class CategoryDepthResponse(BaseModel):
    """Depth of a node in the tree (root = 1)"""
    id: str
    depth: int
