"""
API schemas for Product endpoints

Numeric fields and nested variants are accepted loosely here (numbers may
arrive as strings) and are coerced by the engine, which reports failures as
typed errors naming the field.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from catalog_service.models.product import Product, StockStatus

Reference = Optional[Union[str, Dict[str, Any]]]
Number = Optional[Union[int, float, str]]


class ProductVariantsInput(BaseModel):
    """Raw variant payload; color entries are validated by the variant validator"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    color_variants: Optional[List[Dict[str, Any]]] = Field(None, alias="colorVariants")


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: Union[int, float, str]
    original_price: Number = Field(None, alias="originalPrice")
    sku: Optional[str] = Field(None, max_length=100)

    brand_id: Reference = Field(None, alias="brandId")
    category_id: Reference = Field(None, alias="categoryId")
    subcategory_id: Reference = Field(None, alias="subcategoryId")
    sub_sub_category_id: Reference = Field(None, alias="subSubCategoryId")

    stock: Optional[StockStatus] = None
    stock_quantity: Number = Field(None, alias="stockQuantity")
    variants: Optional[ProductVariantsInput] = None

    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_visible: Optional[bool] = Field(None, alias="isVisible")


class ProductUpdate(BaseModel):
    """Schema for updating an existing product; unset fields are left untouched"""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: Number = None
    original_price: Number = Field(None, alias="originalPrice")
    sku: Optional[str] = Field(None, max_length=100)

    brand_id: Reference = Field(None, alias="brandId")
    category_id: Reference = Field(None, alias="categoryId")
    subcategory_id: Reference = Field(None, alias="subcategoryId")
    sub_sub_category_id: Reference = Field(None, alias="subSubCategoryId")

    stock: Optional[StockStatus] = None
    stock_quantity: Number = Field(None, alias="stockQuantity")
    variants: Optional[ProductVariantsInput] = None

    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    is_visible: Optional[bool] = Field(None, alias="isVisible")


class ProductResponse(Product):
    """Schema for product responses including all fields"""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class ProductListResponse(BaseModel):
    """Response schema for product listings with pagination"""
    products: List[ProductResponse]
    total: int
    page: int
    limit: int
    total_pages: int
