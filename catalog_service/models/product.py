"""
Product model with nested color/size variants
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now():
    """Helper function for Pydantic default_factory to get current UTC time"""
    return datetime.now(timezone.utc)


class StockStatus(str, Enum):
    """Stock status, always derived from a quantity"""
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"


class SizeVariant(BaseModel):
    """Model for one size of a color variant, with its own price and stock"""
    model_config = ConfigDict(populate_by_name=True)

    size: str = Field(..., min_length=1)
    price: Optional[float] = Field(None, ge=0)  # None means use base product price
    original_price: Optional[float] = Field(None, ge=0, alias="originalPrice")
    stock_quantity: int = Field(default=0, ge=0, alias="stockQuantity")
    stock_status: StockStatus = Field(default=StockStatus.OUT_OF_STOCK, alias="stockStatus")


class ColorVariant(BaseModel):
    """Model for a color grouping one or more size variants"""
    model_config = ConfigDict(populate_by_name=True)

    color_name: str = Field(..., min_length=1, alias="colorName")
    color_code: Optional[str] = Field(None, alias="colorCode")
    thumbnail_image: Optional[str] = Field(None, alias="thumbnailImage")
    size_variants: List[SizeVariant] = Field(default_factory=list, alias="sizeVariants")


class ProductVariants(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    color_variants: List[ColorVariant] = Field(default_factory=list, alias="colorVariants")


class ProductBase(BaseModel):
    """Base Product model with all common fields"""
    model_config = ConfigDict(populate_by_name=True)

    # Basic information
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0, alias="originalPrice")
    sku: Optional[str] = None

    # Ownership and references
    vendor_id: str = Field(..., alias="vendorId")
    brand_id: Optional[str] = Field(None, alias="brandId")

    # Category placement (three independent references, see category matcher)
    category_id: Optional[str] = Field(None, alias="categoryId")
    subcategory_id: Optional[str] = Field(None, alias="subcategoryId")
    sub_sub_category_id: Optional[str] = Field(None, alias="subSubCategoryId")

    # Stock
    stock_quantity: int = Field(default=0, ge=0, alias="stockQuantity")
    stock: StockStatus = StockStatus.OUT_OF_STOCK

    # Variations
    variants: ProductVariants = Field(default_factory=ProductVariants)

    # Media and metadata (opaque URLs supplied by the media service)
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    # Visibility and audit trail
    is_visible: bool = Field(default=True, alias="isVisible")
    is_active: bool = Field(default=True, alias="isActive")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Product(ProductBase):
    """Product model with ID for database operations"""
    id: str
