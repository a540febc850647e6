"""
Category node model
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_CATEGORY_DEPTH = 3


def utc_now():
    """Helper function for Pydantic default_factory to get current UTC time"""
    return datetime.now(timezone.utc)


class CategoryBase(BaseModel):
    """A node of the category tree (root, subcategory or sub-subcategory)"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=1000)

    # Opaque URLs supplied by the media service
    image: Optional[str] = None
    icon: Optional[str] = None

    parent_id: Optional[str] = Field(None, alias="parentId")
    order: int = Field(default=0, ge=0)
    is_active: bool = Field(default=True, alias="isActive")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Category(CategoryBase):
    """Category model with ID for database operations"""
    id: str
