"""
Models module initialization
"""

from .category import Category, CategoryBase, MAX_CATEGORY_DEPTH
from .product import (
    ColorVariant,
    Product,
    ProductBase,
    ProductVariants,
    SizeVariant,
    StockStatus,
)

__all__ = [
    "Category",
    "CategoryBase",
    "MAX_CATEGORY_DEPTH",
    "ColorVariant",
    "Product",
    "ProductBase",
    "ProductVariants",
    "SizeVariant",
    "StockStatus",
]
