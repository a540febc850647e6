"""
Services module initialization
"""

from .category import CategoryService
from .category_matcher import CategoryMatchCriteria, CategoryMatcher
from .hierarchy import CategoryHierarchyManager
from .product import ProductService
from .sku import SkuAllocator
from .stock import derive_status
from .variants import VariantValidationResult, VariantValidator

__all__ = [
    "CategoryService",
    "CategoryMatchCriteria",
    "CategoryMatcher",
    "CategoryHierarchyManager",
    "ProductService",
    "SkuAllocator",
    "derive_status",
    "VariantValidationResult",
    "VariantValidator",
]
