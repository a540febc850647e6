"""
Dependencies module initialization
"""

from .category import get_category_repository, get_category_service, get_hierarchy_manager
from .product import get_product_repository, get_product_service
from .vendor import get_vendor_id

__all__ = [
    "get_category_repository",
    "get_category_service",
    "get_hierarchy_manager",
    "get_product_repository",
    "get_product_service",
    "get_vendor_id",
]
