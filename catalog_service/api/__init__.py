"""
API module initialization
"""

from . import categories, health, products, storefront

__all__ = ["categories", "health", "products", "storefront"]
