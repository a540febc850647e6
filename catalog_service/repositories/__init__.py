"""
Repositories module initialization
"""

from .category import CategoryRepository
from .product import ProductRepository

__all__ = [
    "CategoryRepository",
    "ProductRepository",
]
