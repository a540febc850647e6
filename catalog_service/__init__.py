"""
Catalog Service: category hierarchy, product variants and storefront matching
"""

__version__ = "1.0.0"
