"""
Database module initialization
"""

from .mongodb import (
    db,
    connect_to_mongo,
    close_mongo_connection,
    get_database,
    get_category_collection,
    get_product_collection,
)
from .indexes import create_indexes

__all__ = [
    "db",
    "connect_to_mongo",
    "close_mongo_connection",
    "get_database",
    "get_category_collection",
    "get_product_collection",
    "create_indexes",
]
