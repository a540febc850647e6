"""
Database index management for MongoDB.

Indexes are created at application startup. The unique indexes here are the
persistence-level half of the SKU and sibling-name uniqueness guarantees:
the services check first, and treat a DuplicateKeyError on write as the
authoritative answer.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from catalog_service.core.logger import logger
from catalog_service.db.mongodb import CATEGORIES_COLLECTION, PRODUCTS_COLLECTION

SKU_INDEX_NAME = "idx_sku_unique"
CATEGORY_NAME_INDEX_NAME = "idx_parent_name_unique"


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    Create all required MongoDB indexes for the categories and products collections.
    """
    categories = db[CATEGORIES_COLLECTION]
    products = db[PRODUCTS_COLLECTION]

    try:
        # Sibling names are unique (root names share parent_id=None)
        await categories.create_index(
            [("parent_id", ASCENDING), ("name", ASCENDING)],
            unique=True,
            name=CATEGORY_NAME_INDEX_NAME
        )
        await categories.create_index(
            [("parent_id", ASCENDING), ("order", ASCENDING)],
            name="idx_parent_order"
        )
        await categories.create_index([("is_active", ASCENDING)], name="idx_category_active")
        logger.info("Created category indexes")

        # SKU uniqueness, sparse so legacy products without SKU are allowed
        await products.create_index(
            [("sku", ASCENDING)],
            unique=True,
            sparse=True,
            name=SKU_INDEX_NAME
        )
        logger.info("Created unique index on 'sku'")

        # One index per category reference field used by the storefront matcher
        for field in ("category_id", "subcategory_id", "sub_sub_category_id"):
            await products.create_index(
                [(field, ASCENDING), ("is_visible", ASCENDING)],
                name=f"idx_{field}_visible"
            )
        logger.info("Created category reference indexes")

        await products.create_index(
            [("vendor_id", ASCENDING), ("is_active", ASCENDING)],
            name="idx_vendor_active"
        )
        await products.create_index(
            [("is_active", ASCENDING), ("created_at", DESCENDING)],
            name="idx_status_created"
        )
        logger.info("All MongoDB indexes created successfully")

    except Exception as e:
        logger.error(f"Error creating indexes: {e}", error=e)
        raise
