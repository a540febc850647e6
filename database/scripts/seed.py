#!/usr/bin/env python3

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient

from catalog_service.core.config import config
from catalog_service.db.indexes import create_indexes
from catalog_service.db.mongodb import CATEGORIES_COLLECTION, PRODUCTS_COLLECTION
from catalog_service.repositories import CategoryRepository, ProductRepository
from catalog_service.schemas.category import CategoryCreate
from catalog_service.schemas.product import ProductCreate
from catalog_service.services import CategoryService, ProductService

CATEGORY_FIELDS = ("category_id", "subcategory_id", "sub_sub_category_id")


class CatalogDatabaseSeeder:
    """Seeds a three-level category tree and sample products through the services"""

    def __init__(self, data_path: Optional[str] = None):
        self.data_path = data_path or os.path.join(
            os.path.dirname(__file__), "..", "data", "catalog.json"
        )
        self.client = None
        self.db = None
        self.category_ids: Dict[tuple, str] = {}

    async def connect(self):
        """Establish MongoDB connection"""
        print(f"Connecting to MongoDB database '{config.mongodb_database}'...")
        self.client = AsyncIOMotorClient(config.mongodb_url)
        self.db = self.client[config.mongodb_database]

        # Test connection
        await self.db.command('ping')
        print("Successfully connected to MongoDB!")

    async def seed_data(self):
        """Main seeding method"""
        print("Seeding catalog data...")

        with open(self.data_path, "r") as f:
            data = json.load(f)

        await self.clear_data()
        await create_indexes(self.db)

        category_repository = CategoryRepository(self.db[CATEGORIES_COLLECTION])
        category_service = CategoryService(category_repository)
        product_service = ProductService(
            ProductRepository(self.db[PRODUCTS_COLLECTION]), category_repository
        )

        await self.seed_categories(category_service, data.get("categories", []))
        await self.seed_products(product_service, data["vendor_id"], data.get("products", []))

        print("Catalog data seeding completed successfully!")

    async def clear_data(self):
        """Clear existing catalog data"""
        print("Clearing existing catalog data...")
        for name in (CATEGORIES_COLLECTION, PRODUCTS_COLLECTION):
            result = await self.db[name].delete_many({})
            print(f"Deleted {result.deleted_count} documents from '{name}'")

    async def seed_categories(self, service: CategoryService, nodes: List[Dict[str, Any]],
                              parent_id: Optional[str] = None, path: tuple = ()):
        """Create categories depth-first so every parent exists before its children"""
        for order, node in enumerate(nodes, 1):
            category = await service.create_category(CategoryCreate(
                name=node["name"],
                description=node.get("description"),
                parent_id=parent_id,
                order=order,
            ))
            node_path = path + (node["name"],)
            self.category_ids[node_path] = category.id
            print(f"{'  ' * len(path)}Created category {' > '.join(node_path)}")
            await self.seed_categories(service, node.get("children", []), category.id, node_path)

    async def seed_products(self, service: ProductService, vendor_id: str, products: List[Dict[str, Any]]):
        """Create products, placing each one along its category path"""
        for product in products:
            payload = {key: value for key, value in product.items() if key != "category"}
            category_path = product.get("category", [])
            for depth, field in enumerate(CATEGORY_FIELDS[:len(category_path)], 1):
                payload[field] = self.category_ids[tuple(category_path[:depth])]

            created = await service.create_product(vendor_id, ProductCreate(**payload))
            print(
                f"Created product '{created.name}' (sku={created.sku}, "
                f"stock={created.stock_quantity} {created.stock.value})"
            )

        print(f"Successfully seeded {len(products)} products")

    async def close(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            print("MongoDB connection closed")


async def main():
    """Main function"""
    seeder = CatalogDatabaseSeeder()

    try:
        await seeder.connect()
        await seeder.seed_data()
    except Exception as error:
        print(f"Seeding failed: {error}")
        sys.exit(1)
    finally:
        await seeder.close()


if __name__ == "__main__":
    asyncio.run(main())
