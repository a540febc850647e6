"""
Dependency injection for Product service and repository
"""

from fastapi import Depends

from catalog_service.db.mongodb import get_product_collection
from catalog_service.dependencies.category import get_category_repository, get_hierarchy_manager
from catalog_service.repositories.category import CategoryRepository
from catalog_service.repositories.product import ProductRepository
from catalog_service.services.category_matcher import CategoryMatcher
from catalog_service.services.hierarchy import CategoryHierarchyManager
from catalog_service.services.product import ProductService


async def get_product_repository() -> ProductRepository:
    """Get product repository instance"""
    collection = await get_product_collection()
    return ProductRepository(collection)


async def get_product_service(
    repository: ProductRepository = Depends(get_product_repository),
    category_repository: CategoryRepository = Depends(get_category_repository),
    hierarchy: CategoryHierarchyManager = Depends(get_hierarchy_manager)
) -> ProductService:
    """Get product service instance"""
    return ProductService(repository, category_repository, matcher=CategoryMatcher(hierarchy))
