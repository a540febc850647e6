"""
Dependency injection for Category service and repository
"""

from fastapi import Depends

from catalog_service.db.mongodb import get_category_collection
from catalog_service.repositories.category import CategoryRepository
from catalog_service.services.category import CategoryService
from catalog_service.services.hierarchy import CategoryHierarchyManager


async def get_category_repository() -> CategoryRepository:
    """Get category repository instance"""
    collection = await get_category_collection()
    return CategoryRepository(collection)


async def get_hierarchy_manager(
    repository: CategoryRepository = Depends(get_category_repository)
) -> CategoryHierarchyManager:
    return CategoryHierarchyManager(repository)


async def get_category_service(
    repository: CategoryRepository = Depends(get_category_repository),
    hierarchy: CategoryHierarchyManager = Depends(get_hierarchy_manager)
) -> CategoryService:
    """Get category service instance"""
    return CategoryService(repository, hierarchy)
