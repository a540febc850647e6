"""
Category service containing business logic layer
"""

import math
import re
from typing import Any, List, Optional

from catalog_service.core.config import config
from catalog_service.core.errors import (
    CircularReferenceError,
    ConflictError,
    DepthExceededError,
    MalformedInputError,
    NotFoundError,
    ParentNotFoundError,
)
from catalog_service.core.logger import logger
from catalog_service.repositories.category import CategoryRepository
from catalog_service.schemas.category import (
    CategoryBulkDeleteResponse,
    CategoryCreate,
    CategoryListResponse,
    CategoryOrderItem,
    CategoryOrderUpdateResponse,
    CategoryResponse,
    CategoryUpdate,
)
from catalog_service.services.hierarchy import CategoryHierarchyManager
from catalog_service.utils.validators import coerce_int, normalize_reference, require_text, to_object_id

SORTABLE_FIELDS = {"order", "name", "created_at", "updated_at"}

# Raised by the post-write placement check
PLACEMENT_ERRORS = (CircularReferenceError, ParentNotFoundError, DepthExceededError)


class CategoryService:
    """Service layer for category tree administration"""

    def __init__(self, repository: CategoryRepository, hierarchy: CategoryHierarchyManager = None):
        self.repository = repository
        self.hierarchy = hierarchy or CategoryHierarchyManager(repository)

    async def _require(self, category_id: Any):
        obj_id = normalize_reference(category_id, "category_id")
        if obj_id is None:
            raise MalformedInputError("category_id is required", field="category_id")
        doc = await self.repository.find_by_id(obj_id)
        if doc is None:
            raise NotFoundError("Category not found", field="category_id", value=obj_id)
        return obj_id, doc

    async def _ensure_unique_name(self, name: str, parent_id, exclude_id=None) -> None:
        if await self.repository.name_exists(name, parent_id, exclude_id=exclude_id):
            raise ConflictError(
                "Category with this name already exists",
                details={"field": "name", "value": name},
            )

    async def create_category(self, category_data: CategoryCreate) -> CategoryResponse:
        """Create a category under an optional parent, enforcing the depth cap"""
        name = require_text(category_data.name, "name", max_length=100)
        parent_id = await self.hierarchy.validate_new_parent(category_data.parent_id)
        await self._ensure_unique_name(name, parent_id)

        order = category_data.order
        if order is None:
            max_order = await self.repository.get_max_order()
            order = max_order + 1 if max_order is not None else 1

        category = await self.repository.create({
            "name": name,
            "description": (category_data.description or "").strip(),
            "image": category_data.image,
            "icon": category_data.icon,
            "parent_id": parent_id,
            "order": order,
            "is_active": True if category_data.is_active is None else category_data.is_active,
        })

        if parent_id is not None:
            try:
                await self.hierarchy.verify_placement(category.id)
            except PLACEMENT_ERRORS as e:
                # The parent was moved or deleted after validation
                await self.repository.delete(to_object_id(category.id))
                logger.warning(
                    f"Rolled back category {category.id}: {e.message}",
                    metadata={"event": "create_category_rolled_back", "category_id": category.id,
                              "parent_id": str(parent_id)}
                )
                raise

        logger.info(
            f"Created category {category.id}",
            metadata={"event": "create_category", "category_id": category.id, "parent_id": category.parent_id}
        )
        return category

    async def get_category(self, category_id: str) -> CategoryResponse:
        _, doc = await self._require(category_id)
        return self.repository.to_response(doc)

    async def get_children(self, parent_id: Optional[str]) -> List[CategoryResponse]:
        """Direct children of a node in sibling order; roots when parent_id is None"""
        parent_oid = normalize_reference(parent_id, "parent_id")
        if parent_oid is not None:
            await self._require(parent_oid)
        return await self.repository.find_by_parent(parent_oid)

    async def get_depth(self, category_id: str) -> int:
        obj_id, _ = await self._require(category_id)
        return await self.hierarchy.compute_depth(obj_id)

    async def list_categories(self,
                              search: Optional[str] = None,
                              is_active: Optional[bool] = None,
                              parent_id: Optional[str] = None,
                              page: int = 1,
                              limit: int = 10,
                              sort_by: str = "order",
                              sort_order: str = "asc") -> CategoryListResponse:
        """List categories with search, status filter and pagination"""
        query = {}
        if search:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"description": pattern}]
        if is_active is not None:
            query["is_active"] = is_active
        if parent_id is not None:
            query["parent_id"] = normalize_reference(parent_id, "parent_id")

        if sort_by not in SORTABLE_FIELDS:
            raise MalformedInputError(f"Cannot sort by {sort_by}", field="sort_by", value=sort_by)
        direction = 1 if sort_order == "asc" else -1

        page = max(page, 1)
        limit = min(max(limit, 1), config.max_page_size)
        categories, total = await self.repository.list_categories(
            query, [(sort_by, direction), ("_id", 1)], skip=(page - 1) * limit, limit=limit
        )
        return CategoryListResponse(
            categories=categories,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    async def update_category(self, category_id: str, category_data: CategoryUpdate) -> CategoryResponse:
        """
        Update a category. A parent_id present in the request (including an
        explicit null) is a reparent and is validated against the current tree
        before anything is written.
        """
        obj_id, existing = await self._require(category_id)
        provided = category_data.model_fields_set
        fields = {}

        parent_id = existing.get("parent_id")
        if "parent_id" in provided:
            parent_id = await self.hierarchy.validate_reparent(obj_id, category_data.parent_id)
            fields["parent_id"] = parent_id

        name = existing.get("name")
        if "name" in provided:
            name = require_text(category_data.name, "name", max_length=100)
            fields["name"] = name

        if "name" in fields or "parent_id" in fields:
            await self._ensure_unique_name(name, parent_id, exclude_id=obj_id)

        if "description" in provided:
            fields["description"] = (category_data.description or "").strip()
        for field in ("image", "icon"):
            if field in provided:
                fields[field] = getattr(category_data, field)
        if "order" in provided and category_data.order is not None:
            fields["order"] = category_data.order
        if "is_active" in provided and category_data.is_active is not None:
            fields["is_active"] = category_data.is_active

        category = await self.repository.update(obj_id, fields)
        if not category:
            raise NotFoundError("Category not found", field="category_id", value=obj_id)

        if "parent_id" in fields:
            await self._verify_or_revert(obj_id, existing, fields)

        logger.info(
            f"Updated category {category_id}",
            metadata={"event": "update_category", "category_id": str(obj_id), "fields": sorted(fields)}
        )
        return category

    async def _verify_or_revert(self, obj_id, existing, fields) -> None:
        """
        Re-check a reparent against the stored tree. On failure the previous
        values are written back, but only while the node still has the parent
        this update gave it.
        """
        try:
            await self.hierarchy.verify_placement(obj_id)
        except PLACEMENT_ERRORS as e:
            reverted = await self.repository.revert(
                obj_id,
                {"parent_id": fields["parent_id"]},
                {field: existing.get(field) for field in fields},
            )
            logger.warning(
                f"Rolled back reparent of category {obj_id}: {e.message}",
                metadata={
                    "event": "update_category_rolled_back",
                    "category_id": str(obj_id),
                    "parent_id": str(fields["parent_id"]),
                    "reverted": reverted,
                }
            )
            raise

    async def _restore_if_parent(self, doc) -> bool:
        """Put a deleted category back if a child was attached to it meanwhile"""
        if await self.hierarchy.can_delete(doc["_id"]):
            return False
        await self.repository.restore(doc)
        logger.warning(
            f"Restored category {doc['_id']}: a subcategory was added during deletion",
            metadata={"event": "delete_category_rolled_back", "category_id": str(doc["_id"])}
        )
        return True

    @staticmethod
    def _has_children_conflict(obj_id) -> ConflictError:
        return ConflictError(
            "Cannot delete category with subcategories",
            details={"field": "category_id", "value": str(obj_id)},
        )

    async def delete_category(self, category_id: str) -> None:
        """Delete a category; refused while it has children"""
        obj_id, doc = await self._require(category_id)
        if not await self.hierarchy.can_delete(obj_id):
            raise self._has_children_conflict(obj_id)
        if not await self.repository.delete(obj_id):
            raise NotFoundError("Category not found", field="category_id", value=obj_id)
        if await self._restore_if_parent(doc):
            raise self._has_children_conflict(obj_id)

        logger.info(
            f"Deleted category {category_id}",
            metadata={"event": "delete_category", "category_id": str(obj_id)}
        )

    async def bulk_delete_categories(self, category_ids: List[str]) -> CategoryBulkDeleteResponse:
        """Delete every listed category that has no children; report the rest"""
        deletable = []
        failed_ids = []
        for category_id in category_ids:
            obj_id = to_object_id(category_id)
            doc = await self.repository.find_by_id(obj_id) if obj_id is not None else None
            if doc is not None and await self.hierarchy.can_delete(obj_id):
                deletable.append(doc)
            else:
                failed_ids.append(category_id)

        if not deletable:
            raise ConflictError(
                "No categories can be deleted (all have subcategories)",
                details={"field": "ids", "failed_ids": failed_ids},
            )

        deleted_count = await self.repository.delete_many([doc["_id"] for doc in deletable])
        for doc in deletable:
            if await self._restore_if_parent(doc):
                deleted_count -= 1
                failed_ids.append(str(doc["_id"]))

        logger.info(
            f"Bulk deleted {deleted_count} categories",
            metadata={"event": "bulk_delete_categories", "deleted_count": deleted_count, "failed_ids": failed_ids}
        )
        return CategoryBulkDeleteResponse(deleted_count=deleted_count, failed_ids=failed_ids)

    async def bulk_update_order(self, items: List[CategoryOrderItem]) -> CategoryOrderUpdateResponse:
        """
        Reassign sibling order for several categories.

        Every id and order value is validated before the first write.
        """
        if not items:
            raise MalformedInputError("Order updates array is required", field="items")

        updates = []
        for item in items:
            order = coerce_int(item.order, "order")
            if order < 0:
                raise MalformedInputError("order cannot be negative", field="order", value=order)
            obj_id, _ = await self._require(item.id)
            updates.append((obj_id, order))

        categories = []
        for obj_id, order in updates:
            category = await self.repository.update(obj_id, {"order": order})
            if not category:
                raise NotFoundError("Category not found", field="category_id", value=obj_id)
            categories.append(category)

        logger.info(
            f"Reordered {len(categories)} categories",
            metadata={"event": "bulk_update_category_order", "updated_count": len(categories)}
        )
        return CategoryOrderUpdateResponse(updated_count=len(categories), categories=categories)
