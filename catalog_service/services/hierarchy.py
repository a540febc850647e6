"""
Category Hierarchy Manager

Keeps the category tree well-formed: bounded depth (root = 1, max 3) and no
cycles. Every check re-reads the persisted parent chain; depths are never
cached because concurrent admin writes may reparent any node in between.
"""

from typing import Any, Optional, Set

from bson import ObjectId

from catalog_service.core.errors import (
    CircularReferenceError,
    DepthExceededError,
    NotFoundError,
    ParentNotFoundError,
)
from catalog_service.core.logger import logger
from catalog_service.models.category import MAX_CATEGORY_DEPTH
from catalog_service.repositories.category import CategoryRepository
from catalog_service.utils.validators import normalize_reference, to_object_id


class CategoryHierarchyManager:
    """Depth computation, cycle detection and parent validation for categories"""

    def __init__(self, repository: CategoryRepository, max_depth: int = MAX_CATEGORY_DEPTH):
        self.repository = repository
        self.max_depth = max_depth

    async def compute_depth(self, node_id: Any) -> int:
        """
        Walk the parent chain upward from node_id and count the levels.

        Returns 1 for a root. A revisited node stops the walk and returns
        max_depth; a chain longer than max_depth returns as soon as the count
        exceeds it. A dangling parent reference ends the walk.

        Raises:
            NotFoundError: If node_id does not resolve to a category
        """
        node = await self.repository.find_by_id(node_id)
        if node is None:
            raise NotFoundError("Category not found", field="category_id", value=node_id)

        depth = 1
        visited: Set[ObjectId] = set()
        current = node
        while True:
            visited.add(current["_id"])
            parent_id = to_object_id(current.get("parent_id"))
            if parent_id is None:
                break
            if parent_id in visited:
                logger.warning(
                    "Circular parent chain detected while computing depth",
                    metadata={
                        "event": "category_cycle_detected",
                        "category_id": str(node["_id"]),
                        "revisited_id": str(parent_id),
                    }
                )
                return self.max_depth
            depth += 1
            if depth > self.max_depth:
                return depth
            parent = await self.repository.find_by_id(parent_id)
            if parent is None:
                break
            current = parent
        return depth

    async def has_circular_reference(self, node_id: ObjectId, parent_id: ObjectId) -> bool:
        """True if attaching node_id under parent_id would close a loop"""
        if parent_id == node_id:
            return True

        visited = {node_id}
        current_id: Optional[ObjectId] = parent_id
        while current_id is not None:
            if current_id in visited:
                return True
            visited.add(current_id)
            parent = await self.repository.find_by_id(current_id)
            if parent is None:
                break
            current_id = to_object_id(parent.get("parent_id"))
        return False

    async def subtree_height(self, node_id: ObjectId) -> int:
        """Number of levels in the subtree rooted at node_id (a leaf is 1)"""
        height = 1
        seen = {node_id}
        frontier = [node_id]
        while frontier and height <= self.max_depth:
            children = [
                child_id for child_id in await self.repository.find_child_ids(frontier)
                if child_id not in seen
            ]
            if not children:
                break
            seen.update(children)
            frontier = children
            height += 1
        return height

    async def validate_new_parent(self, parent_id: Any) -> Optional[ObjectId]:
        """
        Validate the parent of a category being created.

        Returns the normalized parent ObjectId (None for a root).
        """
        parent_oid = normalize_reference(parent_id, "parent_id")
        if parent_oid is None:
            return None

        if await self.repository.find_by_id(parent_oid) is None:
            raise ParentNotFoundError(parent_oid)

        parent_depth = await self.compute_depth(parent_oid)
        if parent_depth >= self.max_depth:
            raise DepthExceededError(parent_oid, parent_depth, self.max_depth)
        return parent_oid

    async def validate_reparent(self, node_id: Any, new_parent_id: Any) -> Optional[ObjectId]:
        """
        Validate moving node_id under new_parent_id (None makes it a root).

        Checks run in order: cycle, parent existence, depth. The depth check
        covers the whole subtree being moved, so no descendant can end up
        deeper than max_depth. Returns the normalized parent ObjectId.

        Raises:
            CircularReferenceError, ParentNotFoundError, DepthExceededError
        """
        node_oid = normalize_reference(node_id, "category_id")
        parent_oid = normalize_reference(new_parent_id, "parent_id")
        if parent_oid is None:
            return None

        if await self.has_circular_reference(node_oid, parent_oid):
            raise CircularReferenceError(node_oid, parent_oid)

        if await self.repository.find_by_id(parent_oid) is None:
            raise ParentNotFoundError(parent_oid)

        parent_depth = await self.compute_depth(parent_oid)
        if parent_depth >= self.max_depth:
            raise DepthExceededError(parent_oid, parent_depth, self.max_depth)

        height = await self.subtree_height(node_oid)
        if parent_depth + height > self.max_depth:
            logger.info(
                "Reparent rejected: moved subtree would exceed max depth",
                metadata={
                    "event": "category_reparent_too_deep",
                    "category_id": str(node_oid),
                    "parent_id": str(parent_oid),
                    "parent_depth": parent_depth,
                    "subtree_height": height,
                }
            )
            raise DepthExceededError(parent_oid, parent_depth, self.max_depth)

        return parent_oid

    async def verify_placement(self, node_id: Any) -> None:
        """
        Re-check a node's stored placement after a write.

        Two writes validated against the same snapshot can each pass and
        together close a loop or push a subtree past max_depth. Running this
        after the write, against what is now persisted, lets the later writer
        see the earlier one and back out.

        Raises:
            NotFoundError, CircularReferenceError, ParentNotFoundError, DepthExceededError
        """
        node_oid = normalize_reference(node_id, "category_id")
        node = await self.repository.find_by_id(node_oid)
        if node is None:
            raise NotFoundError("Category not found", field="category_id", value=node_oid)

        parent_oid = to_object_id(node.get("parent_id"))
        if parent_oid is None:
            return

        if await self.has_circular_reference(node_oid, parent_oid):
            raise CircularReferenceError(node_oid, parent_oid)

        if await self.repository.find_by_id(parent_oid) is None:
            raise ParentNotFoundError(parent_oid)

        parent_depth = await self.compute_depth(parent_oid)
        if parent_depth + await self.subtree_height(node_oid) > self.max_depth:
            raise DepthExceededError(parent_oid, parent_depth, self.max_depth)

    async def can_delete(self, node_id: Any) -> bool:
        """True iff no category lists node_id as its parent"""
        node_oid = normalize_reference(node_id, "category_id")
        return await self.repository.count_by_parent(node_oid) == 0
