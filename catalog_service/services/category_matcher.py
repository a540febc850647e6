"""
Depth-Aware Category Matcher

A product carries three independent category references. Which of them may
match a storefront category filter depends on the depth of the filter node:

    depth 1  category_id OR subcategory_id OR sub_sub_category_id
    depth 2  subcategory_id OR sub_sub_category_id
    depth 3  sub_sub_category_id only

Depth 3 is an exact match on purpose: also matching subcategory_id would pull
in products of sibling leaves under the same parent. An unresolvable node
yields criteria that match nothing, never an unfiltered query.
"""

from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId

from catalog_service.core.errors import NotFoundError
from catalog_service.core.logger import logger
from catalog_service.services.hierarchy import CategoryHierarchyManager
from catalog_service.utils.validators import to_object_id

CATEGORY_FIELDS = ("category_id", "subcategory_id", "sub_sub_category_id")

FIELDS_BY_DEPTH = {
    1: CATEGORY_FIELDS,
    2: ("subcategory_id", "sub_sub_category_id"),
    3: ("sub_sub_category_id",),
}

# Matches no document; spliced in place of the category filter
MATCH_NOTHING: Dict[str, Any] = {"_id": {"$in": []}}


def fields_for_depth(depth: int) -> Tuple[str, ...]:
    """Eligible product fields for a node depth; deeper legacy chains act as leaves"""
    return FIELDS_BY_DEPTH[min(max(depth, 1), 3)]


class CategoryMatchCriteria:
    """OR conditions over a product's category fields for one category node"""

    def __init__(self, category_id: Optional[ObjectId] = None,
                 depth: Optional[int] = None,
                 fields: Tuple[str, ...] = ()):
        self.category_id = category_id
        self.depth = depth
        self.fields = fields

    @classmethod
    def no_match(cls) -> "CategoryMatchCriteria":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.category_id is None or not self.fields

    @property
    def conditions(self) -> List[Dict[str, ObjectId]]:
        return [{field: self.category_id} for field in self.fields] if not self.is_empty else []

    def as_filter(self) -> Dict[str, Any]:
        """Mongo filter fragment for the product query"""
        conditions = self.conditions
        if not conditions:
            return dict(MATCH_NOTHING)
        if len(conditions) == 1:
            return conditions[0]
        return {"$or": conditions}

    def matches(self, product: Dict[str, Any]) -> bool:
        """Evaluate the criteria against a product document in memory"""
        if self.is_empty:
            return False
        target = str(self.category_id)
        return any(
            product.get(field) is not None and str(product.get(field)) == target
            for field in self.fields
        )

    def __repr__(self) -> str:
        return f"CategoryMatchCriteria(category_id={self.category_id}, depth={self.depth}, fields={self.fields})"


class CategoryMatcher:
    """Builds match criteria from the filter node's own computed depth"""

    def __init__(self, hierarchy: CategoryHierarchyManager):
        self.hierarchy = hierarchy

    async def build(self, category_id: Any) -> CategoryMatchCriteria:
        object_id = to_object_id(category_id.strip() if isinstance(category_id, str) else category_id)
        if object_id is None:
            logger.debug(
                "Category filter is not a valid id, matching nothing",
                metadata={"event": "category_match_invalid_id", "category_id": str(category_id)}
            )
            return CategoryMatchCriteria.no_match()

        try:
            depth = await self.hierarchy.compute_depth(object_id)
        except NotFoundError:
            logger.debug(
                "Category filter does not resolve, matching nothing",
                metadata={"event": "category_match_not_found", "category_id": str(object_id)}
            )
            return CategoryMatchCriteria.no_match()

        return CategoryMatchCriteria(object_id, depth, fields_for_depth(depth))
