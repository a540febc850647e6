"""Shared test fixtures"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from catalog_service.core.errors import ConflictError
from catalog_service.repositories.category import CategoryRepository
from catalog_service.repositories.product import ProductRepository
from catalog_service.utils.validators import to_object_id


class InMemoryCategoryRepository(CategoryRepository):
    """CategoryRepository over a dict, enforcing the unique (parent_id, name) index"""

    def __init__(self):
        super().__init__(collection=None)
        self.docs: Dict[ObjectId, Dict[str, Any]] = {}
        self.reads = 0

    def add(self, name: str, parent_id: Optional[ObjectId] = None, order: int = 0,
            _id: Optional[ObjectId] = None) -> ObjectId:
        """Insert a raw document, bypassing every check (for corrupt-tree fixtures)"""
        obj_id = _id or ObjectId()
        now = datetime.now(timezone.utc)
        self.docs[obj_id] = {
            "_id": obj_id, "name": name, "description": "", "image": None, "icon": None,
            "parent_id": parent_id, "order": order, "is_active": True,
            "created_at": now, "updated_at": now,
        }
        return obj_id

    def _sorted(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return sorted(docs, key=lambda doc: (doc.get("order", 0), str(doc["_id"])))

    async def find_by_id(self, category_id: Any) -> Optional[Dict[str, Any]]:
        self.reads += 1
        obj_id = to_object_id(category_id)
        doc = self.docs.get(obj_id) if obj_id else None
        return dict(doc) if doc else None

    async def find_by_parent(self, parent_id):
        docs = [doc for doc in self.docs.values() if doc.get("parent_id") == parent_id]
        return [self.to_response(doc) for doc in self._sorted(docs)]

    async def find_child_ids(self, parent_ids):
        return [doc["_id"] for doc in self.docs.values() if doc.get("parent_id") in parent_ids]

    async def count_by_parent(self, parent_id):
        return sum(1 for doc in self.docs.values() if doc.get("parent_id") == parent_id)

    async def name_exists(self, name, parent_id, exclude_id=None):
        return any(
            doc["name"] == name and doc.get("parent_id") == parent_id and doc["_id"] != exclude_id
            for doc in self.docs.values()
        )

    async def get_max_order(self):
        if not self.docs:
            return None
        return max(doc.get("order", 0) for doc in self.docs.values())

    def _check_unique(self, doc: Dict[str, Any]) -> None:
        for other in self.docs.values():
            if (other["_id"] != doc["_id"] and other["name"] == doc["name"]
                    and other.get("parent_id") == doc.get("parent_id")):
                raise ConflictError(
                    "Category with this name already exists",
                    details={"field": "name", "value": doc["name"]},
                )

    async def create(self, document):
        obj_id = ObjectId()
        now = datetime.now(timezone.utc)
        doc = {**document, "_id": obj_id, "created_at": now, "updated_at": now}
        self._check_unique(doc)
        self.docs[obj_id] = doc
        return self.to_response(doc)

    async def update(self, category_id, fields):
        if category_id not in self.docs:
            return None
        doc = {**self.docs[category_id], **fields, "updated_at": datetime.now(timezone.utc)}
        self._check_unique(doc)
        self.docs[category_id] = doc
        return self.to_response(doc)

    async def delete(self, category_id):
        return self.docs.pop(category_id, None) is not None

    async def delete_many(self, category_ids):
        return sum(1 for obj_id in category_ids if self.docs.pop(obj_id, None) is not None)

    async def revert(self, category_id, expected, previous):
        doc = self.docs.get(category_id)
        if doc is None or any(doc.get(key) != value for key, value in expected.items()):
            return False
        reverted = {**doc, **previous, "updated_at": datetime.now(timezone.utc)}
        self._check_unique(reverted)
        self.docs[category_id] = reverted
        return True

    async def restore(self, document):
        doc = dict(document)
        self._check_unique(doc)
        self.docs[doc["_id"]] = doc

    async def list_categories(self, query, sort, skip=0, limit=10):
        docs = [
            doc for doc in self.docs.values()
            if all(doc.get(key) == value for key, value in query.items() if not key.startswith("$"))
        ]
        docs = self._sorted(docs)
        return [self.to_response(doc) for doc in docs[skip:skip + limit]], len(docs)



class YieldingCategoryRepository(InMemoryCategoryRepository):
    """
    In-memory store that hands control back to the event loop before every
    read and write, so concurrent service calls interleave the way they do
    against a real database.
    """

    async def find_by_id(self, category_id):
        await asyncio.sleep(0)
        return await super().find_by_id(category_id)

    async def find_child_ids(self, parent_ids):
        await asyncio.sleep(0)
        return await super().find_child_ids(parent_ids)

    async def count_by_parent(self, parent_id):
        await asyncio.sleep(0)
        return await super().count_by_parent(parent_id)

    async def name_exists(self, name, parent_id, exclude_id=None):
        await asyncio.sleep(0)
        return await super().name_exists(name, parent_id, exclude_id=exclude_id)

    async def create(self, document):
        await asyncio.sleep(0)
        return await super().create(document)

    async def update(self, category_id, fields):
        await asyncio.sleep(0)
        return await super().update(category_id, fields)

    async def delete(self, category_id):
        await asyncio.sleep(0)
        return await super().delete(category_id)

    async def revert(self, category_id, expected, previous):
        await asyncio.sleep(0)
        return await super().revert(category_id, expected, previous)

    async def restore(self, document):
        await asyncio.sleep(0)
        return await super().restore(document)


class InMemoryProductRepository(ProductRepository):
    """ProductRepository over a dict, enforcing the unique sku index"""

    def __init__(self):
        super().__init__(collection=None)
        self.docs: Dict[ObjectId, Dict[str, Any]] = {}
        # SKUs that collide at write time even though sku_exists said they were free
        self.reserved_skus: set = set()

    def _sku_taken(self, sku: str, exclude_id: Optional[ObjectId] = None) -> bool:
        return any(doc.get("sku") == sku and doc["_id"] != exclude_id for doc in self.docs.values())

    def _claim(self, sku: Optional[str], exclude_id: Optional[ObjectId] = None) -> None:
        if sku in self.reserved_skus:
            self.reserved_skus.discard(sku)
            rival_id = ObjectId()
            self.docs[rival_id] = {"_id": rival_id, "sku": sku, "is_active": True}
            raise DuplicateKeyError(f"E11000 duplicate key error sku: {sku}")
        if sku and self._sku_taken(sku, exclude_id):
            raise DuplicateKeyError(f"E11000 duplicate key error sku: {sku}")

    async def find_by_id(self, product_id, active_only=True):
        obj_id = to_object_id(product_id)
        doc = self.docs.get(obj_id) if obj_id else None
        if doc is None or (active_only and not doc.get("is_active", True)):
            return None
        return dict(doc)

    async def sku_exists(self, sku, exclude_id=None):
        return self._sku_taken(sku, exclude_id)

    async def insert(self, document):
        self._claim(document.get("sku"))
        obj_id = ObjectId()
        now = datetime.now(timezone.utc)
        doc = {**document, "_id": obj_id, "created_at": now, "updated_at": now}
        self.docs[obj_id] = doc
        return self.to_response(doc)

    async def update(self, product_id, fields):
        doc = self.docs.get(product_id)
        if doc is None or not doc.get("is_active", True):
            return None
        if "sku" in fields:
            self._claim(fields["sku"], exclude_id=product_id)
        doc.update(fields)
        doc["updated_at"] = datetime.now(timezone.utc)
        return self.to_response(doc)

    async def soft_delete(self, product_id, vendor_id):
        doc = self.docs.get(product_id)
        if doc is None or doc.get("vendor_id") != vendor_id or not doc.get("is_active", True):
            return False
        doc["is_active"] = False
        return True


@pytest.fixture
def category_repository():
    """In-memory category store"""
    return InMemoryCategoryRepository()


@pytest.fixture
def yielding_category_repository():
    """In-memory category store whose calls interleave under asyncio.gather"""
    return YieldingCategoryRepository()


@pytest.fixture
def product_repository():
    """In-memory product store"""
    return InMemoryProductRepository()


@pytest.fixture
def tree(category_repository):
    """
    Three-level tree:

        Root
        ├── Mid
        │   ├── Leaf
        │   └── OtherLeaf
        └── OtherMid
    """
    root = category_repository.add("Root", order=1)
    mid = category_repository.add("Mid", parent_id=root, order=1)
    other_mid = category_repository.add("OtherMid", parent_id=root, order=2)
    leaf = category_repository.add("Leaf", parent_id=mid, order=1)
    other_leaf = category_repository.add("OtherLeaf", parent_id=mid, order=2)
    return {
        "root": root,
        "mid": mid,
        "other_mid": other_mid,
        "leaf": leaf,
        "other_leaf": other_leaf,
    }


@pytest.fixture
def vendor_id():
    return str(ObjectId("65f1a2b3c4d5e6f7a8b9c0d1"))
