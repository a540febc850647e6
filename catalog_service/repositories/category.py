"""
Category repository for data access layer following Repository pattern
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from catalog_service.core.errors import ConflictError, ErrorResponse
from catalog_service.core.logger import logger
from catalog_service.schemas.category import CategoryResponse
from catalog_service.utils.validators import to_object_id

# Siblings sort by order, ties broken by insertion order
SIBLING_SORT = [("order", ASCENDING), ("_id", ASCENDING)]


class CategoryRepository:
    """Repository for category tree persistence"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    def to_response(self, doc: dict) -> Optional[CategoryResponse]:
        """Convert MongoDB document to CategoryResponse schema"""
        if not doc:
            return None
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        if doc.get("parent_id") is not None:
            doc["parent_id"] = str(doc["parent_id"])
        for field in ["created_at", "updated_at"]:
            if field in doc and not isinstance(doc[field], datetime):
                doc[field] = datetime.now(timezone.utc)
        return CategoryResponse(**doc)

    def _duplicate_name(self, name: str) -> ConflictError:
        return ConflictError(
            "Category with this name already exists",
            details={"field": "name", "value": name},
        )

    async def find_by_id(self, category_id: Any) -> Optional[Dict[str, Any]]:
        """Get the raw category document, or None for unknown/invalid ids"""
        obj_id = to_object_id(category_id)
        if obj_id is None:
            return None
        try:
            return await self.collection.find_one({"_id": obj_id})
        except PyMongoError as e:
            logger.error(f"MongoDB error getting category: {e}")
            raise ErrorResponse("Database error during category retrieval", status_code=503)

    async def get_by_id(self, category_id: Any) -> Optional[CategoryResponse]:
        return self.to_response(await self.find_by_id(category_id))

    async def find_by_parent(self, parent_id: Optional[ObjectId]) -> List[CategoryResponse]:
        """Get the direct children of a node (roots when parent_id is None)"""
        try:
            cursor = self.collection.find({"parent_id": parent_id}).sort(SIBLING_SORT)
            docs = await cursor.to_list(length=None)
            return [self.to_response(doc) for doc in docs]
        except PyMongoError as e:
            logger.error(f"MongoDB error listing child categories: {e}")
            raise ErrorResponse("Database error during category retrieval", status_code=503)

    async def find_child_ids(self, parent_ids: List[ObjectId]) -> List[ObjectId]:
        """Ids of every category whose parent is one of parent_ids"""
        try:
            cursor = self.collection.find({"parent_id": {"$in": parent_ids}}, {"_id": 1})
            return [doc["_id"] for doc in await cursor.to_list(length=None)]
        except PyMongoError as e:
            logger.error(f"MongoDB error listing child categories: {e}")
            raise ErrorResponse("Database error during category retrieval", status_code=503)

    async def count_by_parent(self, parent_id: ObjectId) -> int:
        try:
            return await self.collection.count_documents({"parent_id": parent_id})
        except PyMongoError as e:
            logger.error(f"MongoDB error counting child categories: {e}")
            raise ErrorResponse("Database error during category retrieval", status_code=503)

    async def name_exists(self, name: str, parent_id: Optional[ObjectId],
                          exclude_id: Optional[ObjectId] = None) -> bool:
        """Check if a sibling with the same name already exists"""
        query = {"parent_id": parent_id, "name": name}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        try:
            return await self.collection.find_one(query, {"_id": 1}) is not None
        except PyMongoError as e:
            logger.error(f"MongoDB error checking category name: {e}")
            raise ErrorResponse("Database error during category validation", status_code=503)

    async def get_max_order(self) -> Optional[int]:
        try:
            doc = await self.collection.find_one({}, {"order": 1}, sort=[("order", -1)])
            return doc.get("order", 0) if doc else None
        except PyMongoError as e:
            logger.error(f"MongoDB error reading category order: {e}")
            raise ErrorResponse("Database error during category retrieval", status_code=503)

    async def create(self, document: Dict[str, Any]) -> CategoryResponse:
        """Insert a new category document"""
        now = datetime.now(timezone.utc)
        doc = {**document, "created_at": now, "updated_at": now}
        try:
            result = await self.collection.insert_one(doc)
            created = await self.collection.find_one({"_id": result.inserted_id})
            return self.to_response(created)
        except DuplicateKeyError:
            raise self._duplicate_name(document.get("name"))
        except PyMongoError as e:
            logger.error(f"MongoDB error creating category: {e}")
            raise ErrorResponse("Database error during category creation", status_code=503)

    async def update(self, category_id: ObjectId, fields: Dict[str, Any]) -> Optional[CategoryResponse]:
        """Apply a $set update and return the updated category"""
        update = {**fields, "updated_at": datetime.now(timezone.utc)}
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": category_id},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
            return self.to_response(doc)
        except DuplicateKeyError:
            raise self._duplicate_name(fields.get("name"))
        except PyMongoError as e:
            logger.error(f"MongoDB error updating category: {e}")
            raise ErrorResponse("Database error during category update", status_code=503)

    async def delete(self, category_id: ObjectId) -> bool:
        try:
            result = await self.collection.delete_one({"_id": category_id})
            return result.deleted_count > 0
        except PyMongoError as e:
            logger.error(f"MongoDB error deleting category: {e}")
            raise ErrorResponse("Database error during category deletion", status_code=503)

    async def delete_many(self, category_ids: List[ObjectId]) -> int:
        try:
            result = await self.collection.delete_many({"_id": {"$in": category_ids}})
            return result.deleted_count
        except PyMongoError as e:
            logger.error(f"MongoDB error bulk deleting categories: {e}")
            raise ErrorResponse("Database error during category deletion", status_code=503)

    async def revert(self, category_id: ObjectId, expected: Dict[str, Any], previous: Dict[str, Any]) -> bool:
        """
        Compare-and-set: write back previous values only while the document
        still holds the expected ones. Returns False if someone else changed it.
        """
        update = {**previous, "updated_at": datetime.now(timezone.utc)}
        try:
            result = await self.collection.update_one({"_id": category_id, **expected}, {"$set": update})
            return result.matched_count > 0
        except DuplicateKeyError:
            raise self._duplicate_name(previous.get("name"))
        except PyMongoError as e:
            logger.error(f"MongoDB error reverting category: {e}")
            raise ErrorResponse("Database error during category update", status_code=503)

    async def restore(self, document: Dict[str, Any]) -> None:
        """Re-insert a deleted category document unchanged, keeping its _id"""
        try:
            await self.collection.insert_one(dict(document))
        except DuplicateKeyError:
            raise self._duplicate_name(document.get("name"))
        except PyMongoError as e:
            logger.error(f"MongoDB error restoring category: {e}")
            raise ErrorResponse("Database error during category restore", status_code=503)

    async def list_categories(self,
                              query: Dict[str, Any],
                              sort: List[Tuple[str, int]],
                              skip: int = 0,
                              limit: int = 10) -> Tuple[List[CategoryResponse], int]:
        """List categories with filters and pagination"""
        try:
            total = await self.collection.count_documents(query)
            cursor = self.collection.find(query).sort(sort).skip(skip).limit(limit)
            docs = await cursor.to_list(length=limit)
            return [self.to_response(doc) for doc in docs], total
        except PyMongoError as e:
            logger.error(f"MongoDB error listing categories: {e}")
            raise ErrorResponse("Database error during category listing", status_code=503)
