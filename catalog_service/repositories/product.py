"""
Product repository for data access layer following Repository pattern
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from catalog_service.core.errors import ErrorResponse
from catalog_service.core.logger import logger
from catalog_service.schemas.product import ProductResponse
from catalog_service.utils.validators import to_object_id

REFERENCE_FIELDS = ("vendor_id", "brand_id", "category_id", "subcategory_id", "sub_sub_category_id")


class ProductRepository:
    """Repository for product data access operations"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    def to_response(self, doc: dict) -> Optional[ProductResponse]:
        """Convert MongoDB document to ProductResponse schema"""
        if not doc:
            return None
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        for field in REFERENCE_FIELDS:
            if isinstance(doc.get(field), ObjectId):
                doc[field] = str(doc[field])
        for field in ["created_at", "updated_at"]:
            if field in doc and not isinstance(doc[field], datetime):
                doc[field] = datetime.now(timezone.utc)
        return ProductResponse(**doc)

    async def find_by_id(self, product_id: Any, active_only: bool = True) -> Optional[Dict[str, Any]]:
        """Get the raw product document, or None for unknown/invalid ids"""
        obj_id = to_object_id(product_id)
        if obj_id is None:
            return None
        query = {"_id": obj_id}
        if active_only:
            query["is_active"] = True
        try:
            return await self.collection.find_one(query)
        except PyMongoError as e:
            logger.error(f"MongoDB error getting product: {e}")
            raise ErrorResponse("Database error during product retrieval", status_code=503)

    async def get_by_id(self, product_id: Any) -> Optional[ProductResponse]:
        return self.to_response(await self.find_by_id(product_id))

    async def sku_exists(self, sku: str, exclude_id: Optional[ObjectId] = None) -> bool:
        """Check if SKU is already taken (matches the unique index, so inactive products count)"""
        query = {"sku": sku}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        try:
            return await self.collection.find_one(query, {"_id": 1}) is not None
        except PyMongoError as e:
            logger.error(f"MongoDB error checking SKU: {e}")
            raise ErrorResponse("Database error during SKU validation", status_code=503)

    async def insert(self, document: Dict[str, Any]) -> ProductResponse:
        """
        Insert a product document.

        DuplicateKeyError is propagated so the caller can retry SKU allocation.
        """
        now = datetime.now(timezone.utc)
        doc = {**document, "created_at": now, "updated_at": now}
        try:
            result = await self.collection.insert_one(doc)
            created = await self.collection.find_one({"_id": result.inserted_id})
            return self.to_response(created)
        except DuplicateKeyError:
            raise
        except PyMongoError as e:
            logger.error(f"MongoDB error creating product: {e}")
            raise ErrorResponse("Database error during product creation", status_code=503)

    async def update(self, product_id: ObjectId, fields: Dict[str, Any]) -> Optional[ProductResponse]:
        """
        Apply a $set update to an active product.

        DuplicateKeyError is propagated so the caller can retry SKU allocation.
        """
        update = {**fields, "updated_at": datetime.now(timezone.utc)}
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": product_id, "is_active": True},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
            return self.to_response(doc)
        except DuplicateKeyError:
            raise
        except PyMongoError as e:
            logger.error(f"MongoDB error updating product: {e}")
            raise ErrorResponse("Database error during product update", status_code=503)

    async def soft_delete(self, product_id: ObjectId, vendor_id: ObjectId) -> bool:
        """Soft delete a vendor's product"""
        try:
            result = await self.collection.update_one(
                {"_id": product_id, "vendor_id": vendor_id, "is_active": True},
                {"$set": {"is_active": False, "updated_at": datetime.now(timezone.utc)}}
            )
            return result.matched_count > 0
        except PyMongoError as e:
            logger.error(f"MongoDB error deleting product: {e}")
            raise ErrorResponse("Database error during product deletion", status_code=503)

    async def list_products(self,
                            query: Dict[str, Any],
                            sort: List[Tuple[str, int]],
                            skip: int = 0,
                            limit: int = 20) -> Tuple[List[ProductResponse], int]:
        """List products with filters and pagination"""
        try:
            total = await self.collection.count_documents(query)
            cursor = self.collection.find(query).sort(sort).skip(skip).limit(limit)
            docs = await cursor.to_list(length=limit)
            return [self.to_response(doc) for doc in docs], total
        except PyMongoError as e:
            logger.error(f"MongoDB error listing products: {e}")
            raise ErrorResponse("Database error during product listing", status_code=503)
