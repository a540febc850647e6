"""Unit tests for the MongoDB repositories"""
from datetime import datetime, timezone

import pytest
from bson import ObjectId
from unittest.mock import AsyncMock, MagicMock
from pymongo.errors import DuplicateKeyError, PyMongoError

from catalog_service.core.errors import ConflictError, ErrorResponse
from catalog_service.repositories.category import CategoryRepository
from catalog_service.repositories.product import ProductRepository


@pytest.fixture
def mock_collection():
    """Mock MongoDB collection for testing"""
    return AsyncMock()


def category_doc(**overrides):
    doc = {
        "_id": ObjectId(), "name": "Shirts", "description": "", "parent_id": ObjectId(),
        "order": 1, "is_active": True,
        "created_at": datetime.now(timezone.utc), "updated_at": datetime.now(timezone.utc),
    }
    doc.update(overrides)
    return doc


class TestCategoryRepository:

    @pytest.mark.asyncio
    async def test_find_by_id_invalid_id_skips_query(self, mock_collection):
        repository = CategoryRepository(mock_collection)

        assert await repository.find_by_id("not-an-id") is None
        mock_collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_by_id_converts_ids(self, mock_collection):
        doc = category_doc()
        mock_collection.find_one.return_value = doc
        repository = CategoryRepository(mock_collection)

        category = await repository.get_by_id(str(doc["_id"]))

        assert category.id == str(doc["_id"])
        assert category.parent_id == str(doc["parent_id"])

    @pytest.mark.asyncio
    async def test_duplicate_name_is_conflict(self, mock_collection):
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000")
        repository = CategoryRepository(mock_collection)

        with pytest.raises(ConflictError) as exc_info:
            await repository.create({"name": "Shirts", "parent_id": None})
        assert exc_info.value.details == {"field": "name", "value": "Shirts"}

    @pytest.mark.asyncio
    async def test_database_error_is_503(self, mock_collection):
        mock_collection.count_documents.side_effect = PyMongoError("down")
        repository = CategoryRepository(mock_collection)

        with pytest.raises(ErrorResponse) as exc_info:
            await repository.count_by_parent(ObjectId())
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_find_by_parent_sorts_siblings(self):
        docs = [category_doc(name="A"), category_doc(name="B")]
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.to_list = AsyncMock(return_value=docs)
        collection = MagicMock()
        collection.find.return_value = cursor
        repository = CategoryRepository(collection)

        children = await repository.find_by_parent(None)

        collection.find.assert_called_once_with({"parent_id": None})
        cursor.sort.assert_called_once_with([("order", 1), ("_id", 1)])
        assert [c.name for c in children] == ["A", "B"]


class TestProductRepository:

    @pytest.mark.asyncio
    async def test_insert_propagates_duplicate_key(self, mock_collection):
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000")
        repository = ProductRepository(mock_collection)

        with pytest.raises(DuplicateKeyError):
            await repository.insert({"sku": "OXF-C0D1-717123"})

    @pytest.mark.asyncio
    async def test_sku_exists_excludes_self(self, mock_collection):
        mock_collection.find_one.return_value = None
        repository = ProductRepository(mock_collection)
        product_id = ObjectId()

        assert await repository.sku_exists("SKU-1", exclude_id=product_id) is False
        query = mock_collection.find_one.call_args.args[0]
        assert query == {"sku": "SKU-1", "_id": {"$ne": product_id}}

    @pytest.mark.asyncio
    async def test_soft_delete_scoped_to_vendor(self, mock_collection):
        mock_collection.update_one.return_value = MagicMock(matched_count=0)
        repository = ProductRepository(mock_collection)
        product_id, vendor_id = ObjectId(), ObjectId()

        assert await repository.soft_delete(product_id, vendor_id) is False
        query = mock_collection.update_one.call_args.args[0]
        assert query == {"_id": product_id, "vendor_id": vendor_id, "is_active": True}


class TestCategoryRollback:

    @pytest.mark.asyncio
    async def test_revert_is_conditional_on_expected_parent(self, mock_collection):
        mock_collection.update_one.return_value = MagicMock(matched_count=0)
        repository = CategoryRepository(mock_collection)
        node_id, new_parent = ObjectId(), ObjectId()

        reverted = await repository.revert(node_id, {"parent_id": new_parent}, {"parent_id": None})

        assert reverted is False
        query, update = mock_collection.update_one.call_args.args
        assert query == {"_id": node_id, "parent_id": new_parent}
        assert update["$set"]["parent_id"] is None

    @pytest.mark.asyncio
    async def test_restore_reinserts_same_document(self, mock_collection):
        repository = CategoryRepository(mock_collection)
        doc = category_doc()

        await repository.restore(doc)

        mock_collection.insert_one.assert_awaited_once_with(doc)

    @pytest.mark.asyncio
    async def test_restore_name_clash_is_conflict(self, mock_collection):
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000")
        repository = CategoryRepository(mock_collection)

        with pytest.raises(ConflictError):
            await repository.restore(category_doc())

    def test_to_response_stringifies_ids(self, mock_collection):
        doc = category_doc(parent_id=None)
        response = CategoryRepository(mock_collection).to_response(doc)

        assert response.id == str(doc["_id"])
        assert response.parent_id is None
        assert CategoryRepository(mock_collection).to_response(None) is None
