"""
Product service containing business logic layer

Every write runs the variant validator over the full variant list, derives
stock status from the winning quantity and allocates the SKU last, right
before persistence.
"""

import math
import re
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from catalog_service.core.config import config
from catalog_service.core.errors import ConflictError, MalformedInputError, NotFoundError
from catalog_service.core.logger import logger
from catalog_service.repositories.category import CategoryRepository
from catalog_service.repositories.product import ProductRepository
from catalog_service.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from catalog_service.services.category_matcher import CATEGORY_FIELDS, CategoryMatcher
from catalog_service.services.hierarchy import CategoryHierarchyManager
from catalog_service.services.sku import SkuAllocator, normalize_sku
from catalog_service.services.stock import derive_status
from catalog_service.services.variants import VariantValidationResult, VariantValidator
from catalog_service.utils.validators import (
    coerce_float,
    coerce_int,
    normalize_reference,
    optional_float,
    require_text,
    to_object_id,
)

SORTABLE_FIELDS = {"created_at", "updated_at", "price", "name", "stock_quantity"}


class ProductService:
    """Service layer for vendor product writes and storefront reads"""

    def __init__(self,
                 repository: ProductRepository,
                 category_repository: CategoryRepository,
                 sku_allocator: SkuAllocator = None,
                 validator: VariantValidator = None,
                 matcher: CategoryMatcher = None):
        self.repository = repository
        self.category_repository = category_repository
        self.sku_allocator = sku_allocator or SkuAllocator(repository)
        self.validator = validator or VariantValidator()
        self.matcher = matcher or CategoryMatcher(CategoryHierarchyManager(category_repository))

    # Input normalization

    @staticmethod
    def _vendor_object_id(vendor_id: Any) -> ObjectId:
        vendor_oid = normalize_reference(vendor_id, "vendor_id")
        if vendor_oid is None:
            raise MalformedInputError("vendor_id is required", field="vendor_id")
        return vendor_oid

    @staticmethod
    def _price(value: Any, field: str) -> Optional[float]:
        price = optional_float(value, field)
        if price is not None and price < 0:
            raise MalformedInputError(f"{field} cannot be negative", field=field, value=price)
        return price

    @staticmethod
    def _explicit_quantity(value: Any) -> Optional[int]:
        """Top-level stock quantity if the caller supplied one"""
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        quantity = coerce_int(value, "stock_quantity")
        if quantity < 0:
            raise MalformedInputError("stock_quantity cannot be negative", field="stock_quantity", value=quantity)
        return quantity

    async def _category_reference(self, value: Any, field: str) -> Optional[ObjectId]:
        """Normalize a category reference and check that the node exists"""
        category_oid = normalize_reference(value, field)
        if category_oid is not None and await self.category_repository.find_by_id(category_oid) is None:
            raise NotFoundError("Category not found", field=field, value=category_oid)
        return category_oid

    def _validate_variants(self, variants, explicit_quantity: Optional[int]) -> Optional[VariantValidationResult]:
        if variants is None or variants.color_variants is None:
            return None
        return self.validator.validate(variants.color_variants, explicit_quantity)

    @staticmethod
    def _variants_document(result: VariantValidationResult) -> Dict[str, Any]:
        return {"color_variants": [color.model_dump(mode="json") for color in result.color_variants]}

    # SKU persistence

    async def _ensure_sku_free(self, sku: str, exclude_id: ObjectId = None) -> None:
        if await self.repository.sku_exists(sku, exclude_id=exclude_id):
            raise ConflictError("A product with this SKU already exists", details={"field": "sku", "value": sku})

    async def _persist_with_sku(self, write, explicit_sku: Optional[str], name: str, vendor_id: ObjectId):
        """
        Run write(sku) with an explicit or freshly allocated SKU.

        The unique sku index is the final arbiter: a DuplicateKeyError on an
        allocated SKU resumes allocation from the next counter, on an explicit
        SKU it is a conflict.
        """
        if explicit_sku:
            try:
                return await write(explicit_sku)
            except DuplicateKeyError:
                raise ConflictError(
                    "A product with this SKU already exists",
                    details={"field": "sku", "value": explicit_sku},
                )

        base = self.sku_allocator.candidate_base(name, str(vendor_id))
        sku = await self.sku_allocator.first_free(base)
        while True:
            try:
                return await write(sku)
            except DuplicateKeyError:
                logger.info(
                    f"SKU {sku} taken at write time, allocating next",
                    metadata={"event": "sku_collision_retry", "sku": sku}
                )
                sku = await self.sku_allocator.first_free(
                    base, self.sku_allocator.counter_of(sku, base) + 1
                )

    # Writes

    async def create_product(self, vendor_id: str, product_data: ProductCreate) -> ProductResponse:
        """Create a product for a vendor"""
        vendor_oid = self._vendor_object_id(vendor_id)
        name = require_text(product_data.name, "name", max_length=255)

        price = coerce_float(product_data.price, "price")
        if price < 0:
            raise MalformedInputError("price cannot be negative", field="price", value=price)
        original_price = self._price(product_data.original_price, "original_price")

        references = {"brand_id": normalize_reference(product_data.brand_id, "brand_id")}
        for field in CATEGORY_FIELDS:
            references[field] = await self._category_reference(getattr(product_data, field), field)

        explicit_quantity = self._explicit_quantity(product_data.stock_quantity)
        result = self._validate_variants(product_data.variants, explicit_quantity)
        stock_quantity = result.stock_quantity if result else explicit_quantity
        if stock_quantity is None:
            raise MalformedInputError("stock_quantity is required", field="stock_quantity")

        explicit_sku = normalize_sku(product_data.sku)
        if explicit_sku:
            await self._ensure_sku_free(explicit_sku)

        document = {
            "name": name,
            "description": (product_data.description or "").strip(),
            "price": price,
            "original_price": original_price,
            "vendor_id": vendor_oid,
            **references,
            "stock_quantity": stock_quantity,
            "stock": derive_status(stock_quantity).value,
            "variants": self._variants_document(result) if result else {"color_variants": []},
            "images": product_data.images,
            "tags": product_data.tags,
            "is_visible": True if product_data.is_visible is None else product_data.is_visible,
            "is_active": True,
        }

        async def insert(sku: str) -> ProductResponse:
            return await self.repository.insert({**document, "sku": sku})

        product = await self._persist_with_sku(insert, explicit_sku, name, vendor_oid)

        logger.info(
            f"Created product {product.id}",
            metadata={
                "event": "create_product",
                "product_id": product.id,
                "vendor_id": str(vendor_oid),
                "sku": product.sku,
                "stock_quantity": product.stock_quantity,
            }
        )
        return product

    async def update_product(self, product_id: str, vendor_id: str, product_data: ProductUpdate) -> ProductResponse:
        """
        Update a vendor's product. Only fields present in the request are
        applied; variants are replaced wholesale and re-validated in full.
        """
        vendor_oid = self._vendor_object_id(vendor_id)
        product_oid, existing = await self._require_owned(product_id, vendor_oid)
        provided = product_data.model_fields_set
        fields: Dict[str, Any] = {}

        name = existing.get("name")
        if "name" in provided and product_data.name is not None:
            name = require_text(product_data.name, "name", max_length=255)
            fields["name"] = name

        if "description" in provided:
            fields["description"] = (product_data.description or "").strip()
        if "price" in provided and product_data.price is not None:
            price = coerce_float(product_data.price, "price")
            if price < 0:
                raise MalformedInputError("price cannot be negative", field="price", value=price)
            fields["price"] = price
        if "original_price" in provided:
            fields["original_price"] = self._price(product_data.original_price, "original_price")

        if "brand_id" in provided:
            fields["brand_id"] = normalize_reference(product_data.brand_id, "brand_id")
        for field in CATEGORY_FIELDS:
            if field in provided:
                fields[field] = await self._category_reference(getattr(product_data, field), field)

        explicit_quantity = self._explicit_quantity(product_data.stock_quantity)
        result = self._validate_variants(product_data.variants, explicit_quantity)
        new_quantity = explicit_quantity
        if result is not None:
            fields["variants"] = self._variants_document(result)
            if result.stock_quantity is not None:
                new_quantity = result.stock_quantity

        if new_quantity is not None:
            fields["stock_quantity"] = new_quantity
            fields["stock"] = derive_status(new_quantity).value
        elif result is None and product_data.stock is not None:
            # Quantity untouched: the caller's status is taken as given
            fields["stock"] = product_data.stock.value

        for field in ("images", "tags"):
            if field in provided and getattr(product_data, field) is not None:
                fields[field] = getattr(product_data, field)
        if "is_visible" in provided and product_data.is_visible is not None:
            fields["is_visible"] = product_data.is_visible

        explicit_sku = normalize_sku(product_data.sku) if "sku" in provided else None
        if explicit_sku and explicit_sku != existing.get("sku"):
            await self._ensure_sku_free(explicit_sku, exclude_id=product_oid)
        regenerate = not explicit_sku and (name != existing.get("name") or not existing.get("sku"))

        async def apply(sku: Optional[str]) -> Optional[ProductResponse]:
            update = {**fields, "sku": sku} if sku else fields
            return await self.repository.update(product_oid, update)

        if explicit_sku or regenerate:
            product = await self._persist_with_sku(apply, explicit_sku, name, vendor_oid)
        else:
            product = await apply(None)
        if not product:
            raise NotFoundError("Product not found", field="product_id", value=product_oid)

        logger.info(
            f"Updated product {product_id}",
            metadata={
                "event": "update_product",
                "product_id": product.id,
                "fields": sorted(fields),
                "sku_regenerated": regenerate,
            }
        )
        return product

    async def delete_product(self, product_id: str, vendor_id: str) -> None:
        """Soft delete a vendor's product"""
        vendor_oid = self._vendor_object_id(vendor_id)
        product_oid = normalize_reference(product_id, "product_id")
        if product_oid is None or not await self.repository.soft_delete(product_oid, vendor_oid):
            raise NotFoundError("Product not found", field="product_id", value=product_id)

        logger.info(
            f"Soft deleted product {product_id}",
            metadata={"event": "soft_delete_product", "product_id": str(product_oid), "vendor_id": str(vendor_oid)}
        )

    # Reads

    async def _require_owned(self, product_id: Any, vendor_oid: ObjectId) -> Tuple[ObjectId, Dict[str, Any]]:
        """Fetch an active product of this vendor; other vendors' products read as missing"""
        product_oid = normalize_reference(product_id, "product_id")
        existing = await self.repository.find_by_id(product_oid) if product_oid else None
        if existing is None or to_object_id(existing.get("vendor_id")) != vendor_oid:
            raise NotFoundError("Product not found", field="product_id", value=product_id)
        return product_oid, existing

    async def get_product(self, product_id: str) -> ProductResponse:
        product = await self.repository.get_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found", field="product_id", value=product_id)
        return product

    async def get_vendor_product(self, product_id: str, vendor_id: str) -> ProductResponse:
        _, existing = await self._require_owned(product_id, self._vendor_object_id(vendor_id))
        return self.repository.to_response(existing)

    @staticmethod
    def _empty_page(page: int, limit: int) -> ProductListResponse:
        return ProductListResponse(products=[], total=0, page=page, limit=limit, total_pages=0)

    async def _list(self, query: Dict[str, Any], and_conditions: List[Dict[str, Any]],
                    page: int, limit: int, sort_by: str, sort_order: str) -> ProductListResponse:
        if sort_by not in SORTABLE_FIELDS:
            raise MalformedInputError(f"Cannot sort by {sort_by}", field="sort_by", value=sort_by)
        if and_conditions:
            query["$and"] = and_conditions
        direction = 1 if sort_order == "asc" else -1

        products, total = await self.repository.list_products(
            query, [(sort_by, direction), ("_id", direction)], skip=(page - 1) * limit, limit=limit
        )
        return ProductListResponse(
            products=products,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    @staticmethod
    def _search_condition(search: Optional[str]) -> Optional[Dict[str, Any]]:
        if not search or not search.strip():
            return None
        pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
        return {"$or": [{"name": pattern}, {"description": pattern}]}

    @staticmethod
    def _page_bounds(page: int, limit: Optional[int]) -> Tuple[int, int]:
        limit = limit or config.default_page_size
        return max(page, 1), min(max(limit, 1), config.max_page_size)

    async def list_storefront_products(self,
                                       search: Optional[str] = None,
                                       category_id: Optional[str] = None,
                                       subcategory_id: Optional[str] = None,
                                       brand_id: Optional[str] = None,
                                       vendor_id: Optional[str] = None,
                                       min_price: Any = None,
                                       max_price: Any = None,
                                       has_discount: bool = False,
                                       page: int = 1,
                                       limit: Optional[int] = None,
                                       sort_by: str = "created_at",
                                       sort_order: str = "desc") -> ProductListResponse:
        """
        List visible products for the storefront.

        Category filters go through the depth-aware matcher; a filter that
        does not resolve to a category, like an invalid brand or vendor id,
        yields an empty page rather than an unfiltered listing.
        """
        page, limit = self._page_bounds(page, limit)
        query: Dict[str, Any] = {"is_visible": True, "is_active": True}
        and_conditions = []

        for field, value in (("vendor_id", vendor_id), ("brand_id", brand_id)):
            if value and value != "all":
                object_id = to_object_id(value.strip())
                if object_id is None:
                    return self._empty_page(page, limit)
                query[field] = object_id

        search_condition = self._search_condition(search)
        if search_condition:
            and_conditions.append(search_condition)

        for value in (category_id, subcategory_id):
            if value and value != "all":
                criteria = await self.matcher.build(value)
                if criteria.is_empty:
                    return self._empty_page(page, limit)
                and_conditions.append(criteria.as_filter())

        price_range = {}
        min_value = optional_float(min_price, "min_price")
        max_value = optional_float(max_price, "max_price")
        if min_value is not None:
            price_range["$gte"] = min_value
        if max_value is not None:
            price_range["$lte"] = max_value
        if price_range:
            query["price"] = price_range

        if has_discount:
            and_conditions.append({
                "original_price": {"$gt": 0},
                "$expr": {"$gt": ["$original_price", "$price"]},
            })

        return await self._list(query, and_conditions, page, limit, sort_by, sort_order)

    async def list_vendor_products(self,
                                   vendor_id: str,
                                   search: Optional[str] = None,
                                   stock: Optional[str] = None,
                                   category_id: Optional[str] = None,
                                   page: int = 1,
                                   limit: Optional[int] = None,
                                   sort_by: str = "created_at",
                                   sort_order: str = "desc") -> ProductListResponse:
        """List a vendor's own active products, including hidden ones"""
        page, limit = self._page_bounds(page, limit)
        query: Dict[str, Any] = {"vendor_id": self._vendor_object_id(vendor_id), "is_active": True}
        and_conditions = []

        search_condition = self._search_condition(search)
        if search_condition:
            and_conditions.append(search_condition)
        if stock and stock != "all":
            query["stock"] = stock
        if category_id and category_id != "all":
            criteria = await self.matcher.build(category_id)
            if criteria.is_empty:
                return self._empty_page(page, limit)
            and_conditions.append(criteria.as_filter())

        return await self._list(query, and_conditions, page, limit, sort_by, sort_order)
