"""
Variant Consistency Validator

Normalizes an untrusted color -> size variant payload into one coherent
stock/price state. Uniqueness and aggregation are whole-list properties, so
the full list is validated on every create and every update that touches it.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from catalog_service.core.errors import (
    DuplicateSizeError,
    EmptyVariantSetError,
    InvalidVariantError,
    NegativePriceError,
    NegativeStockError,
    PriceConsistencyError,
)
from catalog_service.models.product import ColorVariant, SizeVariant, StockStatus
from catalog_service.services.stock import derive_status
from catalog_service.utils.validators import coerce_int, optional_float


class VariantValidationResult(BaseModel):
    """Normalized variants plus the product-level stock they imply"""
    color_variants: List[ColorVariant] = Field(default_factory=list)
    total_stock: int = 0
    # None when neither an explicit quantity nor any size variant was supplied
    stock_quantity: Optional[int] = None
    stock: Optional[StockStatus] = None


def _pick(entry: Dict[str, Any], *keys: str) -> Any:
    """First non-None value among camelCase/snake_case spellings of a key"""
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _has_content(entry: Any) -> bool:
    if isinstance(entry, dict):
        return any(
            _text(value) if not isinstance(value, (list, dict)) else bool(value)
            for value in entry.values()
        )
    return bool(entry)


class VariantValidator:
    """Validates color variants and aggregates their stock"""

    def validate(self,
                 color_variants: Optional[List[Any]],
                 explicit_stock_quantity: Optional[int] = None) -> VariantValidationResult:
        """
        Validate a raw color variant list.

        Args:
            color_variants: Raw entries from the request, camelCase or snake_case keys
            explicit_stock_quantity: Top-level quantity the caller supplied, if any;
                it wins over the aggregated variant stock

        Raises:
            MalformedInputError, InvalidVariantError, EmptyVariantSetError,
            DuplicateSizeError, NegativePriceError, PriceConsistencyError,
            NegativeStockError
        """
        raw_colors = color_variants or []

        colors: List[Dict[str, Any]] = []
        dropped_with_content = False
        for entry in raw_colors:
            color_name = _text(_pick(entry, "colorName", "color_name")) if isinstance(entry, dict) else ""
            if not color_name:
                dropped_with_content = dropped_with_content or _has_content(entry)
                continue
            colors.append({
                "color_name": color_name,
                "color_code": _text(_pick(entry, "colorCode", "color_code")) or None,
                "thumbnail_image": _text(_pick(entry, "thumbnailImage", "thumbnail_image")) or None,
                "size_variants": self._normalize_sizes(
                    color_name, _pick(entry, "sizeVariants", "size_variants") or []
                ),
            })

        if not colors and dropped_with_content:
            raise InvalidVariantError("Each color variant must have a color name")

        if colors and not any(color["size_variants"] for color in colors):
            raise EmptyVariantSetError()

        for color in colors:
            self._check_sizes(color["color_name"], color["size_variants"])

        validated = [
            ColorVariant(
                color_name=color["color_name"],
                color_code=color["color_code"],
                thumbnail_image=color["thumbnail_image"],
                size_variants=[
                    SizeVariant(
                        size=size["size"],
                        price=size["price"],
                        original_price=size["original_price"],
                        stock_quantity=size["stock_quantity"],
                        stock_status=derive_status(size["stock_quantity"]),
                    )
                    for size in color["size_variants"]
                ],
            )
            for color in colors
        ]

        total_stock = sum(
            size.stock_quantity for color in validated for size in color.size_variants
        )

        if explicit_stock_quantity is not None:
            stock_quantity = explicit_stock_quantity
        elif validated:
            stock_quantity = total_stock
        else:
            stock_quantity = None

        return VariantValidationResult(
            color_variants=validated,
            total_stock=total_stock,
            stock_quantity=stock_quantity,
            stock=derive_status(stock_quantity) if stock_quantity is not None else None,
        )

    def _normalize_sizes(self, color_name: str, raw_sizes: List[Any]) -> List[Dict[str, Any]]:
        """Drop sizes missing a name or quantity; trim and coerce the rest"""
        sizes = []
        for entry in raw_sizes:
            if not isinstance(entry, dict):
                continue
            size = _text(entry.get("size"))
            raw_quantity = _pick(entry, "stockQuantity", "stock_quantity")
            if not size or raw_quantity is None or _text(raw_quantity) == "":
                continue
            field = f"variants.color_variants[{color_name}].{size}"
            sizes.append({
                "size": size,
                "price": optional_float(entry.get("price"), f"{field}.price"),
                "original_price": optional_float(
                    _pick(entry, "originalPrice", "original_price"), f"{field}.original_price"
                ),
                "stock_quantity": coerce_int(raw_quantity, f"{field}.stock_quantity"),
            })
        return sizes

    def _check_sizes(self, color_name: str, sizes: List[Dict[str, Any]]) -> None:
        seen = set()
        for size in sizes:
            if size["size"] in seen:
                raise DuplicateSizeError(color_name, size["size"])
            seen.add(size["size"])

        for size in sizes:
            price = size["price"]
            original_price = size["original_price"]
            if price is not None and price < 0:
                raise NegativePriceError(color_name, size["size"], price)
            if original_price is not None and original_price < 0:
                raise NegativePriceError(
                    color_name, size["size"], original_price, price_field="original_price"
                )
            if price is not None and original_price is not None and original_price < price:
                raise PriceConsistencyError(color_name, size["size"], price, original_price)
            if size["stock_quantity"] < 0:
                raise NegativeStockError(color_name, size["size"], size["stock_quantity"])

