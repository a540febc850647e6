"""Unit tests for the variant consistency validator"""
import pytest

from catalog_service.core.errors import (
    DuplicateSizeError,
    EmptyVariantSetError,
    InvalidVariantError,
    MalformedInputError,
    NegativePriceError,
    NegativeStockError,
    PriceConsistencyError,
)
from catalog_service.models.product import StockStatus
from catalog_service.services.variants import VariantValidator


@pytest.fixture
def validator():
    return VariantValidator()


def color(name, *sizes, **extra):
    return {"colorName": name, "sizeVariants": list(sizes), **extra}


def size(name, quantity, **extra):
    return {"size": name, "stockQuantity": quantity, **extra}


class TestAggregation:

    def test_total_stock_and_statuses(self, validator):
        result = validator.validate([color("Red", size("S", 10), size("M", 15))])

        assert result.total_stock == 25
        assert result.stock_quantity == 25
        assert result.stock == StockStatus.IN_STOCK
        statuses = [s.stock_status for s in result.color_variants[0].size_variants]
        assert statuses == [StockStatus.LOW_STOCK, StockStatus.IN_STOCK]

    def test_aggregates_across_colors(self, validator):
        result = validator.validate([
            color("Red", size("S", 2)),
            color("Blue", size("S", 3), size("L", 0)),
        ])

        assert result.total_stock == 5
        assert result.stock == StockStatus.LOW_STOCK
        assert result.color_variants[1].size_variants[1].stock_status == StockStatus.OUT_OF_STOCK

    def test_explicit_quantity_wins(self, validator):
        result = validator.validate([color("Red", size("S", 10), size("M", 15))], explicit_stock_quantity=3)

        assert result.total_stock == 25
        assert result.stock_quantity == 3
        assert result.stock == StockStatus.LOW_STOCK

    def test_explicit_zero_quantity_wins(self, validator):
        result = validator.validate([color("Red", size("S", 40))], explicit_stock_quantity=0)

        assert result.stock_quantity == 0
        assert result.stock == StockStatus.OUT_OF_STOCK

    def test_empty_list_leaves_quantity_unset(self, validator):
        result = validator.validate([])

        assert result.color_variants == []
        assert result.stock_quantity is None
        assert result.stock is None


class TestNormalization:

    def test_numbers_may_arrive_as_strings(self, validator):
        result = validator.validate([color("Red", size("M", "7", price="19.5", originalPrice="25"))])

        sv = result.color_variants[0].size_variants[0]
        assert sv.stock_quantity == 7
        assert sv.price == 19.5
        assert sv.original_price == 25.0

    def test_non_numeric_quantity_is_malformed(self, validator):
        with pytest.raises(MalformedInputError):
            validator.validate([color("Red", size("M", "seven"))])

    def test_non_numeric_price_is_malformed(self, validator):
        with pytest.raises(MalformedInputError):
            validator.validate([color("Red", size("M", 1, price="cheap"))])

    def test_names_are_trimmed(self, validator):
        result = validator.validate([color("  Red ", size(" M ", 1))])

        assert result.color_variants[0].color_name == "Red"
        assert result.color_variants[0].size_variants[0].size == "M"

    def test_snake_case_keys_accepted(self, validator):
        result = validator.validate([{
            "color_name": "Red",
            "color_code": "#FF0000",
            "thumbnail_image": "https://cdn.example.com/red.png",
            "size_variants": [{"size": "M", "stock_quantity": 4, "original_price": 10}],
        }])

        cv = result.color_variants[0]
        assert cv.color_code == "#FF0000"
        assert cv.thumbnail_image == "https://cdn.example.com/red.png"
        assert cv.size_variants[0].original_price == 10.0

    def test_colors_without_name_are_skipped(self, validator):
        result = validator.validate([{"colorName": "", "sizeVariants": []}, color("Red", size("M", 1))])

        assert [cv.color_name for cv in result.color_variants] == ["Red"]

    def test_incomplete_sizes_are_dropped(self, validator):
        result = validator.validate([color("Red", size("M", 1), {"size": "L"}, {"stockQuantity": 3}, size("", 2))])

        assert [sv.size for sv in result.color_variants[0].size_variants] == ["M"]

    def test_only_blank_entries_yield_no_variants(self, validator):
        result = validator.validate([{}, {"colorName": "  "}])

        assert result.color_variants == []


class TestRejections:

    def test_all_named_entries_dropped_is_invalid(self, validator):
        with pytest.raises(InvalidVariantError):
            validator.validate([{"colorName": "", "colorCode": "#FF0000", "sizeVariants": [size("M", 1)]}])

    def test_no_color_with_sizes_is_empty_set(self, validator):
        with pytest.raises(EmptyVariantSetError):
            validator.validate([color("Red"), color("Blue", {"size": "M"})])

    def test_duplicate_size_in_color(self, validator):
        with pytest.raises(DuplicateSizeError) as exc_info:
            validator.validate([color("Red", size("M", 5), size(" M", 3))])

        assert exc_info.value.details["color"] == "Red"
        assert exc_info.value.details["size"] == "M"

    def test_same_size_in_different_colors_is_fine(self, validator):
        result = validator.validate([color("Red", size("M", 1)), color("Blue", size("M", 1))])
        assert result.total_stock == 2

    def test_size_names_are_case_sensitive(self, validator):
        result = validator.validate([color("Red", size("m", 1), size("M", 1))])
        assert len(result.color_variants[0].size_variants) == 2

    def test_negative_price(self, validator):
        with pytest.raises(NegativePriceError):
            validator.validate([color("Red", size("M", 1, price=-1))])

    def test_negative_original_price(self, validator):
        with pytest.raises(NegativePriceError) as exc_info:
            validator.validate([color("Red", size("M", 1, originalPrice=-5))])

        assert exc_info.value.details["price_field"] == "original_price"

    def test_original_below_price(self, validator):
        with pytest.raises(PriceConsistencyError) as exc_info:
            validator.validate([color("Red", size("M", 1, price=30, originalPrice=25))])

        assert exc_info.value.details["size"] == "M"

    def test_original_equal_to_price_accepted(self, validator):
        result = validator.validate([color("Red", size("M", 1, price=30, originalPrice=30))])
        assert result.color_variants[0].size_variants[0].original_price == 30.0

    def test_negative_stock(self, validator):
        with pytest.raises(NegativeStockError):
            validator.validate([color("Red", size("M", -2))])

    def test_duplicate_checked_before_prices(self, validator):
        with pytest.raises(DuplicateSizeError):
            validator.validate([color("Red", size("M", 1, price=-1), size("M", 1))])
