"""Tests for request input normalization helpers"""
import pytest
from bson import ObjectId

from catalog_service.core.errors import MalformedInputError
from catalog_service.utils.validators import (
    coerce_float,
    coerce_int,
    normalize_reference,
    optional_float,
    require_text,
    to_object_id,
)

OID = "65f1a2b3c4d5e6f7a8b9c0d1"


class TestReferences:

    @pytest.mark.parametrize("value", [OID, f"  {OID} ", ObjectId(OID), {"_id": OID}, {"id": OID}])
    def test_reference_shapes(self, value):
        assert normalize_reference(value, "category_id") == ObjectId(OID)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_reference(self, value):
        assert normalize_reference(value, "category_id") is None

    @pytest.mark.parametrize("value", ["abc", {"name": "x"}, 12])
    def test_malformed_reference(self, value):
        with pytest.raises(MalformedInputError) as exc_info:
            normalize_reference(value, "parent_id")
        assert exc_info.value.details["field"] == "parent_id"

    def test_to_object_id_is_lenient(self):
        assert to_object_id("abc") is None
        assert to_object_id(OID) == ObjectId(OID)


class TestNumbers:

    @pytest.mark.parametrize("value,expected", [(3, 3), ("7", 7), (" 8 ", 8), (4.0, 4), ("5.0", 5)])
    def test_coerce_int(self, value, expected):
        assert coerce_int(value, "stock_quantity") == expected

    @pytest.mark.parametrize("value", ["seven", "", 2.5, float("nan"), True, None, [1]])
    def test_coerce_int_rejects(self, value):
        with pytest.raises(MalformedInputError):
            coerce_int(value, "stock_quantity")

    def test_coerce_float(self):
        assert coerce_float("19.99", "price") == 19.99
        assert coerce_float(5, "price") == 5.0

    @pytest.mark.parametrize("value", ["cheap", "nan", "inf", False, None])
    def test_coerce_float_rejects(self, value):
        with pytest.raises(MalformedInputError):
            coerce_float(value, "price")

    def test_optional_float(self):
        assert optional_float(None, "original_price") is None
        assert optional_float(" ", "original_price") is None
        assert optional_float("2", "original_price") == 2.0


class TestText:

    def test_require_text_trims(self):
        assert require_text("  Shirts ", "name") == "Shirts"

    @pytest.mark.parametrize("value", [None, "", "   ", 5])
    def test_require_text_rejects(self, value):
        with pytest.raises(MalformedInputError):
            require_text(value, "name")

    def test_require_text_length(self):
        with pytest.raises(MalformedInputError):
            require_text("x" * 101, "name", max_length=100)
