"""Tests for error handling"""
import json

import pytest
from unittest.mock import Mock, patch
from fastapi import HTTPException
from fastapi.responses import JSONResponse

from catalog_service.core.errors import (
    CircularReferenceError,
    ConflictError,
    DepthExceededError,
    DuplicateSizeError,
    EmptyVariantSetError,
    ErrorResponse,
    MalformedInputError,
    NegativePriceError,
    NotFoundError,
    ParentNotFoundError,
    PriceConsistencyError,
    VariantValidationError,
    error_response_handler,
    http_exception_handler,
)


class TestErrorResponse:
    """Test ErrorResponse exception class"""

    def test_error_response_creation(self):
        error = ErrorResponse("Something went wrong", status_code=400)
        assert error.message == "Something went wrong"
        assert error.status_code == 400
        assert error.details == {}

    def test_error_response_default_status_code(self):
        error = ErrorResponse("Bad request")
        assert error.status_code == 400

    def test_error_response_str(self):
        error = ErrorResponse("Test error")
        assert str(error) == "Test error"


class TestTypedErrors:
    """Typed errors carry their status and the offending field/value"""

    def test_not_found_details(self):
        error = NotFoundError("Category not found", field="category_id", value="abc")
        assert error.status_code == 404
        assert error.details == {"field": "category_id", "value": "abc"}

    def test_parent_not_found_is_not_found(self):
        error = ParentNotFoundError("65f1a2b3c4d5e6f7a8b9c0d1")
        assert isinstance(error, NotFoundError)
        assert error.details["field"] == "parent_id"

    def test_conflict_status(self):
        assert ConflictError("taken").status_code == 409

    def test_malformed_input_names_field(self):
        error = MalformedInputError("price must be a number", field="price", value="abc")
        assert error.status_code == 400
        assert error.details == {"field": "price", "value": "abc"}

    def test_hierarchy_errors(self):
        cycle = CircularReferenceError("a", "b")
        depth = DepthExceededError("p", 3, 3)
        assert cycle.status_code == depth.status_code == 400
        assert cycle.details["node_id"] == "a"
        assert depth.details["parent_depth"] == 3
        assert "level 3" in depth.message

    def test_variant_errors_name_color_and_size(self):
        error = DuplicateSizeError("Red", "M")
        assert isinstance(error, VariantValidationError)
        assert error.details["color"] == "Red"
        assert error.details["size"] == "M"
        assert error.details["field"] == "variants.color_variants"

    def test_price_errors(self):
        consistency = PriceConsistencyError("Red", "M", 30.0, 25.0)
        negative = NegativePriceError("Red", "M", -1.0, price_field="original_price")
        assert consistency.details["original_price"] == 25.0
        assert negative.details["price_field"] == "original_price"

    def test_empty_variant_set_has_no_color(self):
        error = EmptyVariantSetError()
        assert "color" not in error.details


class TestErrorHandlers:
    """Test error handler functions"""

    @pytest.mark.asyncio
    async def test_error_response_handler(self):
        mock_request = Mock()
        mock_request.url = "http://test/api/admin/categories"
        mock_request.method = "POST"
        error = ConflictError("Category with this name already exists", details={"field": "name"})

        with patch('catalog_service.core.errors.logger') as mock_logger:
            response = await error_response_handler(mock_request, error)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 409
        content = json.loads(response.body.decode())
        assert content == {"error": "Category with this name already exists", "details": {"field": "name"}}
        mock_logger.warning.assert_called_once()
        mock_logger.error.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_response_handler_logs_server_errors(self):
        mock_request = Mock()
        mock_request.url = "http://test/api/storefront/products"
        mock_request.method = "GET"
        error = ErrorResponse("Database error during product listing", status_code=503)

        with patch('catalog_service.core.errors.logger') as mock_logger:
            response = await error_response_handler(mock_request, error)

        assert response.status_code == 503
        mock_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_http_exception_handler(self):
        mock_request = Mock()
        mock_request.url = "http://test/"
        mock_request.method = "GET"
        exception = HTTPException(status_code=403, detail="Forbidden")

        with patch('catalog_service.core.errors.logger'):
            response = await http_exception_handler(mock_request, exception)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 403
        assert "Forbidden" in response.body.decode()
