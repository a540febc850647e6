"""
Error types and handlers for the Catalog Service

Every failure raised by the engine is an ErrorResponse subclass carrying an
HTTP status and a details dict that names the offending field/value, so the
API layer can render it without inspecting the message.
"""

import traceback
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalog_service.core.config import config
from catalog_service.core.logger import logger


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    error: str
    details: Optional[dict] = None


# Lookup / conflict errors

class NotFoundError(ErrorResponse):
    """Referenced category, product or vendor does not exist"""

    def __init__(self, message: str, field: str = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, status_code=404, details=details)


class ParentNotFoundError(NotFoundError):
    def __init__(self, parent_id: Any):
        super().__init__("Parent category not found", field="parent_id", value=parent_id)


class ConflictError(ErrorResponse):
    """Delete-with-children, duplicate SKU, duplicate category name"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, status_code=409, details=details)


class MalformedInputError(ErrorResponse):
    """Non-numeric where numeric expected, missing required string fields"""

    def __init__(self, message: str, field: str, value: Any = None):
        details = {"field": field}
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, status_code=400, details=details)


# Hierarchy violations

class CircularReferenceError(ErrorResponse):
    def __init__(self, node_id: Any, parent_id: Any):
        super().__init__(
            "Circular parent reference detected",
            status_code=400,
            details={"field": "parent_id", "node_id": str(node_id), "value": str(parent_id)},
        )


class DepthExceededError(ErrorResponse):
    def __init__(self, parent_id: Any, parent_depth: int, max_depth: int):
        super().__init__(
            f"Maximum category depth reached. Cannot create subcategories beyond level {max_depth}.",
            status_code=400,
            details={
                "field": "parent_id",
                "value": str(parent_id),
                "parent_depth": parent_depth,
                "max_depth": max_depth,
            },
        )


# Variant validation failures

class VariantValidationError(ErrorResponse):
    """Base class for failures that name the offending color/size"""

    def __init__(self, message: str, color: str = None, size: str = None, **extra):
        details = {"field": "variants.color_variants"}
        if color is not None:
            details["color"] = color
        if size is not None:
            details["size"] = size
        details.update(extra)
        super().__init__(message, status_code=400, details=details)


class InvalidVariantError(VariantValidationError):
    pass


class EmptyVariantSetError(VariantValidationError):
    def __init__(self):
        super().__init__("At least one color variant must have size variants")


class DuplicateSizeError(VariantValidationError):
    def __init__(self, color: str, size: str):
        super().__init__(f'Duplicate size "{size}" found for color "{color}"', color=color, size=size)


class NegativePriceError(VariantValidationError):
    def __init__(self, color: str, size: str, price: float, price_field: str = "price"):
        super().__init__(
            f'Price for size "{size}" in color "{color}" cannot be negative',
            color=color, size=size, price_field=price_field, value=price,
        )


class PriceConsistencyError(VariantValidationError):
    def __init__(self, color: str, size: str, price: float, original_price: float):
        super().__init__(
            f'Original price for size "{size}" in color "{color}" must be greater than '
            f'or equal to the sale price',
            color=color, size=size, price=price, original_price=original_price,
        )


class NegativeStockError(VariantValidationError):
    def __init__(self, color: str, size: str, quantity: int):
        super().__init__(
            f'Stock quantity for size "{size}" in color "{color}" cannot be negative',
            color=color, size=size, value=quantity,
        )


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for custom ErrorResponse exceptions"""
    metadata = {
        "event": "error_response",
        "error_type": type(exc).__name__,
        "status_code": exc.status_code,
        "url": str(request.url),
        "method": request.method,
        **exc.details,
    }

    if config.environment == "development" and exc.status_code >= 500:
        metadata["traceback"] = traceback.format_exc()

    # Rejected writes are expected outcomes, not faults
    if exc.status_code >= 500:
        logger.error(f"Error: {exc.message}", metadata=metadata)
    else:
        logger.warning(f"Rejected: {exc.message}", metadata=metadata)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details}
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for FastAPI HTTPException"""
    logger.error(
        f"HTTPException: {exc.detail}",
        metadata={
            "event": "http_exception",
            "status_code": exc.status_code,
            "url": str(request.url),
            "method": request.method,
        }
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
