"""
Core module initialization
"""

from .config import config
from .errors import (
    ErrorResponse,
    ErrorResponseModel,
    NotFoundError,
    ParentNotFoundError,
    ConflictError,
    MalformedInputError,
    CircularReferenceError,
    DepthExceededError,
    VariantValidationError,
    InvalidVariantError,
    EmptyVariantSetError,
    DuplicateSizeError,
    NegativePriceError,
    PriceConsistencyError,
    NegativeStockError,
)
from .logger import logger

__all__ = [
    "config",
    "logger",
    "ErrorResponse",
    "ErrorResponseModel",
    "NotFoundError",
    "ParentNotFoundError",
    "ConflictError",
    "MalformedInputError",
    "CircularReferenceError",
    "DepthExceededError",
    "VariantValidationError",
    "InvalidVariantError",
    "EmptyVariantSetError",
    "DuplicateSizeError",
    "NegativePriceError",
    "PriceConsistencyError",
    "NegativeStockError",
]
