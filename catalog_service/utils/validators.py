"""
Input normalization helpers applied at the request boundary.

Request payloads are untrusted: numbers may arrive as strings and references
may arrive as a bare id or as an embedded object carrying `_id`/`id`. These
helpers turn them into one canonical shape before any engine logic runs.
"""

import math
from typing import Any, Optional

from bson.objectid import ObjectId

from catalog_service.core.errors import MalformedInputError


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Convert to ObjectId, returning None for anything unparseable"""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def normalize_reference(value: Any, field: str) -> Optional[ObjectId]:
    """
    Extract a canonical ObjectId from a reference field.

    Accepts None/"" (no reference), an ObjectId, an id string, or a mapping
    with an `_id` or `id` key.
    """
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("_id") or value.get("id")
        if value is None:
            raise MalformedInputError(f"Invalid {field} format", field=field)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    object_id = to_object_id(value)
    if object_id is None:
        raise MalformedInputError(f"Invalid {field} format", field=field, value=value)
    return object_id


def coerce_int(value: Any, field: str) -> int:
    """
    Coerce an untrusted value to int.

    Integral floats and numeric strings are accepted; anything else
    (including NaN and fractional values) is a MalformedInputError.
    """
    if isinstance(value, bool):
        raise MalformedInputError(f"{field} must be a whole number", field=field, value=value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                raise MalformedInputError(f"{field} must be a whole number", field=field, value=value)
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    raise MalformedInputError(f"{field} must be a whole number", field=field, value=value)


def coerce_float(value: Any, field: str) -> float:
    """Coerce an untrusted value to a finite float"""
    if isinstance(value, bool):
        raise MalformedInputError(f"{field} must be a number", field=field, value=value)
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            raise MalformedInputError(f"{field} must be a number", field=field, value=value)
    else:
        raise MalformedInputError(f"{field} must be a number", field=field, value=value)
    if not math.isfinite(result):
        raise MalformedInputError(f"{field} must be a number", field=field, value=value)
    return result


def optional_float(value: Any, field: str) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_float(value, field)


def require_text(value: Any, field: str, max_length: int = None) -> str:
    """Trim a required string field, rejecting empty or non-string input"""
    if not isinstance(value, str) or not value.strip():
        raise MalformedInputError(f"{field} is required", field=field)
    text = value.strip()
    if max_length is not None and len(text) > max_length:
        raise MalformedInputError(
            f"{field} cannot exceed {max_length} characters", field=field, value=text
        )
    return text
