"""
Correlation ID utilities for request tracing
"""

import uuid
from contextvars import ContextVar
from typing import Dict, Optional

# Context variable to store correlation ID across async operations
correlation_id_context: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID from the current context"""
    return correlation_id_context.get()


def create_correlation_id() -> str:
    """Create a new UUID-based correlation ID"""
    return str(uuid.uuid4())


def extract_correlation_id_from_headers(headers: Dict[str, str], header_name: str) -> str:
    """
    Extract correlation ID from request headers.
    Generates a new one if not present.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    return lowered.get(header_name.lower()) or create_correlation_id()
