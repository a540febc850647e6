"""
Correlation ID Middleware for request tracing
Ensures every request has a correlation ID that the structured logger picks up
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_service.core.config import config
from catalog_service.utils.correlation_id import (
    correlation_id_context,
    extract_correlation_id_from_headers,
)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle correlation IDs for request tracing

    - Extracts correlation ID from request headers (or generates a new one)
    - Stores it in context for use throughout the request lifecycle
    - Adds it to response headers
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = extract_correlation_id_from_headers(
            dict(request.headers), config.correlation_id_header
        )

        token = correlation_id_context.set(correlation_id)
        request.state.correlation_id = correlation_id
        try:
            response = await call_next(request)
        finally:
            correlation_id_context.reset(token)

        response.headers[config.correlation_id_header] = correlation_id
        return response
