"""Unit tests for middleware components"""
import uuid

import pytest
from unittest.mock import Mock, patch

from catalog_service.middleware.correlation_id import CorrelationIdMiddleware
from catalog_service.utils.correlation_id import get_correlation_id


class MockRequest:
    def __init__(self, headers):
        self.headers = headers
        self.state = Mock()


def make_call_next(captured):
    async def call_next(req):
        captured.append(get_correlation_id())
        response = Mock()
        response.headers = {}
        return response
    return call_next


class TestCorrelationIdMiddleware:
    """Test CorrelationIdMiddleware functionality"""

    @pytest.mark.asyncio
    @patch('catalog_service.middleware.correlation_id.config')
    async def test_correlation_id_from_header(self, mock_config):
        mock_config.correlation_id_header = "X-Correlation-ID"
        middleware = CorrelationIdMiddleware(Mock())
        captured = []

        response = await middleware.dispatch(
            MockRequest({"x-correlation-id": "test-correlation-123"}), make_call_next(captured)
        )

        assert captured == ["test-correlation-123"]
        assert response.headers["X-Correlation-ID"] == "test-correlation-123"

    @pytest.mark.asyncio
    @patch('catalog_service.middleware.correlation_id.config')
    async def test_correlation_id_generated(self, mock_config):
        mock_config.correlation_id_header = "X-Correlation-ID"
        middleware = CorrelationIdMiddleware(Mock())
        captured = []

        response = await middleware.dispatch(MockRequest({}), make_call_next(captured))

        generated_id = captured[0]
        assert response.headers["X-Correlation-ID"] == generated_id
        uuid.UUID(generated_id)

    @pytest.mark.asyncio
    @patch('catalog_service.middleware.correlation_id.config')
    async def test_context_reset_after_request(self, mock_config):
        mock_config.correlation_id_header = "X-Correlation-ID"
        middleware = CorrelationIdMiddleware(Mock())

        await middleware.dispatch(MockRequest({"X-Correlation-ID": "abc"}), make_call_next([]))

        assert get_correlation_id() is None
