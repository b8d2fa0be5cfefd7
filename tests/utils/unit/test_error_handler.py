"""
Unit Tests: error handler (utils/error_handler.py)

Domain exceptions to HTTP status codes and JSON bodies.
"""

import json

import pytest

from exceptions import (
    AccountLockedException,
    InsufficientStockException,
    InvalidOrderTransitionException,
    MarketplaceException,
    OrderException,
    OrderNotFoundException,
    PaymentGatewayException,
    RateLimitExceededException,
)
from utils.error_handler import error_response, handle_service_error, handle_unexpected_error


class TestStatusMapping:

    @pytest.mark.parametrize("exception,status", [
        (OrderNotFoundException(5), 404),
        (InsufficientStockException(1, 5, 2), 409),
        (AccountLockedException(1, 10), 423),
        (PaymentGatewayException("HTTP 503"), 502),
    ])
    def test_mapped(self, exception, status):
        assert handle_service_error(exception)[0] == status

    def test_subclass_of_mapped_type(self):
        class LateOrderNotFound(OrderNotFoundException):
            pass

        assert handle_service_error(LateOrderNotFound(1))[0] == 404

    def test_unmapped_defaults_to_400(self):
        assert handle_service_error(OrderException("Something about orders"))[0] == 400
        assert handle_service_error(MarketplaceException("Generic"))[0] == 400


class TestResponses:

    def test_body(self):
        response = error_response(OrderNotFoundException(5))

        body = json.loads(response.body)
        assert response.status_code == 404
        assert body["success"] is False
        assert "5" in body["message"]
        assert body["details"]["order_id"] == 5

    def test_transition_details(self):
        response = error_response(InvalidOrderTransitionException(3, "Shipped", "Cancelled", "buyer"))

        body = json.loads(response.body)
        assert response.status_code == 409
        assert body["details"]["order_id"] == 3

    def test_rate_limit_sets_retry_after(self):
        response = error_response(RateLimitExceededException("refund_request", 120))

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "120"

    def test_unexpected_error_hides_details(self):
        response = handle_unexpected_error(RuntimeError("database password is hunter2"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["message"] == "Internal server error"
        assert "hunter2" not in response.body.decode()
