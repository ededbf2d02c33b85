"""
Pytest fixtures for Paystack adapter tests.

This module provides fixtures for testing the Paystack adapter, including
mock HTTP responses and a patched ``requests.post``.

Sections:
    - Mock Paystack Response Fixtures
    - Mock HTTP Client Fixtures
"""

from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest


# =============================================================================
# Mock Paystack Response Fixtures
# =============================================================================


@dataclass
class MockPaystackResponse:
    """Stand-in for requests.Response as read by the adapter."""

    status_code: int = 200
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self.body is None:
            raise ValueError("No JSON object could be decoded")
        return self.body


@pytest.fixture
def paystack_response():
    """Build a Paystack HTTP response."""

    def _create(
        status_code: int = 200,
        body: Any = None,
        text: str = "",
    ) -> MockPaystackResponse:
        return MockPaystackResponse(status_code=status_code, body=body, text=text)

    return _create


@pytest.fixture
def refund_queued_body():
    """Body Paystack returns when a refund is accepted."""

    def _create(refund_id: int = 3018284, amount: int = 500000) -> dict[str, Any]:
        return {
            "status": True,
            "message": "Refund has been queued for processing",
            "data": {
                "id": refund_id,
                "amount": amount,
                "currency": "NGN",
                "status": "pending",
                "transaction": {"id": 1641, "reference": "T685312322670591"},
            },
        }

    return _create


# =============================================================================
# Mock HTTP Client Fixtures
# =============================================================================


@pytest.fixture
def mock_requests_post(paystack_response, refund_queued_body):
    """Patch requests.post as used by the adapter. Defaults to an accepted refund."""
    with patch("payments.adapters.paystack_adapter.requests.post") as mock:
        mock.return_value = paystack_response(body=refund_queued_body())
        yield mock
