"""
Project-wide pytest fixtures and test markers.

Provides the parties to an order, a paid order, and fake Paystack adapters
installed on RefundService for the duration of a test. App-specific
fixtures are defined in each app's tests/conftest.py.

Usage:
    def test_paystack_refund(buyer, paid_order, paystack_success):
        result = RefundService.process_refund(buyer, paid_order.id, "paystack")
        assert result.data.result["paystack_refund_id"] == "3018284"
"""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory, VendorFactory
from orders.tests.factories import PaidOrderFactory
from payments.adapters import RefundResult
from payments.exceptions import PaystackAPIError, PaystackTimeoutError
from payments.services import RefundService


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full cancel/refund journeys over HTTP)
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_models.py, test_adapters.py, test_locks.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    # Filename patterns for each category
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_refund_service.py",
        "test_cancellation_service.py",
        "test_exception_handlers.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_adapters.py",
        "test_state_transitions.py",
        "test_locks.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        # Check patterns in priority order
        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            # Default: integration (safe for Django where most tests hit DB)
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def mock_redis(mocker):
    """
    Mock Redis connection used by the refund distributed lock.

    Locks are acquired and released successfully by default. Set
    ``mock_redis.set.return_value = False`` to simulate contention.
    """
    client = mocker.MagicMock()
    client.set.return_value = True
    client.eval.return_value = 1
    mocker.patch("payments.locks.get_redis_connection", return_value=client)
    return client


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


# =============================================================================
# Parties & Orders
# =============================================================================


@pytest.fixture
def buyer(db):
    return UserFactory(first_name="Ada", last_name="Obi")


@pytest.fixture
def vendor(db):
    return VendorFactory(farm_name="Green Acres")


@pytest.fixture
def stranger(db):
    """A user who is neither the buyer nor the vendor."""
    return UserFactory()


@pytest.fixture
def paid_order(buyer, vendor):
    """Pending order with ₦5000.00 captured through Paystack."""
    return PaidOrderFactory(user=buyer, vendor=vendor, total=Decimal("5000.00"))


# =============================================================================
# Paystack Adapter Fakes
# =============================================================================


def _install_adapter(adapter):
    RefundService.set_paystack_adapter(adapter)
    return adapter


@pytest.fixture
def paystack_success():
    """Paystack accepts every refund and returns refund id 3018284."""

    class AcceptingPaystackAdapter:
        calls = []

        @classmethod
        def create_refund(cls, transaction_reference, amount_kobo):
            cls.calls.append((transaction_reference, amount_kobo))
            body = {
                "status": True,
                "message": "Refund has been queued for processing",
                "data": {"id": 3018284, "amount": amount_kobo},
            }
            return RefundResult(id="3018284", message=body["message"], raw_response=body)

    yield _install_adapter(AcceptingPaystackAdapter)
    RefundService.set_paystack_adapter(None)


@pytest.fixture
def paystack_refused():
    """Paystack answers with status false."""

    class RefusingPaystackAdapter:
        calls = []

        @classmethod
        def create_refund(cls, transaction_reference, amount_kobo):
            cls.calls.append((transaction_reference, amount_kobo))
            raise PaystackAPIError(
                "Transaction has been fully reversed",
                status_code=400,
                response_body={"status": False, "message": "Transaction has been fully reversed"},
            )

    yield _install_adapter(RefusingPaystackAdapter)
    RefundService.set_paystack_adapter(None)


@pytest.fixture
def paystack_timeout():
    """Paystack never answers."""

    class HangingPaystackAdapter:
        @classmethod
        def create_refund(cls, transaction_reference, amount_kobo):
            raise PaystackTimeoutError("Paystack did not respond within 15s")

    yield _install_adapter(HangingPaystackAdapter)
    RefundService.set_paystack_adapter(None)
