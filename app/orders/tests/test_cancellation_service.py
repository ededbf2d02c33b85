"""
Tests for CancellationService.

Covers the cancellation policy, refund delegation and its decoupling from
the cancellation, and the notifications sent to each party.
"""

import uuid
from decimal import Decimal

import pytest

from authentication.tests.factories import UserFactory
from notifications.models import Notification
from orders.models import OrderStatus, PaymentStatus, RefundStatus
from orders.services import REFUND_FOLLOW_UP_MESSAGE, CancellationService
from orders.tests.factories import OrderFactory, PaidOrderFactory
from payments.ledger.exceptions import LedgerError
from payments.ledger.services import LedgerService
from payments.models import Refund
from payments.services import RefundService
from payments.state_machines import RefundMethod, RefundState


# =============================================================================
# Policy
# =============================================================================


@pytest.mark.django_db
class TestCancellationPolicy:
    def test_order_not_found(self, buyer):
        result = CancellationService.cancel_order(buyer, uuid.uuid4(), reason="")

        assert result.success is False
        assert result.error_code == "ORDER_NOT_FOUND"

    def test_stranger_cannot_cancel(self, stranger, paid_order):
        result = CancellationService.cancel_order(stranger, paid_order.id, reason="")

        assert result.error_code == "PERMISSION_DENIED"
        assert result.error == "You do not have permission to cancel this order"
        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.PENDING

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING],
    )
    def test_open_orders_can_be_cancelled(self, buyer, vendor, status):
        order = OrderFactory(user=buyer, vendor=vendor, status=status)

        result = CancellationService.cancel_order(buyer, order.id, reason="Too slow")

        assert result.success is True
        order.refresh_from_db()
        assert order.status == OrderStatus.CANCELLED

    def test_delivered_order_untouched(self, buyer, vendor):
        order = PaidOrderFactory(user=buyer, vendor=vendor, status=OrderStatus.DELIVERED)

        result = CancellationService.cancel_order(buyer, order.id, reason="Changed my mind")

        assert result.error_code == "ORDER_DELIVERED"
        assert result.error == "Cannot cancel delivered orders. Please contact support for returns."
        order.refresh_from_db()
        assert order.status == OrderStatus.DELIVERED
        assert order.cancelled_at is None
        assert order.cancellation_reason == ""
        assert order.refund_status == RefundStatus.NONE
        assert not Refund.objects.exists()
        assert not Notification.objects.exists()

    def test_second_cancellation_rejected(self, buyer, paid_order):
        CancellationService.cancel_order(buyer, paid_order.id, reason="First")
        notifications = Notification.objects.count()

        result = CancellationService.cancel_order(buyer, paid_order.id, reason="Second")

        assert result.error_code == "ALREADY_CANCELLED"
        assert result.error == "Order is already cancelled"
        assert Refund.objects.count() == 1
        assert Notification.objects.count() == notifications
        paid_order.refresh_from_db()
        assert paid_order.cancellation_reason == "First"


# =============================================================================
# Cancellation & Refund
# =============================================================================


@pytest.mark.django_db
class TestCancelOrder:
    def test_unpaid_order_cancelled_without_refund(self, buyer, vendor):
        order = OrderFactory(user=buyer, vendor=vendor)

        result = CancellationService.cancel_order(buyer, order.id, reason="Wrong item")

        outcome = result.data
        assert outcome.cancelled_by == "customer"
        assert outcome.refund_result is None
        assert outcome.refund_processed is False
        assert not Refund.objects.exists()

        order.refresh_from_db()
        assert order.cancelled_by == buyer
        assert order.cancellation_reason == "Wrong item"
        assert order.cancelled_at is not None

    def test_paid_order_refunded_to_wallet_by_default(self, buyer, paid_order):
        result = CancellationService.cancel_order(buyer, paid_order.id, reason="Ordered twice")

        outcome = result.data
        refund = Refund.objects.get(order=paid_order)
        assert outcome.refund_processed is True
        assert outcome.refund_result == {
            "success": True,
            "refund_id": str(refund.id),
            "refund_amount": Decimal("5000.00"),
            "refund_method": "wallet",
        }
        assert refund.refund_method == RefundMethod.WALLET
        assert refund.notes == "Order cancelled: Ordered twice"

        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.CANCELLED
        assert paid_order.refund_status == RefundStatus.COMPLETED
        assert paid_order.payment_status == PaymentStatus.REFUNDED
        assert outcome.order.refund_status == RefundStatus.COMPLETED
        assert LedgerService.get_wallet_balance(buyer.id).amount == Decimal("5000.00")

    def test_default_method_from_settings(self, settings, buyer, paid_order, paystack_success):
        settings.DEFAULT_CANCELLATION_REFUND_METHOD = "paystack"

        result = CancellationService.cancel_order(buyer, paid_order.id, reason="")

        assert result.data.refund_result["refund_method"] == "paystack"
        assert paystack_success.calls == [(paid_order.payment_reference, 500000)]

    def test_requested_paystack_refund(self, buyer, paid_order, paystack_success):
        result = CancellationService.cancel_order(
            buyer, paid_order.id, reason="", refund_method=RefundMethod.PAYSTACK
        )

        assert result.data.refund_processed is True
        paid_order.refresh_from_db()
        assert paid_order.refund_method == RefundMethod.PAYSTACK
        assert paid_order.refund_reference == "3018284"

    def test_paystack_failure_falls_back_to_wallet(self, buyer, paid_order, paystack_refused):
        result = CancellationService.cancel_order(
            buyer, paid_order.id, reason="", refund_method=RefundMethod.PAYSTACK
        )

        assert result.data.refund_processed is True
        assert result.data.refund_result["refund_method"] == "paystack"
        refund = Refund.objects.get(order=paid_order)
        assert refund.state == RefundState.COMPLETED
        assert refund.refund_method == RefundMethod.WALLET

    def test_zero_payment_amount_skips_refund(self, buyer, vendor):
        order = PaidOrderFactory(user=buyer, vendor=vendor, payment_amount=Decimal("0.00"))

        result = CancellationService.cancel_order(buyer, order.id, reason="")

        assert result.data.refund_result is None
        assert not Refund.objects.exists()

    def test_refund_failure_keeps_order_cancelled(self, mocker, buyer, paid_order):
        mocker.patch.object(
            LedgerService, "credit_wallet", side_effect=LedgerError("ledger exploded")
        )

        result = CancellationService.cancel_order(buyer, paid_order.id, reason="")

        assert result.success is True
        assert result.data.refund_processed is False
        assert result.data.refund_result["success"] is False
        assert result.data.refund_result["message"] == REFUND_FOLLOW_UP_MESSAGE
        assert "ledger exploded" in result.data.refund_result["error"]
        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.CANCELLED

    def test_refund_service_exception_is_captured(self, mocker, buyer, paid_order):
        mocker.patch.object(
            RefundService, "process_refund", side_effect=ConnectionError("refund service down")
        )

        result = CancellationService.cancel_order(buyer, paid_order.id, reason="")

        assert result.success is True
        assert result.data.refund_result == {
            "success": False,
            "error": "refund service down",
            "message": REFUND_FOLLOW_UP_MESSAGE,
        }
        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.CANCELLED
        assert paid_order.payment_status == PaymentStatus.PAID

    def test_refund_failure_reports_error_code(self, mocker, buyer, paid_order, paystack_timeout):
        mocker.patch.object(LedgerService, "credit_wallet", side_effect=LedgerError("down"))

        result = CancellationService.cancel_order(
            buyer, paid_order.id, reason="", refund_method=RefundMethod.PAYSTACK
        )

        assert result.data.refund_result["error_code"] == "REFUND_FAILED"
        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.CANCELLED
        assert paid_order.refund_status == RefundStatus.PENDING

    def test_vendor_cancels(self, vendor, paid_order):
        result = CancellationService.cancel_order(vendor, paid_order.id, reason="Out of stock")

        assert result.data.cancelled_by == "vendor"
        assert result.data.to_response()["cancelled_by"] == "vendor"
        paid_order.refresh_from_db()
        assert paid_order.cancelled_by == vendor
        assert paid_order.refund_status == RefundStatus.COMPLETED

    def test_to_response(self, buyer, vendor):
        order = OrderFactory(user=buyer, vendor=vendor)

        body = CancellationService.cancel_order(buyer, order.id, reason="").data.to_response()

        assert body == {
            "success": True,
            "message": "Order cancelled successfully",
            "order_id": str(order.id),
            "cancelled_by": "customer",
            "refund_processed": False,
            "refund_result": None,
        }


# =============================================================================
# Notifications
# =============================================================================


def _notification(user, title):
    return Notification.objects.get(recipient=user, title=title)


@pytest.mark.django_db
class TestCancellationNotifications:
    def test_buyer_cancels_unpaid_order(self, buyer, vendor):
        order = OrderFactory(user=buyer, vendor=vendor, total=Decimal("5000.00"))

        result = CancellationService.cancel_order(buyer, order.id, reason="")

        assert [s.name for s in result.side_effects] == ["notify_buyer", "notify_vendor"]
        assert _notification(buyer, "Order Cancelled").message == (
            f"Your order #{order.short_id} has been cancelled."
        )
        vendor_note = _notification(vendor, "Order Cancelled by Customer")
        assert vendor_note.message == f"Ada Obi cancelled order #{order.short_id} - ₦5000.00"
        assert vendor_note.idempotency_key == f"order_cancelled:{order.id}:{vendor.id}"
        assert vendor_note.data == {"order_id": str(order.id)}

    def test_buyer_cancels_paid_order(self, buyer, paid_order):
        CancellationService.cancel_order(buyer, paid_order.id, reason="")

        assert _notification(buyer, "Order Cancelled").message == (
            f"Your order #{paid_order.short_id} has been cancelled. Refund of ₦5000.00 processed."
        )
        # The refund sends its own notification
        assert _notification(buyer, "Refund Processed").message == (
            "₦5000.00 has been credited to your wallet"
        )

    def test_vendor_cancels_notifies_both_parties_once(self, buyer, vendor):
        order = OrderFactory(user=buyer, vendor=vendor, total=Decimal("5000.00"))

        result = CancellationService.cancel_order(vendor, order.id, reason="Out of stock")

        assert result.data.cancelled_by == "vendor"
        assert Notification.objects.filter(recipient=buyer).count() == 1
        assert Notification.objects.filter(recipient=vendor).count() == 1
        assert _notification(buyer, "Vendor Cancelled Your Order").message == (
            f"Green Acres cancelled your order #{order.short_id}."
        )
        assert _notification(vendor, "Order Cancelled").message == (
            f"You cancelled order #{order.short_id} - ₦5000.00"
        )

    def test_vendor_cancels_with_failed_refund(self, mocker, vendor, buyer, paid_order):
        mocker.patch.object(LedgerService, "credit_wallet", side_effect=LedgerError("down"))

        CancellationService.cancel_order(vendor, paid_order.id, reason="")

        assert _notification(buyer, "Vendor Cancelled Your Order").message == (
            f"Green Acres cancelled your order #{paid_order.short_id}."
            " Please contact support for refund."
        )

    def test_vendor_without_farm_name(self, buyer):
        vendor = UserFactory()
        order = OrderFactory(user=buyer, vendor=vendor)

        CancellationService.cancel_order(vendor, order.id, reason="")

        assert _notification(buyer, "Vendor Cancelled Your Order").message.startswith(
            "The vendor cancelled your order"
        )

    def test_self_order_notifies_once(self, buyer):
        order = OrderFactory(user=buyer, vendor=buyer)

        result = CancellationService.cancel_order(buyer, order.id, reason="")

        assert [s.name for s in result.side_effects] == ["notify_buyer"]
        assert Notification.objects.filter(recipient=buyer).count() == 1

    def test_notification_failure_does_not_fail_cancellation(self, mocker, buyer, vendor):
        from notifications.services import NotificationService

        mocker.patch.object(
            NotificationService, "dispatch", side_effect=RuntimeError("broker down")
        )
        order = OrderFactory(user=buyer, vendor=vendor)

        result = CancellationService.cancel_order(buyer, order.id, reason="")

        assert result.success is True
        assert all(not s.succeeded for s in result.side_effects)
        order.refresh_from_db()
        assert order.status == OrderStatus.CANCELLED
