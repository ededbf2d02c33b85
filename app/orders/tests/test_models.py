"""
Tests for the Order model.
"""

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction
from django_fsm import TransitionNotAllowed
from freezegun import freeze_time

from orders.models import OrderStatus
from orders.tests.factories import OrderFactory, PaidOrderFactory


@pytest.mark.django_db
class TestOrderModel:
    def test_defaults(self):
        order = OrderFactory()

        assert order.status == OrderStatus.PENDING
        assert order.payment_status == "unpaid"
        assert order.refund_status == "none"
        assert order.cancelled_by is None

    def test_short_id(self):
        order = OrderFactory()

        assert order.short_id == str(order.id)[:8]
        assert str(order) == f"Order #{order.short_id} (pending)"

    def test_captured_amount_prefers_payment_amount(self):
        order = PaidOrderFactory(total=Decimal("5000.00"), payment_amount=Decimal("4500.00"))

        assert order.captured_amount == Decimal("4500.00")

    def test_captured_amount_falls_back_to_total(self):
        order = OrderFactory(total=Decimal("3200.00"), payment_amount=None)

        assert order.captured_amount == Decimal("3200.00")

    def test_refund_cannot_exceed_captured_amount(self):
        order = PaidOrderFactory(total=Decimal("5000.00"), payment_amount=Decimal("5000.00"))
        order.refund_amount = Decimal("6000.00")

        with pytest.raises(IntegrityError), transaction.atomic():
            order.save()

    def test_refund_without_payment_amount_bounded_by_total(self):
        order = OrderFactory(total=Decimal("5000.00"), payment_amount=None)
        order.refund_amount = Decimal("5000.01")

        with pytest.raises(IntegrityError), transaction.atomic():
            order.save()

    def test_refund_without_payment_amount_up_to_total_allowed(self):
        order = OrderFactory(total=Decimal("5000.00"), payment_amount=None)
        order.refund_amount = Decimal("5000.00")
        order.save()

        order.refresh_from_db()
        assert order.refund_amount == Decimal("5000.00")

    def test_total_non_negative(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            OrderFactory(total=Decimal("-1.00"))


@pytest.mark.django_db
class TestOrderTransitions:
    def test_fulfilment_path(self):
        order = OrderFactory()

        order.confirm()
        order.start_processing()
        order.deliver()

        assert order.status == OrderStatus.DELIVERED

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING],
    )
    def test_cancel_from_open_states(self, status):
        order = OrderFactory(status=status)

        with freeze_time("2026-03-01 10:00:00"):
            order.cancel(by=order.user, reason="Ordered by mistake")
        order.save()

        order.refresh_from_db()
        assert order.status == OrderStatus.CANCELLED
        assert order.is_cancelled is True
        assert order.cancelled_by == order.user
        assert order.cancelled_at.isoformat() == "2026-03-01T10:00:00+00:00"
        assert order.cancellation_reason == "Ordered by mistake"

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_cannot_cancel_terminal_orders(self, status):
        order = OrderFactory(status=status)

        with pytest.raises(TransitionNotAllowed):
            order.cancel(by=order.user)

        assert order.cancelled_at is None

    def test_cannot_skip_confirmation(self):
        order = OrderFactory()

        with pytest.raises(TransitionNotAllowed):
            order.deliver()
