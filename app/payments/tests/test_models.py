"""
Tests for the Refund model.

Tests constraints, defaults, optimistic version counter and helpers.
"""

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from payments.models import Refund
from payments.state_machines import RefundMethod, RefundState
from payments.tests.factories import RefundFactory


@pytest.mark.django_db
class TestRefundModel:
    def test_defaults(self):
        refund = RefundFactory()

        assert refund.state == RefundState.PENDING
        assert refund.currency == "ngn"
        assert refund.version == 1
        assert refund.is_open is True
        assert refund.is_complete is False

    def test_payment_reference_copied_from_order(self):
        refund = RefundFactory()

        assert refund.payment_reference == refund.order.payment_reference

    def test_str(self):
        refund = RefundFactory(amount=Decimal("1200.00"), refund_method=RefundMethod.PAYSTACK)

        assert str(refund) == f"Refund({refund.id}, pending, paystack, 1200.00 NGN)"

    def test_version_increments_on_each_update(self):
        refund = RefundFactory()

        refund.notes = "first"
        refund.save()
        assert refund.version == 2

        refund.notes = "second"
        refund.save()
        refund.refresh_from_db()
        assert refund.version == 3

    def test_amount_must_be_positive(self):
        refund = RefundFactory()

        with pytest.raises(IntegrityError), transaction.atomic():
            Refund.objects.create(
                order=refund.order,
                initiated_by=refund.initiated_by,
                amount=Decimal("0.00"),
                refund_method=RefundMethod.WALLET,
            )

    def test_refunds_reachable_from_order(self):
        refund = RefundFactory()

        assert list(refund.order.refunds.all()) == [refund]


class TestAppendNote:
    def test_first_note_has_no_separator(self):
        refund = Refund(notes="")

        refund.append_note("Paystack failed, refunded to wallet")

        assert refund.notes == "Paystack failed, refunded to wallet"

    def test_joins_with_pipe(self):
        refund = Refund(notes="Order cancelled: wrong size")

        refund.append_note("Paystack failed, refunded to wallet")

        assert refund.notes == "Order cancelled: wrong size | Paystack failed, refunded to wallet"
