"""
Tests for Refund state machine transitions using django-fsm.

Tests valid and invalid state transitions, including the single
paystack-to-wallet fallback allowed out of FAILED.
"""

import pytest
from django_fsm import TransitionNotAllowed

from payments.state_machines import RefundMethod, RefundState
from payments.tests.factories import RefundFactory


@pytest.mark.django_db
class TestRefundTransitions:
    """Tests for Refund state machine transitions."""

    # -------------------------------------------------------------------------
    # Valid Transitions
    # -------------------------------------------------------------------------

    def test_pending_to_processing(self):
        refund = RefundFactory(refund_method=RefundMethod.PAYSTACK)

        refund.process()
        refund.save()

        assert refund.state == RefundState.PROCESSING

    def test_pending_to_completed_for_wallet(self):
        """Wallet refunds complete straight from pending."""
        refund = RefundFactory()

        refund.complete(ledger_reference=f"refund_{refund.id}")
        refund.save()

        refund.refresh_from_db()
        assert refund.state == RefundState.COMPLETED
        assert refund.ledger_reference == f"refund_{refund.id}"
        assert refund.completed_at is not None
        assert refund.paystack_refund_id is None

    def test_processing_to_completed_records_gateway_result(self):
        refund = RefundFactory(refund_method=RefundMethod.PAYSTACK)
        refund.process()

        refund.complete(paystack_refund_id="3018284", paystack_response={"status": True})
        refund.save()

        refund.refresh_from_db()
        assert refund.state == RefundState.COMPLETED
        assert refund.paystack_refund_id == "3018284"
        assert refund.paystack_response == {"status": True}

    def test_processing_to_failed(self):
        refund = RefundFactory(refund_method=RefundMethod.PAYSTACK)
        refund.process()

        refund.fail(reason="Transaction has been fully reversed", paystack_response={"status": False})
        refund.save()

        refund.refresh_from_db()
        assert refund.state == RefundState.FAILED
        assert refund.failure_reason == "Transaction has been fully reversed"
        assert refund.paystack_response == {"status": False}
        assert refund.failed_at is not None

    def test_pending_to_failed(self):
        refund = RefundFactory()

        refund.fail(reason="Ledger unavailable")

        assert refund.state == RefundState.FAILED

    def test_failed_paystack_refund_completes_via_wallet(self):
        refund = RefundFactory(refund_method=RefundMethod.PAYSTACK, notes="Order cancelled: late")
        refund.process()
        refund.fail(reason="Paystack timeout")

        refund.complete_via_wallet_fallback(ledger_reference=f"refund_{refund.id}_wallet_fallback")
        refund.save()

        refund.refresh_from_db()
        assert refund.state == RefundState.COMPLETED
        assert refund.refund_method == RefundMethod.WALLET
        assert refund.ledger_reference.endswith("_wallet_fallback")
        assert refund.notes == "Order cancelled: late | Paystack failed, refunded to wallet"
        # Gateway error stays on record
        assert refund.failure_reason == "Paystack timeout"

    # -------------------------------------------------------------------------
    # Invalid Transitions
    # -------------------------------------------------------------------------

    def test_cannot_process_twice(self):
        refund = RefundFactory(refund_method=RefundMethod.PAYSTACK)
        refund.process()

        with pytest.raises(TransitionNotAllowed):
            refund.process()

    def test_completed_is_terminal(self):
        refund = RefundFactory()
        refund.complete(ledger_reference="refund_x")

        with pytest.raises(TransitionNotAllowed):
            refund.fail(reason="too late")
        with pytest.raises(TransitionNotAllowed):
            refund.process()
        with pytest.raises(TransitionNotAllowed):
            refund.complete()

    def test_failed_cannot_complete_directly(self):
        refund = RefundFactory(refund_method=RefundMethod.PAYSTACK)
        refund.fail(reason="declined")

        with pytest.raises(TransitionNotAllowed):
            refund.complete(paystack_refund_id="1")

    @pytest.mark.parametrize("method", [RefundMethod.WALLET, RefundMethod.MANUAL])
    def test_wallet_fallback_only_for_paystack_refunds(self, method):
        refund = RefundFactory(refund_method=method)
        refund.fail(reason="failed")

        with pytest.raises(TransitionNotAllowed):
            refund.complete_via_wallet_fallback(ledger_reference="refund_x_wallet_fallback")

        assert refund.state == RefundState.FAILED

    def test_wallet_fallback_requires_failed_state(self):
        refund = RefundFactory(refund_method=RefundMethod.PAYSTACK)
        refund.process()

        with pytest.raises(TransitionNotAllowed):
            refund.complete_via_wallet_fallback(ledger_reference="refund_x_wallet_fallback")
