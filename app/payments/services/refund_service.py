"""
Refund service for returning money to buyers.

This module provides the RefundService class which handles the critical path
for refunding an order through one of three channels:

1. wallet: instant credit to the buyer's internal wallet (ledger)
2. paystack: reversal of the original Paystack transaction, falling back
   to a wallet credit when Paystack fails
3. manual: no money movement, the refund waits for an admin

Usage:
    from payments.services import RefundService

    result = RefundService.process_refund(
        actor=request.user,
        order_id=order.id,
        refund_method=RefundMethod.PAYSTACK,
        reason="Changed my mind",
    )

    if result.success:
        print(f"Refund {result.data.refund.id}: {result.data.result}")
    else:
        print(f"Refund failed: {result.error} ({result.error_code})")
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.db import DatabaseError
from django.utils import timezone

from core.services import BaseService, ServiceResult
from notifications.models import NotificationKind
from notifications.services import NotificationService
from orders.models import Order, OrderStatus, PaymentStatus, RefundStatus

from payments.adapters import PaystackAdapter
from payments.exceptions import LockAcquisitionError, PaystackError
from payments.ledger import LedgerService
from payments.ledger.exceptions import LedgerError
from payments.ledger.types import format_naira, to_kobo
from payments.locks import DistributedLock
from payments.models import Refund
from payments.state_machines import OPEN_REFUND_STATES, RefundMethod

if TYPE_CHECKING:
    from authentication.models import User
    from payments.ledger.types import Money


REFUND_SUCCESS_MESSAGE = "Refund processed successfully"
FALLBACK_RESULT_NOTE = "Refunded to wallet (Paystack unavailable)"
MANUAL_RESULT_MESSAGE = "Refund request submitted for manual processing"


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class RefundOutcome:
    """
    Result of a processed refund.

    Attributes:
        refund: The Refund row (final state)
        requested_method: Channel the caller asked for. May differ from
            refund.refund_method after a wallet fallback.
        result: Channel-specific details returned to the client
    """

    refund: Refund
    requested_method: str
    result: dict[str, Any] = field(default_factory=dict)

    def to_response(self) -> dict[str, Any]:
        """Body returned by the process-refund endpoint."""
        return {
            "success": True,
            "message": REFUND_SUCCESS_MESSAGE,
            "refund_id": str(self.refund.id),
            "refund_amount": self.refund.amount,
            "refund_method": self.requested_method,
            "result": self.result,
        }


# =============================================================================
# Refund Service
# =============================================================================


class RefundService(BaseService):
    """
    Service for processing refunds to buyers.

    Flow:
        1. Validate caller and order eligibility (no writes on failure)
        2. Acquire the per-order distributed lock
        3. In one transaction: lock the order row, reject if a refund is
           open, claim the order with a conditional UPDATE and create the
           Refund row (PENDING)
        4. Move money OUTSIDE that transaction (ledger or Paystack)
        5. Record the outcome on the Refund and the Order
        6. Notify the buyer (best effort)

    Safety Guarantees:
        - Distributed lock serializes refunds per order
        - The conditional UPDATE stays correct if the lock is lost
        - Ledger references are idempotency keys, so a retried wallet
          credit never pays twice
        - A Paystack failure always ends in a wallet attempt before the
          refund is reported as failed
    """

    # Paystack adapter - can be injected for testing
    _paystack_adapter: type | None = None

    @classmethod
    def get_paystack_adapter(cls) -> type:
        """Get the Paystack adapter class."""
        return cls._paystack_adapter or PaystackAdapter

    @classmethod
    def set_paystack_adapter(cls, adapter: type | None) -> None:
        """Set the Paystack adapter class (for testing)."""
        cls._paystack_adapter = adapter

    # =========================================================================
    # Entry Point
    # =========================================================================

    @classmethod
    def process_refund(
        cls,
        actor: User,
        order_id: uuid.UUID | str,
        refund_method: str,
        reason: str | None = None,
        partial_amount: Decimal | None = None,
    ) -> ServiceResult[RefundOutcome]:
        """
        Refund an order to its buyer.

        Args:
            actor: Authenticated user requesting the refund (buyer or vendor)
            order_id: Order to refund
            refund_method: "wallet", "paystack" or "manual"
            reason: Optional free text, stored as the refund's notes
            partial_amount: Amount to refund; defaults to the captured amount

        Returns:
            ServiceResult containing RefundOutcome on success. Error codes:
            ORDER_NOT_FOUND, PERMISSION_DENIED, INVALID_REFUND_METHOD,
            ORDER_DELIVERED, ALREADY_REFUNDED, PAYMENT_NOT_CONFIRMED,
            INVALID_AMOUNT, AMOUNT_EXCEEDS_LIMIT, MISSING_PAYMENT_REFERENCE,
            REFUND_IN_PROGRESS, WALLET_CREDIT_FAILED, REFUND_FAILED.
        """
        logger = cls.get_logger()

        order = Order.objects.select_related("user", "vendor").filter(id=order_id).first()
        if order is None:
            return ServiceResult.failure("Order not found", error_code="ORDER_NOT_FOUND")

        if actor.id not in (order.user_id, order.vendor_id):
            logger.warning(
                "Refund denied: caller is not a party to the order",
                extra={"order_id": str(order.id), "actor_id": str(actor.id)},
            )
            return ServiceResult.failure(
                "You do not have permission to refund this order",
                error_code="PERMISSION_DENIED",
            )

        if refund_method not in RefundMethod.values:
            return ServiceResult.failure(
                f"Unsupported refund method '{refund_method}'",
                error_code="INVALID_REFUND_METHOD",
            )

        eligibility = cls._check_eligibility(order, refund_method, partial_amount)
        if not eligibility.success:
            return eligibility
        amount = eligibility.data

        log_context = {
            "order_id": str(order.id),
            "actor_id": str(actor.id),
            "refund_method": refund_method,
            "amount": str(amount),
        }
        logger.info("Processing refund", extra=log_context)

        lock = DistributedLock.for_refund(order.id)
        try:
            lock.acquire()
        except LockAcquisitionError as e:
            logger.warning(
                "Refund lock contention",
                extra={**log_context, "lock_key": e.details.get("key")},
            )
            return ServiceResult.failure(
                "A refund is already being processed for this order",
                error_code="REFUND_IN_PROGRESS",
            )

        try:
            claim = cls._claim_order(order, actor, amount, refund_method, reason)
            if not claim.success:
                return claim
            refund = claim.data
            log_context["refund_id"] = str(refund.id)

            try:
                if refund_method == RefundMethod.WALLET:
                    result = cls._refund_to_wallet(order, refund, partial_amount)
                elif refund_method == RefundMethod.PAYSTACK:
                    result = cls._refund_via_paystack(order, refund, partial_amount)
                else:
                    result = cls._queue_manual_refund(order, refund)
            except Exception as e:
                logger.exception(
                    "Refund dispatch raised, releasing order",
                    extra={**log_context, "error_type": type(e).__name__},
                )
                cls._abandon_refund(order, refund, e)
                raise
        finally:
            lock.release()

        if not result.success:
            return result

        outcome = RefundOutcome(
            refund=refund,
            requested_method=refund_method,
            result=result.data,
        )
        logger.info(
            "Refund processed",
            extra={
                **log_context,
                "final_method": refund.refund_method,
                "refund_state": refund.state,
            },
        )

        final = ServiceResult.success(outcome)
        final.side_effects.append(
            cls.run_side_effect(
                "notify_buyer",
                NotificationService.dispatch,
                recipient_id=order.user_id,
                title="Refund Processed",
                message=cls._buyer_message(refund),
                notification_type=NotificationKind.ORDER,
                data={"order_id": str(order.id), "refund_id": str(refund.id)},
                idempotency_key=f"refund:{refund.id}:buyer",
            )
        )
        return final

    # =========================================================================
    # Validation & Claim
    # =========================================================================

    @classmethod
    def _check_eligibility(
        cls,
        order: Order,
        refund_method: str,
        partial_amount: Decimal | None,
    ) -> ServiceResult[Decimal]:
        """
        Check the order can be refunded and compute the amount.

        Returns:
            ServiceResult with the refund amount in naira
        """
        if order.status == OrderStatus.DELIVERED:
            return ServiceResult.failure(
                "Cannot refund delivered orders. Please contact support.",
                error_code="ORDER_DELIVERED",
            )

        if order.refund_status == RefundStatus.COMPLETED:
            return ServiceResult.failure("Order already refunded", error_code="ALREADY_REFUNDED")

        if order.payment_status != PaymentStatus.PAID:
            return ServiceResult.failure(
                "Order payment not confirmed. Cannot process refund.",
                error_code="PAYMENT_NOT_CONFIRMED",
            )

        captured = order.captured_amount
        amount = Decimal(str(partial_amount)) if partial_amount is not None else captured

        if amount <= 0:
            return ServiceResult.failure(
                "Refund amount must be greater than zero",
                error_code="INVALID_AMOUNT",
            )

        if amount > captured:
            return ServiceResult.failure(
                "Refund amount exceeds order total",
                error_code="AMOUNT_EXCEEDS_LIMIT",
            )

        if refund_method == RefundMethod.PAYSTACK and not order.payment_reference:
            return ServiceResult.failure(
                "No payment reference found for this order",
                error_code="MISSING_PAYMENT_REFERENCE",
            )

        return ServiceResult.success(amount)

    @classmethod
    def _claim_order(
        cls,
        order: Order,
        actor: User,
        amount: Decimal,
        refund_method: str,
        reason: str | None,
    ) -> ServiceResult[Refund]:
        """
        Claim the order for refunding and create the Refund row.

        The claim is a conditional UPDATE on refund_status; zero affected
        rows means another request got there first.
        """
        with cls.atomic():
            locked = Order.objects.select_for_update().get(id=order.id)

            if Refund.objects.filter(order=locked, state__in=OPEN_REFUND_STATES).exists():
                return ServiceResult.failure(
                    "A refund is already being processed for this order",
                    error_code="REFUND_IN_PROGRESS",
                )

            claimed = (
                Order.objects.filter(id=order.id, payment_status=PaymentStatus.PAID)
                .exclude(refund_status__in=[RefundStatus.PROCESSING, RefundStatus.COMPLETED])
                .update(refund_status=RefundStatus.PROCESSING, updated_at=timezone.now())
            )
            if not claimed:
                locked.refresh_from_db(fields=["refund_status", "payment_status"])
                if locked.refund_status == RefundStatus.COMPLETED:
                    return ServiceResult.failure(
                        "Order already refunded", error_code="ALREADY_REFUNDED"
                    )
                if locked.payment_status != PaymentStatus.PAID:
                    return ServiceResult.failure(
                        "Order payment not confirmed. Cannot process refund.",
                        error_code="PAYMENT_NOT_CONFIRMED",
                    )
                return ServiceResult.failure(
                    "A refund is already being processed for this order",
                    error_code="REFUND_IN_PROGRESS",
                )

            refund = Refund.objects.create(
                order=locked,
                initiated_by=actor,
                payment_reference=locked.payment_reference,
                amount=amount,
                refund_method=refund_method,
                notes=reason or "",
            )

        return ServiceResult.success(refund)

    @classmethod
    def _release_claim(cls, order: Order) -> None:
        """Hand the order back after an unrecoverable refund failure."""
        Order.objects.filter(id=order.id, refund_status=RefundStatus.PROCESSING).update(
            refund_status=RefundStatus.PENDING,
            updated_at=timezone.now(),
        )

    @classmethod
    def _abandon_refund(cls, order: Order, refund: Refund, error: Exception) -> None:
        """
        Fail a still-open refund row and release the order's claim.

        Runs when a channel raises instead of returning a result. The
        original exception is re-raised by the caller, so a database error
        here is logged rather than allowed to replace it.
        """
        try:
            current = Refund.objects.get(pk=refund.pk)
            if current.state in OPEN_REFUND_STATES:
                current.fail(reason=f"Refund aborted: {type(error).__name__}: {error}")
                current.save()
            cls._release_claim(order)
        except DatabaseError:
            cls.get_logger().exception(
                "Could not release refund claim",
                extra={"order_id": str(order.id), "refund_id": str(refund.id)},
            )

    @classmethod
    def _mark_order_refunded(
        cls,
        order: Order,
        refund: Refund,
        partial_amount: Decimal | None,
        reference: str | None,
    ) -> None:
        now = timezone.now()
        Order.objects.filter(id=order.id).update(
            refund_status=RefundStatus.COMPLETED,
            refund_amount=refund.amount,
            refund_method=refund.refund_method,
            refund_reference=reference,
            refunded_at=now,
            payment_status=(
                PaymentStatus.PARTIALLY_REFUNDED
                if partial_amount is not None
                else PaymentStatus.REFUNDED
            ),
            updated_at=now,
        )

    # =========================================================================
    # Channels
    # =========================================================================

    @classmethod
    def _credit_wallet(cls, order: Order, refund: Refund, description: str, reference: str) -> Money:
        return LedgerService.credit_wallet(
            user_id=order.user_id,
            amount=refund.amount,
            description=description,
            reference=reference,
            reference_id=refund.id,
        )

    @classmethod
    def _refund_to_wallet(
        cls,
        order: Order,
        refund: Refund,
        partial_amount: Decimal | None,
    ) -> ServiceResult[dict[str, Any]]:
        """
        Credit the buyer's wallet.

        The wallet has no further fallback, so a ledger failure fails the
        refund.
        """
        logger = cls.get_logger()
        reference = f"refund_{refund.id}"

        try:
            balance = cls._credit_wallet(
                order,
                refund,
                description=f"Refund for cancelled order #{order.short_id}",
                reference=reference,
            )
        except (LedgerError, DatabaseError) as e:
            error = getattr(e, "message", None) or str(e)
            logger.error(
                "Wallet credit failed",
                extra={"order_id": str(order.id), "refund_id": str(refund.id), "error": error},
                exc_info=True,
            )
            with cls.atomic():
                refund.fail(reason=error)
                refund.save()
                cls._release_claim(order)
            return ServiceResult.failure(
                f"Failed to credit wallet: {error}",
                error_code="WALLET_CREDIT_FAILED",
            )

        with cls.atomic():
            refund.complete(ledger_reference=reference)
            refund.save()
            cls._mark_order_refunded(order, refund, partial_amount, reference)

        return ServiceResult.success(
            {"method": RefundMethod.WALLET.value, "wallet_balance": balance.amount}
        )

    @classmethod
    def _refund_via_paystack(
        cls,
        order: Order,
        refund: Refund,
        partial_amount: Decimal | None,
    ) -> ServiceResult[dict[str, Any]]:
        """
        Reverse the original Paystack transaction.

        The Paystack call happens outside any transaction. Any PaystackError
        (refusal, 5xx, timeout, connection error) fails the row and falls
        back to the wallet.
        """
        logger = cls.get_logger()

        refund.process()
        refund.save()

        adapter = cls.get_paystack_adapter()
        try:
            gateway = adapter.create_refund(
                transaction_reference=order.payment_reference,
                amount_kobo=to_kobo(refund.amount),
            )
        except PaystackError as e:
            logger.warning(
                "Paystack refund failed, falling back to wallet",
                extra={
                    "order_id": str(order.id),
                    "refund_id": str(refund.id),
                    "error_code": e.error_code,
                    "status_code": e.status_code,
                },
            )
            refund.fail(
                reason=e.message or "Paystack refund failed",
                paystack_response=e.response_body,
            )
            refund.save()
            return cls._fallback_to_wallet(order, refund, partial_amount)

        with cls.atomic():
            refund.complete(
                paystack_refund_id=gateway.id,
                paystack_response=gateway.raw_response,
            )
            refund.save()
            cls._mark_order_refunded(order, refund, partial_amount, gateway.id)

        return ServiceResult.success(
            {
                "method": RefundMethod.PAYSTACK.value,
                "paystack_refund_id": gateway.id,
                "message": gateway.message,
            }
        )

    @classmethod
    def _fallback_to_wallet(
        cls,
        order: Order,
        refund: Refund,
        partial_amount: Decimal | None,
    ) -> ServiceResult[dict[str, Any]]:
        """
        Credit the wallet after a Paystack failure, reusing the same Refund.

        If this also fails the refund stays FAILED and the order goes back
        to refund_status PENDING.
        """
        logger = cls.get_logger()
        reference = f"refund_{refund.id}_wallet_fallback"

        try:
            balance = cls._credit_wallet(
                order,
                refund,
                description=(
                    f"Refund for order #{order.short_id} (Paystack failed, credited to wallet)"
                ),
                reference=reference,
            )
        except (LedgerError, DatabaseError) as e:
            logger.error(
                "Wallet fallback failed after Paystack failure",
                extra={"order_id": str(order.id), "refund_id": str(refund.id), "error": str(e)},
                exc_info=True,
            )
            cls._release_claim(order)
            return ServiceResult.failure(
                "Paystack refund failed and wallet fallback failed",
                error_code="REFUND_FAILED",
            )

        with cls.atomic():
            refund.complete_via_wallet_fallback(ledger_reference=reference)
            refund.save()
            cls._mark_order_refunded(order, refund, partial_amount, reference)

        return ServiceResult.success(
            {
                "method": RefundMethod.WALLET.value,
                "note": FALLBACK_RESULT_NOTE,
                "wallet_balance": balance.amount,
            }
        )

    @classmethod
    def _queue_manual_refund(cls, order: Order, refund: Refund) -> ServiceResult[dict[str, Any]]:
        """Leave the refund PENDING for an admin to settle."""
        Order.objects.filter(id=order.id).update(
            refund_status=RefundStatus.PENDING,
            refund_amount=refund.amount,
            refund_method=RefundMethod.MANUAL,
            updated_at=timezone.now(),
        )
        return ServiceResult.success(
            {"method": RefundMethod.MANUAL.value, "message": MANUAL_RESULT_MESSAGE}
        )

    # =========================================================================
    # Notifications
    # =========================================================================

    @staticmethod
    def _buyer_message(refund: Refund) -> str:
        amount = format_naira(refund.amount)
        if refund.refund_method == RefundMethod.WALLET:
            return f"{amount} has been credited to your wallet"
        return f"Your refund of {amount} is being processed. It may take 3-5 business days."
