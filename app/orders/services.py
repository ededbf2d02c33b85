"""
Order cancellation service.

Services:
    CancellationService: Cancels an order and refunds captured payments

Design Principles:
    - The cancellation is committed before any refund is attempted
    - A failed refund never undoes the cancellation; it is reported in
      the result so the client can point the user at support
    - Notifications are best effort (see ServiceResult.side_effects)

Usage:
    from orders.services import CancellationService

    result = CancellationService.cancel_order(
        actor=request.user,
        order_id=order_id,
        reason="Ordered by mistake",
        refund_method="paystack",
    )
    if result.success:
        body = result.data.to_response()
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from django.conf import settings

from core.services import BaseService, ServiceResult
from notifications.models import NotificationKind
from notifications.services import NotificationService
from orders.models import Order, OrderStatus, PaymentStatus
from payments.ledger.types import format_naira
from payments.services import RefundService

if TYPE_CHECKING:
    from authentication.models import User


CANCEL_SUCCESS_MESSAGE = "Order cancelled successfully"
REFUND_FOLLOW_UP_MESSAGE = "Order cancelled but refund failed. Please contact support."

CANCELLED_BY_CUSTOMER = "customer"
CANCELLED_BY_VENDOR = "vendor"


@dataclass
class CancellationOutcome:
    """
    Result of a cancellation.

    Attributes:
        order: The cancelled order (refreshed after any refund)
        cancelled_by: "customer" or "vendor"
        refund_result: None when no refund was due, otherwise a dict with
            ``success`` and either refund details or the error
    """

    order: Order
    cancelled_by: str
    refund_result: dict[str, Any] | None = None

    @property
    def refund_processed(self) -> bool:
        return bool(self.refund_result and self.refund_result.get("success"))

    def to_response(self) -> dict[str, Any]:
        """Body returned by the cancel-order endpoint."""
        return {
            "success": True,
            "message": CANCEL_SUCCESS_MESSAGE,
            "order_id": str(self.order.id),
            "cancelled_by": self.cancelled_by,
            "refund_processed": self.refund_processed,
            "refund_result": self.refund_result,
        }


class CancellationService(BaseService):
    """
    Service for cancelling orders.

    Cancellation Policy:
        - Only the buyer or the vendor may cancel
        - pending, confirmed and processing orders can be cancelled
        - delivered orders go through returns, not cancellation
        - cancelled is terminal
    """

    @classmethod
    def cancel_order(
        cls,
        actor: User,
        order_id: uuid.UUID | str,
        reason: str = "",
        refund_method: str | None = None,
    ) -> ServiceResult[CancellationOutcome]:
        """
        Cancel an order and refund it if payment was captured.

        Args:
            actor: Authenticated user (buyer or vendor)
            order_id: Order to cancel
            reason: Cancellation reason
            refund_method: Refund channel; defaults to
                settings.DEFAULT_CANCELLATION_REFUND_METHOD

        Returns:
            ServiceResult containing CancellationOutcome. Error codes:
            ORDER_NOT_FOUND, PERMISSION_DENIED, ALREADY_CANCELLED,
            ORDER_DELIVERED.
        """
        logger = cls.get_logger()

        order = (
            Order.objects.select_related("user__profile", "vendor__profile")
            .filter(id=order_id)
            .first()
        )
        if order is None:
            return ServiceResult.failure("Order not found", error_code="ORDER_NOT_FOUND")

        is_customer = order.user_id == actor.id
        is_vendor = order.vendor_id == actor.id
        if not (is_customer or is_vendor):
            logger.warning(
                "Cancellation denied: caller is not a party to the order",
                extra={"order_id": str(order.id), "actor_id": str(actor.id)},
            )
            return ServiceResult.failure(
                "You do not have permission to cancel this order",
                error_code="PERMISSION_DENIED",
            )

        policy = cls._check_cancellable(order)
        if not policy.success:
            return policy

        with cls.atomic():
            locked = Order.objects.select_for_update().get(id=order.id)
            policy = cls._check_cancellable(locked)
            if not policy.success:
                return policy
            locked.cancel(by=actor, reason=reason)
            locked.save()

        cancelled_by = CANCELLED_BY_CUSTOMER if is_customer else CANCELLED_BY_VENDOR
        log_context = {
            "order_id": str(order.id),
            "actor_id": str(actor.id),
            "cancelled_by": cancelled_by,
        }
        logger.info("Order cancelled", extra=log_context)

        refund_result = None
        if locked.payment_status == PaymentStatus.PAID and (locked.payment_amount or 0) > 0:
            refund_result = cls._refund(
                actor,
                locked,
                reason,
                refund_method or settings.DEFAULT_CANCELLATION_REFUND_METHOD,
            )
            locked.refresh_from_db()

        outcome = CancellationOutcome(
            order=locked,
            cancelled_by=cancelled_by,
            refund_result=refund_result,
        )
        result = ServiceResult.success(outcome)
        for name, recipient_id, title, message in cls._notifications(order, outcome):
            result.side_effects.append(
                cls.run_side_effect(
                    name,
                    NotificationService.dispatch,
                    recipient_id=recipient_id,
                    title=title,
                    message=message,
                    notification_type=NotificationKind.ORDER,
                    data={"order_id": str(order.id)},
                    idempotency_key=f"order_cancelled:{order.id}:{recipient_id}",
                )
            )
        return result

    @classmethod
    def _check_cancellable(cls, order: Order) -> ServiceResult[None]:
        if order.status == OrderStatus.CANCELLED:
            return ServiceResult.failure(
                "Order is already cancelled", error_code="ALREADY_CANCELLED"
            )
        if order.status == OrderStatus.DELIVERED:
            return ServiceResult.failure(
                "Cannot cancel delivered orders. Please contact support for returns.",
                error_code="ORDER_DELIVERED",
            )
        return ServiceResult.success(None)

    @classmethod
    def _refund(
        cls,
        actor: User,
        order: Order,
        reason: str,
        refund_method: str,
    ) -> dict[str, Any]:
        """
        Refund a cancelled order.

        Never raises: any failure is returned as a dict so the cancellation
        stands.
        """
        logger = cls.get_logger()
        try:
            refund = RefundService.process_refund(
                actor=actor,
                order_id=order.id,
                refund_method=refund_method,
                reason=f"Order cancelled: {reason}",
            )
        except Exception as e:
            logger.error(
                "Refund raised during cancellation",
                extra={"order_id": str(order.id), "refund_method": refund_method},
                exc_info=True,
            )
            return {"success": False, "error": str(e), "message": REFUND_FOLLOW_UP_MESSAGE}

        if not refund.success:
            logger.warning(
                "Refund failed during cancellation",
                extra={
                    "order_id": str(order.id),
                    "refund_method": refund_method,
                    "error_code": refund.error_code,
                },
            )
            return {
                "success": False,
                "error": refund.error,
                "error_code": refund.error_code,
                "message": REFUND_FOLLOW_UP_MESSAGE,
            }

        return {
            "success": True,
            "refund_id": str(refund.data.refund.id),
            "refund_amount": refund.data.refund.amount,
            "refund_method": refund.data.requested_method,
        }

    @staticmethod
    def _notifications(order: Order, outcome: CancellationOutcome) -> list[tuple]:
        """(side effect name, recipient, title, message) for each party to notify."""
        refund_due = outcome.refund_result is not None
        refund_note = ""
        if outcome.refund_processed:
            amount = format_naira(outcome.refund_result["refund_amount"])
            refund_note = f" Refund of {amount} processed."

        total = format_naira(order.total)
        same_party = order.user_id == order.vendor_id

        if outcome.cancelled_by == CANCELLED_BY_CUSTOMER:
            notifications = [
                (
                    "notify_buyer",
                    order.user_id,
                    "Order Cancelled",
                    f"Your order #{order.short_id} has been cancelled.{refund_note}",
                )
            ]
            if not same_party:
                notifications.append(
                    (
                        "notify_vendor",
                        order.vendor_id,
                        "Order Cancelled by Customer",
                        f"{order.user.get_full_name()} cancelled order #{order.short_id} - {total}",
                    )
                )
            return notifications

        if refund_due and not outcome.refund_processed:
            refund_note = " Please contact support for refund."
        vendor_name = getattr(getattr(order.vendor, "profile", None), "farm_name", "") or "The vendor"
        notifications = [
            (
                "notify_buyer",
                order.user_id,
                "Vendor Cancelled Your Order",
                f"{vendor_name} cancelled your order #{order.short_id}.{refund_note}",
            )
        ]
        if not same_party:
            notifications.append(
                (
                    "notify_vendor",
                    order.vendor_id,
                    "Order Cancelled",
                    f"You cancelled order #{order.short_id} - {total}",
                )
            )
        return notifications
