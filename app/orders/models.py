"""
Order model and its status vocabularies.

An Order is created by checkout (outside this service) and is mutated here
only by cancellation and refunds:

- CancellationService owns status and the cancelled_* fields
- RefundService owns payment_status and the refund_* fields

Usage:
    from orders.models import Order, OrderStatus

    order.cancel(by=user, reason="Ordered by mistake")
    order.save()
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import RefundMethod


class OrderStatus(models.TextChoices):
    """
    Fulfilment stage of an order.

    State Flow:
        PENDING -> CONFIRMED -> PROCESSING -> DELIVERED
        PENDING/CONFIRMED/PROCESSING -> CANCELLED

    DELIVERED and CANCELLED are terminal.
    """

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PROCESSING = "processing", "Processing"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


CANCELLABLE_STATUSES = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
]


class PaymentStatus(models.TextChoices):
    UNPAID = "unpaid", "Unpaid"
    PAID = "paid", "Paid"
    PARTIALLY_REFUNDED = "partially_refunded", "Partially Refunded"
    REFUNDED = "refunded", "Refunded"


class RefundStatus(models.TextChoices):
    NONE = "none", "None"
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class Order(UUIDPrimaryKeyMixin, BaseModel):
    """
    A single buyer-to-vendor transaction.

    Fields:
        user: Buyer
        vendor: Seller
        total: Order total in naira
        status: Fulfilment stage (managed by FSM)
        payment_status / payment_reference / payment_amount: Captured payment
        refund_status / refund_amount / refund_method / refund_reference /
            refunded_at: Outcome of the latest refund
        cancelled_by / cancelled_at / cancellation_reason: Set once on cancel

    Note:
        refund_amount never exceeds payment_amount (or total when
        payment_amount is unset). A database constraint enforces it.
    """

    # ==========================================================================
    # Parties
    # ==========================================================================

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
        help_text="Buyer who placed the order",
    )

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="vendor_orders",
        help_text="Vendor fulfilling the order",
    )

    # ==========================================================================
    # Order Details
    # ==========================================================================

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Order total in naira",
    )

    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        protected=False,
        help_text="Fulfilment stage (managed by FSM)",
    )

    delivery_address = models.TextField(blank=True, default="")
    delivery_notes = models.TextField(blank=True, default="")

    # ==========================================================================
    # Payment
    # ==========================================================================

    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
        db_index=True,
    )

    payment_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Paystack transaction reference",
    )

    payment_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Captured amount; may differ from total",
    )

    # ==========================================================================
    # Refund
    # ==========================================================================

    refund_status = models.CharField(
        max_length=20,
        choices=RefundStatus.choices,
        default=RefundStatus.NONE,
        db_index=True,
    )

    refund_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )

    refund_method = models.CharField(
        max_length=20,
        choices=RefundMethod.choices,
        null=True,
        blank=True,
    )

    refund_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Paystack refund id or wallet ledger reference",
    )

    refunded_at = models.DateTimeField(null=True, blank=True)

    # ==========================================================================
    # Cancellation
    # ==========================================================================

    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancelled_orders",
        help_text="User who cancelled the order",
    )

    cancelled_at = models.DateTimeField(null=True, blank=True)

    cancellation_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        indexes = [
            models.Index(fields=["user", "status"], name="order_user_status_idx"),
            models.Index(fields=["vendor", "status"], name="order_vendor_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total__gte=0),
                name="order_total_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    Q(refund_amount__isnull=True)
                    | Q(payment_amount__isnull=True, refund_amount__lte=F("total"))
                    | Q(payment_amount__isnull=False, refund_amount__lte=F("payment_amount"))
                ),
                name="order_refund_within_captured",
            ),
        ]

    def __str__(self) -> str:
        return f"Order #{self.short_id} ({self.status})"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def short_id(self) -> str:
        """First eight characters of the id, as shown to users."""
        return str(self.id)[:8]

    @property
    def captured_amount(self) -> Decimal:
        """Amount actually captured; falls back to total when unset."""
        return self.payment_amount if self.payment_amount is not None else self.total

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(field=status, source=OrderStatus.PENDING, target=OrderStatus.CONFIRMED)
    def confirm(self):
        """Vendor accepted the order."""

    @transition(field=status, source=OrderStatus.CONFIRMED, target=OrderStatus.PROCESSING)
    def start_processing(self):
        """Vendor started preparing the order."""

    @transition(field=status, source=OrderStatus.PROCESSING, target=OrderStatus.DELIVERED)
    def deliver(self):
        """Order handed to the buyer. Terminal for this pipeline."""

    @transition(field=status, source=CANCELLABLE_STATUSES, target=OrderStatus.CANCELLED)
    def cancel(self, by, reason: str = ""):
        """
        Cancel the order.

        Transition: PENDING/CONFIRMED/PROCESSING -> CANCELLED

        Args:
            by: User cancelling (buyer or vendor)
            reason: Free text from the caller
        """
        self.cancelled_by = by
        self.cancelled_at = timezone.now()
        self.cancellation_reason = reason or ""
