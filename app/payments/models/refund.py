"""
Refund model for tracking money returned to buyers.

A Refund represents one attempt to return money for one order. A paystack
refund that fails and is then credited to the wallet stays on the same row,
so each cancellation has exactly one audit record.

Usage:
    from payments.models import Refund
    from payments.state_machines import RefundMethod

    refund = Refund.objects.create(
        order=order,
        amount=Decimal("5000.00"),
        refund_method=RefundMethod.PAYSTACK,
        initiated_by=user,
    )

    refund.process()   # pending -> processing
    refund.save()

    refund.complete(paystack_refund_id="1234")  # processing -> completed
    refund.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payments.state_machines import RefundMethod, RefundState

WALLET_FALLBACK_NOTE = "Paystack failed, refunded to wallet"


def _is_paystack_refund(instance: Refund) -> bool:
    return instance.refund_method == RefundMethod.PAYSTACK


class Refund(UUIDPrimaryKeyMixin, BaseModel):
    """
    Represents money returned to a buyer.

    State Flow:
        PENDING -> PROCESSING -> COMPLETED
        PENDING -> COMPLETED
        PENDING/PROCESSING -> FAILED
        FAILED -> COMPLETED (paystack refunds only, via wallet fallback)

    Fields:
        order: Order being refunded
        payment_reference: Gateway transaction reference copied from the order
        amount: Refund amount in naira
        currency: ISO 4217 currency code
        state: Current FSM state
        refund_method: Channel used (rewritten to wallet on fallback)
        initiated_by: User who requested the refund
        notes: Free text; carries the reason and fallback notes
        failure_reason: Error details from the last failed channel
        paystack_refund_id: Paystack refund id on success
        paystack_response: Raw Paystack response body (success or failure)
        ledger_reference: Ledger idempotency key of the wallet credit
        version: Incremented on each save
        completed_at / failed_at: Transition timestamps

    Note:
        Several refunds may exist for one order only if the earlier ones
        ended FAILED.
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="refunds",
        help_text="Order being refunded",
    )

    initiated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="initiated_refunds",
        help_text="User who requested this refund",
    )

    payment_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Gateway transaction reference of the original payment",
    )

    # ==========================================================================
    # Amount & Method
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Refund amount in naira",
    )

    currency = models.CharField(
        max_length=3,
        default="ngn",
        help_text="ISO 4217 currency code (lowercase)",
    )

    refund_method = models.CharField(
        max_length=20,
        choices=RefundMethod.choices,
        help_text="Channel used to return the money",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    state = FSMField(
        default=RefundState.PENDING,
        choices=RefundState.choices,
        db_index=True,
        protected=False,
        help_text="Current state of the refund (managed by FSM)",
    )

    # ==========================================================================
    # Channel Results
    # ==========================================================================

    paystack_refund_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="Paystack refund id",
    )

    paystack_response = models.JSONField(
        null=True,
        blank=True,
        help_text="Raw Paystack response body",
    )

    ledger_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Idempotency key of the wallet ledger entry",
    )

    # ==========================================================================
    # Concurrency Control
    # ==========================================================================

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    # ==========================================================================
    # Timestamps
    # ==========================================================================

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When refund was completed",
    )

    failed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When refund last failed",
    )

    # ==========================================================================
    # Notes & Error Info
    # ==========================================================================

    notes = models.TextField(
        blank=True,
        default="",
        help_text="Refund reason and processing notes",
    )

    failure_reason = models.TextField(
        null=True,
        blank=True,
        help_text="Detailed reason if refund failed",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Refund"
        verbose_name_plural = "Refunds"
        indexes = [
            models.Index(fields=["order", "state"], name="refund_order_state_idx"),
            models.Index(fields=["state", "created_at"], name="refund_state_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="refund_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Refund({self.id}, {self.state}, {self.refund_method}, {self.amount} {self.currency.upper()})"

    def save(self, *args, **kwargs):
        """
        Save with version auto-increment for optimistic locking.
        """
        is_update = self.pk and not self._state.adding and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])

    def append_note(self, note: str) -> None:
        """Append to notes using the ' | ' separator."""
        self.notes = f"{self.notes} | {note}" if self.notes else note

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=state,
        source=RefundState.PENDING,
        target=RefundState.PROCESSING,
    )
    def process(self):
        """
        Begin processing the refund.

        Transition: PENDING -> PROCESSING

        Called before the Paystack refund API call is made.
        """

    @transition(
        field=state,
        source=[RefundState.PENDING, RefundState.PROCESSING],
        target=RefundState.COMPLETED,
    )
    def complete(
        self,
        paystack_refund_id: str | None = None,
        paystack_response: dict | None = None,
        ledger_reference: str | None = None,
    ):
        """
        Mark refund as completed after money has moved.

        Transition: PENDING/PROCESSING -> COMPLETED
        """
        self.completed_at = timezone.now()
        if paystack_refund_id:
            self.paystack_refund_id = paystack_refund_id
        if paystack_response is not None:
            self.paystack_response = paystack_response
        if ledger_reference:
            self.ledger_reference = ledger_reference

    @transition(
        field=state,
        source=[RefundState.PENDING, RefundState.PROCESSING],
        target=RefundState.FAILED,
    )
    def fail(self, reason: str | None = None, paystack_response: dict | None = None):
        """
        Mark refund as failed.

        Transition: PENDING/PROCESSING -> FAILED

        Args:
            reason: Failure reason kept for audit
            paystack_response: Raw gateway body, when the gateway answered
        """
        self.failed_at = timezone.now()
        if reason:
            self.failure_reason = reason
        if paystack_response is not None:
            self.paystack_response = paystack_response

    @transition(
        field=state,
        source=RefundState.FAILED,
        target=RefundState.COMPLETED,
        conditions=[_is_paystack_refund],
    )
    def complete_via_wallet_fallback(self, ledger_reference: str):
        """
        Complete a failed Paystack refund by crediting the wallet instead.

        Transition: FAILED -> COMPLETED (only while refund_method is paystack)

        The only way out of FAILED. failure_reason and paystack_response are
        kept so the gateway error stays on record.
        """
        self.refund_method = RefundMethod.WALLET
        self.ledger_reference = ledger_reference
        self.completed_at = timezone.now()
        self.append_note(WALLET_FALLBACK_NOTE)

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_complete(self) -> bool:
        return self.state == RefundState.COMPLETED

    @property
    def is_open(self) -> bool:
        """Check if refund is still awaiting an outcome."""
        return self.state in [RefundState.PENDING, RefundState.PROCESSING]
