"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration;
the Refund model drives RefundState with django-fsm.

Refund States:
    pending → processing → completed          (paystack)
    pending → completed                       (wallet)
    pending → processing → failed → completed (paystack failed, wallet fallback)
    pending/processing → failed
    pending                                    (manual, until an admin settles it)
"""

from django.db import models


class RefundState(models.TextChoices):
    """
    States for the Refund model lifecycle.

    Terminal state: COMPLETED. FAILED is terminal except for the single
    paystack-to-wallet fallback transition.
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class RefundMethod(models.TextChoices):
    """
    Channel used to return money to the buyer.

    WALLET: Instant credit to the buyer's in-app wallet
    PAYSTACK: Reversal through the Paystack refund API
    MANUAL: Recorded for an admin to settle outside the system
    """

    WALLET = "wallet", "Wallet"
    PAYSTACK = "paystack", "Paystack"
    MANUAL = "manual", "Manual"


OPEN_REFUND_STATES = (RefundState.PENDING, RefundState.PROCESSING)


__all__ = [
    "RefundState",
    "RefundMethod",
    "OPEN_REFUND_STATES",
]
