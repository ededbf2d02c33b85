"""
Ledger models for double-entry bookkeeping.

This module defines the core models for the wallet ledger:
- LedgerAccount: Holds monetary value (user wallets, platform refund pool)
- LedgerEntry: Records movements between accounts

Every entry debits one account and credits another, so the sum of all
balances is always zero. Balances are never stored; they are computed
from entries.

Usage:
    from payments.ledger.models import LedgerAccount, AccountType

    wallet = LedgerAccount.objects.get(type=AccountType.USER_WALLET, owner_id=user.id)
    wallet.get_balance()  # balance in kobo
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q, Sum, Value
from django.db.models.functions import Coalesce

from core.model_mixins import UUIDPrimaryKeyMixin


class AccountType(models.TextChoices):
    """
    Types of ledger accounts.

    Values:
        USER_WALLET: A user's spendable in-app balance
        PLATFORM_REFUNDS: Platform-owned source of refund credits (may go negative)
    """

    USER_WALLET = "user_wallet", "User Wallet"
    PLATFORM_REFUNDS = "platform_refunds", "Platform Refunds"


class EntryType(models.TextChoices):
    """
    Types of ledger entries.

    Values:
        WALLET_CREDIT: Money credited to a wallet by a refund
        ADJUSTMENT: Manual correction made by an admin
    """

    WALLET_CREDIT = "wallet_credit", "Wallet Credit"
    ADJUSTMENT = "adjustment", "Adjustment"


class LedgerAccount(UUIDPrimaryKeyMixin, models.Model):
    """
    A ledger account that holds monetary value.

    Fields:
        id: UUID primary key (from UUIDPrimaryKeyMixin)
        type: Account category (user_wallet, platform_refunds)
        owner_id: UUID of the owning user (null for platform accounts)
        currency: ISO 4217 currency code (default: 'ngn')
        allow_negative: Whether balance can go negative
        is_active: Whether the account can take part in new entries
        created_at: Timestamp when account was created

    Constraints:
        - Unique combination of (type, owner_id, currency)
    """

    type = models.CharField(
        max_length=50,
        choices=AccountType.choices,
        help_text="Category of this account",
    )
    owner_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="UUID of the user that owns this account",
    )
    currency = models.CharField(
        max_length=3,
        default="ngn",
        help_text="ISO 4217 currency code",
    )
    allow_negative = models.BooleanField(
        default=False,
        help_text="Whether this account can have a negative balance",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this account is active",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this account was created",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["type", "owner_id", "currency"],
                name="unique_account_per_owner",
            )
        ]
        indexes = [
            models.Index(fields=["type", "currency"], name="ledger_acct_type_cur_idx"),
        ]

    def __str__(self) -> str:
        if self.owner_id:
            return f"{self.get_type_display()} ({self.owner_id})"
        return self.get_type_display()

    def get_balance(self) -> int:
        """Credits minus debits over all entries touching this account, in kobo."""
        totals = LedgerEntry.objects.filter(
            Q(credit_account=self) | Q(debit_account=self)
        ).aggregate(
            credits=Coalesce(
                Sum("amount_kobo", filter=Q(credit_account=self)),
                Value(0),
                output_field=models.BigIntegerField(),
            ),
            debits=Coalesce(
                Sum("amount_kobo", filter=Q(debit_account=self)),
                Value(0),
                output_field=models.BigIntegerField(),
            ),
        )
        return totals["credits"] - totals["debits"]


class LedgerEntry(UUIDPrimaryKeyMixin, models.Model):
    """
    A ledger entry recording movement of money between accounts.

    Entries are immutable once created; corrections are new ADJUSTMENT
    entries.

    Fields:
        debit_account: Account money is taken from
        credit_account: Account money is added to
        amount_kobo: Amount in kobo (always positive)
        currency: ISO 4217 currency code
        entry_type: Category of this entry
        reference_id/reference_type: Related business entity (e.g. a refund)
        description: Human-readable description shown in wallet history
        metadata: Arbitrary JSON data
        created_by: Identifier of service/user that created this
        idempotency_key: Unique key to prevent duplicate entries

    Constraints:
        - amount_kobo must be positive
        - idempotency_key must be unique
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this entry was recorded",
    )

    debit_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="debit_entries",
        help_text="Account money is taken from",
    )
    credit_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="credit_entries",
        help_text="Account money is added to",
    )
    amount_kobo = models.PositiveBigIntegerField(
        help_text="Amount in kobo (always positive)",
    )
    currency = models.CharField(
        max_length=3,
        default="ngn",
        help_text="ISO 4217 currency code",
    )

    entry_type = models.CharField(
        max_length=50,
        choices=EntryType.choices,
        help_text="Category of this entry",
    )
    reference_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="UUID of related business entity (e.g., refund ID)",
    )
    reference_type = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Type of related entity (e.g., 'refund')",
    )

    description = models.TextField(
        null=True,
        blank=True,
        help_text="Human-readable description of this entry",
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Arbitrary JSON data for extensibility",
    )

    created_by = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Identifier of service/user that created this entry",
    )
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique key to prevent duplicate entries",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "ledger entries"
        indexes = [
            models.Index(fields=["reference_type", "reference_id"], name="ledger_entry_ref_idx"),
            models.Index(fields=["entry_type"], name="ledger_entry_type_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_kobo__gt=0),
                name="ledger_entry_amount_kobo_positive",
            )
        ]

    def __str__(self) -> str:
        return f"{self.get_entry_type_display()}: {self.amount_kobo} kobo"
