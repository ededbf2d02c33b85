"""
Data types for ledger operations.

Types:
    Money: A monetary amount in kobo with currency
    RecordEntryParams: Parameters for recording a ledger entry

Helpers:
    to_kobo: Convert a naira Decimal to integer kobo
    format_naira: Render a naira amount for user-facing text

Usage:
    from payments.ledger.types import Money, to_kobo

    balance = Money(kobo=500000)
    print(balance)          # "₦5000.00 NGN"
    to_kobo(Decimal("49.995"))  # 5000
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

KOBO_PER_NAIRA = 100


def to_kobo(amount: Decimal | int | str) -> int:
    """
    Convert a naira amount to integer kobo, rounding half-up.

    Paystack and the ledger both work in the minor unit, so this is the
    single place the conversion happens.
    """
    value = Decimal(str(amount)) * KOBO_PER_NAIRA
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_naira(amount: Decimal | int | str) -> str:
    """Format a naira amount as shown to users, e.g. '₦5000.00'."""
    return f"₦{Decimal(str(amount)):.2f}"


@dataclass
class Money:
    """
    Represents a monetary amount.

    All amounts are stored in kobo (smallest currency unit) to avoid
    floating-point precision issues.

    Attributes:
        kobo: Amount in the smallest currency unit
        currency: ISO 4217 currency code (default: 'ngn')
    """

    kobo: int
    currency: str = "ngn"

    def __str__(self) -> str:
        return f"{format_naira(self.amount)} {self.currency.upper()}"

    def __repr__(self) -> str:
        return f"Money(kobo={self.kobo}, currency={self.currency!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.kobo == other.kobo and self.currency == other.currency

    @property
    def amount(self) -> Decimal:
        """The amount in major units (naira) as a two-place Decimal."""
        return (Decimal(self.kobo) / KOBO_PER_NAIRA).quantize(Decimal("0.01"))


@dataclass
class RecordEntryParams:
    """
    Parameters for recording a ledger entry.

    Every entry debits one account and credits another.

    Required Attributes:
        debit_account_id: UUID of the account being debited (money out)
        credit_account_id: UUID of the account being credited (money in)
        amount_kobo: Amount in kobo (must be positive)
        entry_type: Type of entry (e.g., 'wallet_credit')
        idempotency_key: Unique key to prevent duplicate entries

    Optional Attributes:
        reference_id: UUID of related business entity (e.g., refund ID)
        reference_type: Type of related entity (e.g., 'refund')
        description: Human-readable description
        metadata: Arbitrary JSON-serializable data
        created_by: Identifier of the service/user creating the entry
    """

    debit_account_id: uuid.UUID
    credit_account_id: uuid.UUID
    amount_kobo: int
    entry_type: str
    idempotency_key: str

    reference_id: uuid.UUID | None = None
    reference_type: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = field(default_factory=dict)
    created_by: str | None = None

    def __post_init__(self) -> None:
        if self.amount_kobo <= 0:
            raise ValueError("amount_kobo must be positive")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")
        if self.debit_account_id == self.credit_account_id:
            raise ValueError("debit_account_id and credit_account_id must be different")
