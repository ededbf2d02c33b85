"""
Ledger - Double-entry bookkeeping for wallet balances.

Every movement debits one account and credits another. User wallets are
credited from the platform refunds account, which is allowed to go negative.

Public API:
    Models:
        LedgerAccount - Holds monetary value (wallets, platform refunds)
        LedgerEntry - Records movements between accounts
        AccountType - Enum of account categories
        EntryType - Enum of entry categories

    Service:
        ledger - Singleton instance of LedgerService
        LedgerService - Class with all ledger operations

    Types:
        Money - Monetary amount in kobo
        RecordEntryParams - Parameters for recording entries
        to_kobo / format_naira - Amount helpers

    Exceptions:
        LedgerError - Base exception for ledger operations
        AccountNotFound - Account lookup failures
        InsufficientBalance - Balance validation failures
        InactiveAccount - Operations on inactive accounts

Usage:
    from payments.ledger import ledger, LedgerError

    try:
        balance = ledger.credit_wallet(
            user_id=user.id,
            amount=Decimal("2500.00"),
            description="Refund for cancelled order #1a2b3c4d",
            reference=f"refund_{refund.id}",
        )
    except LedgerError as e:
        ...
"""

from .exceptions import (
    AccountNotFound,
    InactiveAccount,
    InsufficientBalance,
    LedgerError,
)
from .models import AccountType, EntryType, LedgerAccount, LedgerEntry
from .services import LedgerService, ledger
from .types import Money, RecordEntryParams, format_naira, to_kobo

__all__ = [
    # Models
    "LedgerAccount",
    "LedgerEntry",
    "AccountType",
    "EntryType",
    # Service
    "ledger",
    "LedgerService",
    # Types
    "Money",
    "RecordEntryParams",
    "to_kobo",
    "format_naira",
    # Exceptions
    "LedgerError",
    "AccountNotFound",
    "InsufficientBalance",
    "InactiveAccount",
]
