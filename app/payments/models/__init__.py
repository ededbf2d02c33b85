"""
Payment domain models.

This module contains all payment-related models:
- Refund: Money returned to buyers
- LedgerAccount / LedgerEntry: Wallet ledger (defined in payments.ledger,
  re-exported here so migrations discover them)
"""

from payments.ledger.models import LedgerAccount, LedgerEntry
from payments.models.refund import Refund

__all__ = [
    "LedgerAccount",
    "LedgerEntry",
    "Refund",
]
