"""
Ledger-specific exceptions for financial operations.

Exception Hierarchy:
    LedgerError (base)
    ├── AccountNotFound - Account lookup failures
    ├── InsufficientBalance - Balance validation failures
    └── InactiveAccount - Operations on inactive accounts

Usage:
    from payments.ledger.exceptions import LedgerError

    try:
        ledger.credit_wallet(user.id, amount, description, reference)
    except LedgerError as e:
        refund.fail(failure_reason=e.message)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    import uuid
    from typing import Any


class LedgerError(BaseApplicationError):
    """
    Base exception for all ledger operations.

    Also raised directly for invalid credit requests (non-positive amount).
    """

    default_error_code: str = "LEDGER_ERROR"


class AccountNotFound(LedgerError):
    default_error_code: str = "ACCOUNT_NOT_FOUND"
    http_status = 404


class InsufficientBalance(LedgerError):
    """
    Raised when an account has insufficient funds for an operation.

    Attributes:
        account_id: The UUID of the account with insufficient funds
        required: The amount (in kobo) that was required
        available: The amount (in kobo) that was available
    """

    default_error_code: str = "INSUFFICIENT_BALANCE"

    def __init__(
        self,
        account_id: uuid.UUID,
        required: int,
        available: int,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.account_id = account_id
        self.required = required
        self.available = available

        message = (
            f"Account {account_id} has insufficient balance: "
            f"required {required} kobo, available {available} kobo"
        )

        full_details = {
            "account_id": str(account_id),
            "required_kobo": required,
            "available_kobo": available,
        }
        if details:
            full_details.update(details)

        super().__init__(
            message=message,
            error_code=error_code,
            details=full_details,
        )


class InactiveAccount(LedgerError):
    """
    Raised when attempting to use an inactive account.

    Accounts can be deactivated (e.g. a frozen wallet) but their history
    is preserved. Operations on inactive accounts are rejected.
    """

    default_error_code: str = "INACTIVE_ACCOUNT"
