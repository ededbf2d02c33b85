"""
Ledger service layer for financial operations.

All ledger writes go through LedgerService so that validation, locking and
idempotency are applied uniformly.

Usage:
    from payments.ledger.services import ledger

    # Credit a user's wallet (atomic, idempotent by reference)
    balance = ledger.credit_wallet(
        user_id=order.user_id,
        amount=Decimal("5000.00"),
        description="Refund for cancelled order #1a2b3c4d",
        reference=f"refund_{refund.id}",
    )

    # Read a wallet balance
    ledger.get_wallet_balance(user.id)  # Money(kobo=500000, currency='ngn')
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from django.db import IntegrityError, transaction

from .exceptions import AccountNotFound, InactiveAccount, InsufficientBalance, LedgerError
from .models import AccountType, EntryType, LedgerAccount, LedgerEntry
from .types import Money, RecordEntryParams, to_kobo

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "ngn"


class LedgerService:
    """
    Service class for ledger operations.

    Key features:
    - Atomic transactions for multi-entry operations
    - Idempotency via unique keys (safe to retry)
    - Balance validation before debits
    - Account locking in id order to prevent deadlocks

    All methods are static - no instance state is maintained.
    """

    @staticmethod
    def get_or_create_account(
        account_type: AccountType | str,
        owner_id: uuid.UUID | None = None,
        currency: str = DEFAULT_CURRENCY,
        allow_negative: bool = False,
    ) -> LedgerAccount:
        """
        Get existing account or create new one.

        Looks up an account by (type, owner_id, currency). If not found,
        creates a new account with the specified parameters.
        """
        account, _ = LedgerAccount.objects.get_or_create(
            type=account_type,
            owner_id=owner_id,
            currency=currency,
            defaults={"allow_negative": allow_negative},
        )
        return account

    @staticmethod
    def get_account(account_id: uuid.UUID) -> LedgerAccount:
        """
        Get account by ID.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        try:
            return LedgerAccount.objects.get(id=account_id)
        except LedgerAccount.DoesNotExist:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            )

    @staticmethod
    def get_account_by_owner(
        account_type: AccountType | str,
        owner_id: uuid.UUID,
        currency: str = DEFAULT_CURRENCY,
    ) -> LedgerAccount | None:
        """Get account by type, owner, and currency, or None."""
        return LedgerAccount.objects.filter(
            type=account_type,
            owner_id=owner_id,
            currency=currency,
        ).first()

    @staticmethod
    def _validate_account_for_debit(account: LedgerAccount, amount_kobo: int) -> None:
        """
        Validate that an account can be debited.

        Raises:
            InactiveAccount: If account is inactive
            InsufficientBalance: If account lacks funds
        """
        if not account.is_active:
            raise InactiveAccount(
                f"Account {account.id} is inactive",
                details={"account_id": str(account.id)},
            )

        if not account.allow_negative:
            current_balance = account.get_balance()
            if current_balance < amount_kobo:
                raise InsufficientBalance(
                    account_id=account.id,
                    required=amount_kobo,
                    available=current_balance,
                )

    @staticmethod
    def _validate_account_for_credit(account: LedgerAccount) -> None:
        """
        Raises:
            InactiveAccount: If account is inactive
        """
        if not account.is_active:
            raise InactiveAccount(
                f"Account {account.id} is inactive",
                details={"account_id": str(account.id)},
            )

    @staticmethod
    def record_entries(entries: list[RecordEntryParams]) -> list[LedgerEntry]:
        """
        Record multiple ledger entries atomically.

        All entries succeed or all fail. Existing entries (matched by
        idempotency_key) are returned without modification.

        Entries are processed sequentially, so balance changes from earlier
        entries in the batch affect validation of later entries.

        Raises:
            AccountNotFound: If any account doesn't exist
            InactiveAccount: If any account is inactive
            InsufficientBalance: If any debit account lacks funds
        """
        if not entries:
            return []

        results: list[LedgerEntry] = []

        with transaction.atomic():
            account_ids: set[uuid.UUID] = set()
            for params in entries:
                account_ids.add(params.debit_account_id)
                account_ids.add(params.credit_account_id)

            # Lock in id order so concurrent credits cannot deadlock
            accounts = {
                acc.id: acc
                for acc in LedgerAccount.objects.filter(id__in=account_ids)
                .select_for_update()
                .order_by("id")
            }

            for account_id in account_ids:
                if account_id not in accounts:
                    raise AccountNotFound(
                        f"Account {account_id} not found",
                        details={"account_id": str(account_id)},
                    )

            for params in entries:
                debit_account = accounts[params.debit_account_id]
                credit_account = accounts[params.credit_account_id]

                # Idempotency is checked before validation so a replay never
                # fails on a balance that already includes the original entry
                existing = LedgerEntry.objects.filter(
                    idempotency_key=params.idempotency_key
                ).first()
                if existing is not None:
                    results.append(existing)
                    continue

                LedgerService._validate_account_for_debit(
                    debit_account, params.amount_kobo
                )
                LedgerService._validate_account_for_credit(credit_account)

                try:
                    with transaction.atomic():
                        entry = LedgerEntry.objects.create(
                            idempotency_key=params.idempotency_key,
                            debit_account=debit_account,
                            credit_account=credit_account,
                            amount_kobo=params.amount_kobo,
                            currency=debit_account.currency,
                            entry_type=params.entry_type,
                            reference_id=params.reference_id,
                            reference_type=params.reference_type,
                            description=params.description,
                            metadata=params.metadata or {},
                            created_by=params.created_by,
                        )
                except IntegrityError:
                    # Another process created it between our check and create
                    entry = LedgerEntry.objects.get(
                        idempotency_key=params.idempotency_key
                    )

                results.append(entry)

        return results

    @staticmethod
    def credit_wallet(
        user_id: uuid.UUID,
        amount: Decimal,
        description: str,
        reference: str,
        reference_id: uuid.UUID | None = None,
        created_by: str = "refund_service",
    ) -> Money:
        """
        Credit a user's wallet and return the new balance.

        The credit is drawn from the platform refunds account. Account
        creation, locking, the entry and the balance read all happen in
        one transaction. The wallet is created on first credit.

        Args:
            user_id: Owner of the wallet
            amount: Amount in naira
            description: Text shown in the user's wallet history
            reference: Idempotency key; repeating it returns the current
                balance without writing a second entry
            reference_id: Optional refund id recorded on the entry
            created_by: Identifier of the caller, kept for audit

        Returns:
            The wallet balance after the credit

        Raises:
            LedgerError: If amount is not positive
            InactiveAccount: If the wallet has been deactivated
        """
        amount_kobo = to_kobo(amount)
        if amount_kobo <= 0:
            raise LedgerError(
                "Credit amount must be positive",
                details={"amount": str(amount)},
            )

        with transaction.atomic():
            wallet = LedgerService.get_or_create_account(
                AccountType.USER_WALLET, owner_id=user_id
            )
            platform = LedgerService.get_or_create_account(
                AccountType.PLATFORM_REFUNDS, allow_negative=True
            )
            entry = LedgerService.record_entries(
                [
                    RecordEntryParams(
                        debit_account_id=platform.id,
                        credit_account_id=wallet.id,
                        amount_kobo=amount_kobo,
                        entry_type=EntryType.WALLET_CREDIT,
                        idempotency_key=reference,
                        reference_id=reference_id,
                        reference_type="refund" if reference_id else None,
                        description=description,
                        created_by=created_by,
                    )
                ]
            )[0]
            balance = Money(kobo=wallet.get_balance(), currency=wallet.currency)

        logger.info(
            f"Wallet credited for user {user_id}",
            extra={
                "user_id": str(user_id),
                "amount_kobo": amount_kobo,
                "reference": reference,
                "entry_id": str(entry.id),
                "balance_kobo": balance.kobo,
            },
        )
        return balance

    @staticmethod
    def get_wallet_balance(
        user_id: uuid.UUID, currency: str = DEFAULT_CURRENCY
    ) -> Money:
        """Return a user's wallet balance; zero if the wallet was never created."""
        wallet = LedgerService.get_account_by_owner(
            AccountType.USER_WALLET, user_id, currency
        )
        if wallet is None:
            return Money(kobo=0, currency=currency)
        return Money(kobo=wallet.get_balance(), currency=wallet.currency)

    @staticmethod
    def get_balance(account_id: uuid.UUID) -> Money:
        """
        Get current balance for an account.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        account = LedgerService.get_account(account_id)
        return Money(kobo=account.get_balance(), currency=account.currency)

    @staticmethod
    def deactivate_account(account_id: uuid.UUID) -> LedgerAccount:
        """
        Soft-delete an account by marking it inactive.

        Inactive accounts cannot be used in new entries but their history
        is preserved.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        account = LedgerService.get_account(account_id)
        account.is_active = False
        account.save(update_fields=["is_active"])
        return account


# Singleton instance for convenience
# Usage: from payments.ledger.services import ledger
ledger = LedgerService()
