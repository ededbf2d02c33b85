"""
Pytest fixtures for ledger tests.
"""

import pytest

from payments.ledger.models import AccountType
from payments.ledger.tests.factories import LedgerAccountFactory


@pytest.fixture
def platform_account(db):
    """Platform refunds account; may go negative."""
    return LedgerAccountFactory(
        type=AccountType.PLATFORM_REFUNDS,
        owner_id=None,
        allow_negative=True,
    )


@pytest.fixture
def wallet_account(db):
    """A user wallet that cannot go negative."""
    return LedgerAccountFactory(type=AccountType.USER_WALLET)
