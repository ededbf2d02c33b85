"""
Django admin for the wallet ledger.

Both models are read-only here. Money only moves through
LedgerService.credit_wallet(); the admin is for looking up a wallet
balance or tracing a refund reference to its entry.
"""

from django.contrib import admin

from .models import LedgerAccount, LedgerEntry
from .types import Money


class ReadOnlyLedgerAdmin(admin.ModelAdmin):
    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(LedgerAccount)
class LedgerAccountAdmin(ReadOnlyLedgerAdmin):
    list_display = ["owner_id", "type", "balance_display", "is_active", "created_at"]
    list_filter = ["type", "is_active"]
    search_fields = ["owner_id"]
    readonly_fields = ["balance_display"]
    ordering = ["-created_at"]

    @admin.display(description="Balance")
    def balance_display(self, obj: LedgerAccount) -> str:
        return str(Money(kobo=obj.get_balance(), currency=obj.currency))


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyLedgerAdmin):
    """Search by refund reference (the idempotency key) or refund id."""

    list_display = [
        "idempotency_key",
        "entry_type",
        "amount_display",
        "credit_account",
        "created_at",
    ]
    list_filter = ["entry_type", "created_at"]
    list_select_related = ["credit_account", "debit_account"]
    search_fields = ["idempotency_key", "reference_id", "description"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    @admin.display(description="Amount")
    def amount_display(self, obj: LedgerEntry) -> str:
        return str(Money(kobo=obj.amount_kobo, currency=obj.currency))
