"""
Payment admin configuration.

This file imports admin configurations from the ledger submodule
and registers the Refund model with the Django admin.
"""

from django.contrib import admin

from payments.ledger.admin import LedgerAccountAdmin, LedgerEntryAdmin
from payments.ledger.types import format_naira
from payments.models import Refund

__all__ = [
    "LedgerAccountAdmin",
    "LedgerEntryAdmin",
    "RefundAdmin",
]


@admin.register(Refund)
class RefundAdmin(admin.ModelAdmin):
    """
    Admin configuration for Refund.

    Read-only audit view: refunds change state through RefundService only.
    """

    list_display = [
        "id",
        "order",
        "amount_display",
        "refund_method",
        "state",
        "initiated_by",
        "completed_at",
        "created_at",
    ]
    list_filter = ["state", "refund_method", "created_at"]
    search_fields = [
        "id",
        "order__id",
        "payment_reference",
        "paystack_refund_id",
        "ledger_reference",
    ]
    readonly_fields = [
        "id",
        "order",
        "initiated_by",
        "payment_reference",
        "amount",
        "currency",
        "refund_method",
        "state",
        "paystack_refund_id",
        "paystack_response",
        "ledger_reference",
        "notes",
        "failure_reason",
        "version",
        "completed_at",
        "failed_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "order", "initiated_by", "state", "refund_method"),
            },
        ),
        (
            "Amount",
            {
                "fields": ("amount", "currency", "payment_reference"),
            },
        ),
        (
            "Channel Results",
            {
                "fields": ("paystack_refund_id", "paystack_response", "ledger_reference"),
            },
        ),
        (
            "Status Timestamps",
            {
                "fields": ("completed_at", "failed_at"),
            },
        ),
        (
            "Notes & Failure Info",
            {
                "fields": ("notes", "failure_reason"),
            },
        ),
        (
            "Metadata",
            {
                "fields": ("version", "created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    @admin.display(description="Amount")
    def amount_display(self, obj):
        return format_naira(obj.amount)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
