"""
Django admin configuration for orders.
"""

from django.contrib import admin

from orders.models import Order
from payments.ledger.types import format_naira


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders with payment and refund status.

    Cancellation and refund fields are read-only; they are written by
    CancellationService and RefundService.
    """

    list_display = [
        "id",
        "user",
        "vendor",
        "total_display",
        "status",
        "payment_status",
        "refund_status",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "refund_status", "created_at"]
    search_fields = ["id", "user__email", "vendor__email", "payment_reference"]
    raw_id_fields = ["user", "vendor"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    readonly_fields = [
        "id",
        "status",
        "refund_status",
        "refund_amount",
        "refund_method",
        "refund_reference",
        "refunded_at",
        "cancelled_by",
        "cancelled_at",
        "cancellation_reason",
        "created_at",
        "updated_at",
    ]

    fieldsets = (
        (None, {"fields": ("id", "user", "vendor", "total", "status")}),
        ("Delivery", {"fields": ("delivery_address", "delivery_notes")}),
        (
            "Payment",
            {"fields": ("payment_status", "payment_reference", "payment_amount")},
        ),
        (
            "Refund",
            {
                "fields": (
                    "refund_status",
                    "refund_amount",
                    "refund_method",
                    "refund_reference",
                    "refunded_at",
                ),
            },
        ),
        (
            "Cancellation",
            {"fields": ("cancelled_by", "cancelled_at", "cancellation_reason")},
        ),
        (
            "Metadata",
            {"fields": ("created_at", "updated_at"), "classes": ("collapse",)},
        ),
    )

    @admin.display(description="Total")
    def total_display(self, obj):
        return format_naira(obj.total)
