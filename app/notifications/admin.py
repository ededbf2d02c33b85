"""
Django admin configuration for notification models.
"""

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """Read-mostly view of notifications sent to users."""

    list_display = ["id", "recipient", "notification_type", "title", "is_read", "created_at"]
    list_filter = ["notification_type", "is_read", "created_at"]
    search_fields = ["title", "message", "recipient__email", "idempotency_key"]
    raw_id_fields = ["recipient"]
    readonly_fields = ["created_at", "updated_at", "idempotency_key", "data"]
    ordering = ["-created_at"]
