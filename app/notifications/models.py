"""
Notification models.

Design Decisions:
    - Notification inherits from BaseModel (timestamps, ordering)
    - title and message are fully rendered strings; they are the historical
      record of what the user was told
    - idempotency_key is unique when set so a retried task cannot write the
      same notification twice
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class NotificationKind(models.TextChoices):
    """Coarse category of a notification, used by clients for icons and filtering."""

    ORDER = "order", "Order"
    PAYMENT = "payment", "Payment"
    SYSTEM = "system", "System"


class Notification(UUIDPrimaryKeyMixin, BaseModel):
    """
    Individual notification record for a user.

    Fields:
        recipient: User receiving the notification (scopes all queries)
        title: Fully rendered title string
        message: Fully rendered message body
        notification_type: NotificationKind value
        data: Arbitrary JSON context (order id, refund id, amount)
        is_read: Whether recipient has read this notification
        idempotency_key: Optional key preventing duplicate notifications

    Usage:
        unread = Notification.objects.filter(recipient=user, is_read=False)
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        db_index=True,
        help_text="User receiving this notification",
    )

    title = models.CharField(
        max_length=500,
        help_text="Fully rendered notification title",
    )

    message = models.TextField(
        blank=True,
        default="",
        help_text="Fully rendered notification message",
    )

    notification_type = models.CharField(
        max_length=20,
        choices=NotificationKind.choices,
        default=NotificationKind.SYSTEM,
        help_text="Notification category",
    )

    data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Arbitrary context data (order id, refund id, amount)",
    )

    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether recipient has read this notification",
    )

    idempotency_key = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Idempotency key to prevent duplicate notifications",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["idempotency_key"],
                name="notif_idempotency_key_unique",
                condition=models.Q(idempotency_key__isnull=False),
            ),
        ]

    def __str__(self) -> str:
        read_status = "read" if self.is_read else "unread"
        return f"Notification({self.notification_type}) -> {self.recipient_id} [{read_status}]"
