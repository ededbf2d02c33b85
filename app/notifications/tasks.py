"""
Celery tasks for notifications.

Tasks:
    create_notification: Write a notification row for a user

Design:
    - Tasks receive primitive arguments (ids as strings) so they serialize
      as JSON
    - Tasks are idempotent: a repeated idempotency_key is a no-op
    - Unexpected errors are retried with backoff

Usage:
    # Called by NotificationService.dispatch(); not normally used directly
    create_notification.delay(recipient_id="uuid-string", title="...", message="...")
"""

from __future__ import annotations

import logging

from celery import shared_task
from django.db import DatabaseError

from notifications.services import NotificationService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def create_notification(
    self,
    recipient_id: str,
    title: str,
    message: str,
    notification_type: str = "system",
    data: dict | None = None,
    idempotency_key: str | None = None,
) -> bool:
    """
    Create a notification for recipient_id.

    Returns:
        True if created or already present, False if rejected

    Raises:
        DatabaseError: On database failure (triggers retry)
    """
    result = NotificationService.create_notification(
        recipient_id=recipient_id,
        title=title,
        message=message,
        notification_type=notification_type,
        data=data,
        idempotency_key=idempotency_key,
    )

    if result.success:
        return True
    if result.error_code == "DUPLICATE":
        return True

    logger.warning(
        f"Notification for user {recipient_id} rejected: {result.error}",
        extra={"error_code": result.error_code, "attempt": self.request.retries},
    )
    return False
