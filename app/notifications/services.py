"""
Notification service layer.

Services:
    NotificationService: Notification creation and dispatch

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Domain services call dispatch(), which enqueues a Celery task; the
      task calls create_notification() to write the row

Usage:
    from notifications.services import NotificationService

    # From a domain service (async, best effort)
    NotificationService.dispatch(
        recipient_id=order.user_id,
        title="Refund Processed",
        message="₦1000.00 has been credited to your wallet",
        notification_type=NotificationKind.PAYMENT,
    )

    # Synchronous creation (used by the task)
    result = NotificationService.create_notification(
        recipient_id=user.id,
        title="Order Cancelled",
        message="Your order #... has been cancelled.",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from django.db import IntegrityError, transaction

from core.services import BaseService, ServiceResult
from notifications.models import Notification, NotificationKind

if TYPE_CHECKING:
    from celery.result import AsyncResult


class NotificationService(BaseService):
    """
    Service for notification operations.

    Methods:
        dispatch: Enqueue notification creation on the Celery queue
        create_notification: Write a notification row (idempotent by key)
    """

    @classmethod
    def dispatch(
        cls,
        recipient_id: UUID | str,
        title: str,
        message: str,
        notification_type: str = NotificationKind.SYSTEM,
        data: dict | None = None,
        idempotency_key: str | None = None,
    ) -> AsyncResult:
        """
        Enqueue creation of a notification.

        Callers treat this as a side effect: a broker error propagates to
        them so it can be recorded, but it must never undo their work.

        Returns:
            The Celery AsyncResult for the enqueued task

        Raises:
            kombu.exceptions.OperationalError: If the broker is unreachable
        """
        # Import tasks here to avoid circular imports
        from notifications import tasks

        cls.get_logger().debug(
            "Dispatching notification",
            extra={
                "recipient_id": str(recipient_id),
                "notification_type": str(notification_type),
                "idempotency_key": idempotency_key,
            },
        )
        return tasks.create_notification.delay(
            recipient_id=str(recipient_id),
            title=title,
            message=message,
            notification_type=str(notification_type),
            data=data or {},
            idempotency_key=idempotency_key,
        )

    @classmethod
    def create_notification(
        cls,
        recipient_id: UUID | str,
        title: str,
        message: str,
        notification_type: str = NotificationKind.SYSTEM,
        data: dict | None = None,
        idempotency_key: str | None = None,
    ) -> ServiceResult[Notification]:
        """
        Create a new notification for a user.

        Args:
            recipient_id: Id of the user receiving the notification
            title: Rendered title
            message: Rendered message body
            notification_type: NotificationKind value
            data: Context dict stored alongside the notification
            idempotency_key: Optional key to prevent duplicate notifications

        Returns:
            ServiceResult with created Notification if successful

        Error codes:
            INVALID_TYPE: notification_type is not a NotificationKind
            DUPLICATE: Notification with this idempotency_key already exists
        """
        if notification_type not in NotificationKind.values:
            return ServiceResult.failure(
                f"Unknown notification type: {notification_type}",
                error_code="INVALID_TYPE",
            )

        if idempotency_key and Notification.objects.filter(
            idempotency_key=idempotency_key
        ).exists():
            cls.get_logger().info(
                f"Duplicate notification prevented: idempotency_key={idempotency_key}"
            )
            return ServiceResult.failure(
                f"Notification with idempotency_key already exists: {idempotency_key}",
                error_code="DUPLICATE",
            )

        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    recipient_id=recipient_id,
                    title=title,
                    message=message,
                    notification_type=notification_type,
                    data=data or {},
                    idempotency_key=idempotency_key,
                )
        except IntegrityError:
            # Concurrent task won the unique key
            if idempotency_key and Notification.objects.filter(
                idempotency_key=idempotency_key
            ).exists():
                return ServiceResult.failure(
                    f"Notification with idempotency_key already exists: {idempotency_key}",
                    error_code="DUPLICATE",
                )
            raise

        cls.get_logger().info(
            f"Created notification {notification.id} for user {recipient_id}",
            extra={
                "notification_id": notification.id,
                "notification_type": notification_type,
            },
        )
        return ServiceResult.success(notification)
