"""
Notifications app for in-app notifications.

This app provides:
- Notification model for storing user notifications
- NotificationService for centralized notification creation
- Celery task that writes notifications off the request path

Usage:
    from notifications.services import NotificationService

    NotificationService.dispatch(
        recipient_id=order.user_id,
        title="Order Cancelled",
        message=f"Your order #{order.id} has been cancelled.",
        notification_type=NotificationKind.ORDER,
        idempotency_key=f"order:{order.id}:cancelled:buyer",
    )
"""
