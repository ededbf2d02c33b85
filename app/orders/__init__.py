"""
Orders app.

This app handles:
- The Order record and its lifecycle state machine
- Order cancellation by the buyer or the vendor, including the refund
  of captured payments

Related apps:
    - payments: RefundService refunds cancelled orders
    - notifications: Buyer and vendor are told about cancellations

Usage:
    from orders.services import CancellationService

    result = CancellationService.cancel_order(
        actor=request.user,
        order_id=order_id,
        reason="Ordered by mistake",
    )
"""
