"""
Payment services.

This module provides:
- RefundService: Refunds an order through wallet, Paystack or manual channels

Usage:
    from payments.services import RefundService

    result = RefundService.process_refund(
        actor=request.user,
        order_id=order.id,
        refund_method="wallet",
    )
"""

from payments.services.refund_service import RefundOutcome, RefundService

__all__ = [
    "RefundOutcome",
    "RefundService",
]
