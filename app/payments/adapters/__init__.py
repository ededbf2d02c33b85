"""
Payment adapters for external services.

All external payment API calls go through these adapters so that timeouts,
error translation and logging are consistent.

Usage:
    from payments.adapters import PaystackAdapter

    result = PaystackAdapter.create_refund("T685312322670591", 500000)
"""

from payments.adapters.paystack_adapter import PaystackAdapter, RefundResult

__all__ = [
    "PaystackAdapter",
    "RefundResult",
]
