"""
Payments app for refunds and the wallet ledger.

This app handles:
- Refund records and their state machine
- Wallet ledger (credit, balance)
- Paystack refund API calls
- Refund orchestration across wallet, Paystack and manual channels

Related apps:
    - orders: Order refund fields are written by RefundService
    - notifications: Buyer is notified when a refund is processed

Usage:
    from payments.services import RefundService

    result = RefundService.process_refund(
        actor=user,
        order_id=order.id,
        refund_method="paystack",
    )
"""
