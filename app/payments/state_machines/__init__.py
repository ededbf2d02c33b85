"""
State machine enums for payment models.
"""

from payments.state_machines.states import (
    OPEN_REFUND_STATES,
    RefundMethod,
    RefundState,
)

__all__ = [
    "OPEN_REFUND_STATES",
    "RefundMethod",
    "RefundState",
]
