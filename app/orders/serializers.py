"""
Serializers for orders app.

Request Serializers:
    CancelOrderRequestSerializer: Body of POST /cancel-order/

Response Serializers:
    CancelOrderResponseSerializer: Successful cancellation body
"""

from rest_framework import serializers

from payments.state_machines import RefundMethod


class CancelOrderRequestSerializer(serializers.Serializer):
    """
    Request body for cancelling an order.

    refund_method only applies when the order was paid. Manual refunds
    are requested through process-refund instead.
    """

    order_id = serializers.UUIDField()
    reason = serializers.CharField(max_length=1000, allow_blank=True)
    refund_method = serializers.ChoiceField(
        choices=[
            (RefundMethod.WALLET.value, RefundMethod.WALLET.label),
            (RefundMethod.PAYSTACK.value, RefundMethod.PAYSTACK.label),
        ],
        required=False,
    )


class CancelOrderResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    order_id = serializers.UUIDField()
    cancelled_by = serializers.ChoiceField(choices=["customer", "vendor"])
    refund_processed = serializers.BooleanField()
    refund_result = serializers.DictField(allow_null=True)
