"""
Serializers for payments app.

Request Serializers:
    ProcessRefundRequestSerializer: Body of POST /process-refund/

Response Serializers:
    ProcessRefundResponseSerializer: Successful refund body
    WalletBalanceSerializer: Body of GET /wallet/
"""

from decimal import Decimal

from rest_framework import serializers

from payments.state_machines import RefundMethod


class ProcessRefundRequestSerializer(serializers.Serializer):
    """
    Request body for a refund.

    partial_amount defaults to the order's captured amount when omitted.
    """

    order_id = serializers.UUIDField()
    refund_method = serializers.ChoiceField(choices=RefundMethod.choices)
    reason = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=1000,
    )
    partial_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
        min_value=Decimal("0.01"),
    )


class ProcessRefundResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    refund_id = serializers.UUIDField()
    refund_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    refund_method = serializers.ChoiceField(choices=RefundMethod.choices)
    result = serializers.DictField(help_text="Channel-specific details")


class WalletBalanceSerializer(serializers.Serializer):
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()
    formatted = serializers.CharField(help_text="Balance as shown to users, e.g. ₦5000.00")
