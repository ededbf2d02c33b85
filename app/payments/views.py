"""
DRF views for payments app.

Endpoints:
    POST /api/v1/payments/process-refund/ - Refund an order
    GET /api/v1/payments/wallet/ - Current user's wallet balance

Related files:
    - services/refund_service.py: RefundService
    - ledger/services.py: LedgerService
    - serializers.py: Request/response serializers

Security:
    - All endpoints require a JWT bearer token
    - RefundService checks the caller is the order's buyer or vendor
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import service_failure_response
from payments.ledger import LedgerService
from payments.ledger.types import format_naira
from payments.serializers import (
    ProcessRefundRequestSerializer,
    ProcessRefundResponseSerializer,
    WalletBalanceSerializer,
)
from payments.services import RefundService

logger = logging.getLogger(__name__)


REFUND_ERROR_STATUS = {
    "ORDER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "REFUND_IN_PROGRESS": status.HTTP_409_CONFLICT,
    "WALLET_CREDIT_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "REFUND_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ProcessRefundView(APIView):
    """
    Refund an order to its buyer.

    POST /api/v1/payments/process-refund/

    Request body:
        {
            "order_id": "uuid",
            "refund_method": "wallet" | "paystack" | "manual",
            "reason": "optional",
            "partial_amount": "2500.00"
        }

    Returns:
        {"success": true, "refund_id": ..., "refund_amount": ..., "result": {...}}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="process_refund",
        summary="Process refund",
        tags=["Payments - Refunds"],
        request=ProcessRefundRequestSerializer,
        responses={
            200: ProcessRefundResponseSerializer,
            400: OpenApiResponse(description="Order not eligible or invalid request"),
            403: OpenApiResponse(description="Caller is not the buyer or vendor"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Another refund is in progress"),
            500: OpenApiResponse(description="Wallet credit failed"),
        },
    )
    def post(self, request):
        serializer = ProcessRefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = RefundService.process_refund(
            actor=request.user,
            order_id=data["order_id"],
            refund_method=data["refund_method"],
            reason=data.get("reason"),
            partial_amount=data.get("partial_amount"),
        )

        if not result.success:
            return service_failure_response(result, REFUND_ERROR_STATUS)

        return Response(result.data.to_response())


class WalletBalanceView(APIView):
    """
    Current user's wallet balance.

    GET /api/v1/payments/wallet/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_wallet_balance",
        summary="Get wallet balance",
        tags=["Payments - Wallet"],
        responses={200: WalletBalanceSerializer},
    )
    def get(self, request):
        balance = LedgerService.get_wallet_balance(request.user.id)
        serializer = WalletBalanceSerializer(
            {
                "balance": balance.amount,
                "currency": balance.currency,
                "formatted": format_naira(balance.amount),
            }
        )
        return Response(serializer.data)
