"""
DRF views for orders app.

Endpoints:
    POST /api/v1/orders/cancel-order/ - Cancel an order (buyer or vendor)

Related files:
    - services.py: CancellationService
    - serializers.py: Request/response serializers
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import service_failure_response
from orders.serializers import (
    CancelOrderRequestSerializer,
    CancelOrderResponseSerializer,
)
from orders.services import CancellationService

CANCEL_ERROR_STATUS = {
    "ORDER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


class CancelOrderView(APIView):
    """
    Cancel an order.

    POST /api/v1/orders/cancel-order/

    Request body:
        {"order_id": "uuid", "reason": "...", "refund_method": "wallet"}

    Returns:
        {"success": true, "cancelled_by": "customer", "refund_processed": true, ...}

    A refund failure does not fail the request: the order stays cancelled
    and refund_processed is false.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="cancel_order",
        summary="Cancel order",
        tags=["Orders"],
        request=CancelOrderRequestSerializer,
        responses={
            200: CancelOrderResponseSerializer,
            400: OpenApiResponse(description="Order cannot be cancelled or invalid request"),
            403: OpenApiResponse(description="Caller is not the buyer or vendor"),
            404: OpenApiResponse(description="Order not found"),
        },
    )
    def post(self, request):
        serializer = CancelOrderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CancellationService.cancel_order(
            actor=request.user,
            order_id=data["order_id"],
            reason=data["reason"],
            refund_method=data.get("refund_method"),
        )

        if not result.success:
            return service_failure_response(result, CANCEL_ERROR_STATUS)

        return Response(result.data.to_response())
