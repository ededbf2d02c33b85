"""
Core views and view helpers.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks, plus the
helper that turns a failed ServiceResult into an HTTP response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from rest_framework import status
from rest_framework.response import Response

if TYPE_CHECKING:
    from core.services import ServiceResult


# Error codes shared by every domain service. Apps extend this with their own
# codes when building a failure response.
DEFAULT_ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "CONFLICT": status.HTTP_409_CONFLICT,
}


def service_failure_response(
    result: ServiceResult,
    status_map: dict[str, int] | None = None,
    default_status: int = status.HTTP_400_BAD_REQUEST,
) -> Response:
    """
    Build a Response for a failed ServiceResult.

    Args:
        result: The failed result
        status_map: Extra error_code -> HTTP status entries
        default_status: Status used for codes not in either map

    Returns:
        Response with ``result.to_response()`` as body
    """
    codes = {**DEFAULT_ERROR_STATUS, **(status_map or {})}
    http_status = codes.get(result.error_code or "", default_status)
    return Response(result.to_response(), status=http_status)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - cache: "connected" or "disconnected"

    HTTP Status Codes:
        200: Database reachable (cache failures only degrade)
        503: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    try:
        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") == "ok":
            health_status["cache"] = "connected"
        else:
            health_status["cache"] = "disconnected"
    except Exception:
        # Cache is not critical for refunds; report but stay healthy
        health_status["cache"] = "disconnected"

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
