"""
DRF exception handler producing the API's error body shape.

Every error leaving the API has an ``error`` key:

    401  {"error": "Unauthorized"}
    400  {"error": "Invalid request", "errors": {...}}      serializer failures
    4xx  {"error": ..., "error_code": ..., "details": ...}  BaseApplicationError
    500  {"error": ..., "stack": ...}                       anything unexpected

The ``stack`` key is only present when settings.API_EXPOSE_ERROR_STACK is on.

Configuration:
    REST_FRAMEWORK = {
        "EXCEPTION_HANDLER": "core.exception_handlers.api_exception_handler",
    }
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING

from django.conf import settings
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    """Render any exception raised inside a DRF view as a JSON error body."""
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response = exception_handler(exc, context)
        response.data = {"error": "Unauthorized"}
        return response

    if isinstance(exc, exceptions.ValidationError):
        return Response(
            {"error": "Invalid request", "errors": exc.detail},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.http_status)

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        response.data = {"error": str(detail) if detail is not None else response.data}
        return response

    view = context.get("view")
    logger.error(
        f"Unhandled exception in {view.__class__.__name__ if view else 'view'}: {exc}",
        exc_info=exc,
    )
    body: dict[str, Any] = {"error": str(exc) or exc.__class__.__name__}
    if getattr(settings, "API_EXPOSE_ERROR_STACK", False):
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
