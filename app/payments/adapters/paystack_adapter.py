"""
Paystack API adapter for refund operations.

All Paystack calls go through PaystackAdapter so that timeouts, error
translation and logging are applied in one place.

Configuration (via settings):
- PAYSTACK_SECRET_KEY: Paystack secret key (Bearer auth)
- PAYSTACK_BASE_URL: API root (default: https://api.paystack.co)
- PAYSTACK_API_TIMEOUT_SECONDS: Request timeout (default: 15)

Usage:
    from payments.adapters import PaystackAdapter

    result = PaystackAdapter.create_refund(
        transaction_reference=order.payment_reference,
        amount_kobo=to_kobo(refund.amount),
    )
    refund.complete(paystack_refund_id=result.id, paystack_response=result.raw_response)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import requests
from django.conf import settings

from payments.exceptions import (
    PaystackAPIError,
    PaystackTimeoutError,
    PaystackUnavailableError,
)


@dataclass
class RefundResult:
    """
    Result of a successful Paystack refund request.

    Attributes:
        id: Paystack refund id (stringified)
        message: Paystack's human-readable message
        raw_response: Full response body, stored on the Refund for audit
    """

    id: str | None
    message: str
    raw_response: dict[str, Any] = field(default_factory=dict)


class PaystackAdapter:
    """
    Adapter for Paystack API operations.

    All methods are classmethods - no instance state is maintained.
    Thread-safe for use from Celery workers.
    """

    REFUND_ENDPOINT = "/refund"

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _headers() -> dict[str, str]:
        return {
            "Authorization": f"Bearer {settings.PAYSTACK_SECRET_KEY}",
            "Content-Type": "application/json",
        }

    @classmethod
    def create_refund(
        cls,
        transaction_reference: str,
        amount_kobo: int,
    ) -> RefundResult:
        """
        Ask Paystack to reverse part or all of a transaction.

        Args:
            transaction_reference: Reference of the original Paystack transaction
            amount_kobo: Amount to refund in kobo

        Returns:
            RefundResult with Paystack's refund id

        Raises:
            PaystackTimeoutError: No response within the configured timeout
            PaystackUnavailableError: Connection failure, other transport error or 5xx
            PaystackAPIError: Any other non-2xx, or ``status: false`` in the body
        """
        logger = cls.get_logger()
        url = f"{settings.PAYSTACK_BASE_URL.rstrip('/')}{cls.REFUND_ENDPOINT}"
        timeout = settings.PAYSTACK_API_TIMEOUT_SECONDS

        log_context = {
            "operation": "create_refund",
            "transaction_reference": transaction_reference,
            "amount_kobo": amount_kobo,
        }

        start_time = time.monotonic()
        logger.info("Starting Paystack operation", extra=log_context)

        try:
            response = requests.post(
                url,
                headers=cls._headers(),
                json={"transaction": transaction_reference, "amount": amount_kobo},
                timeout=timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error(
                "Paystack request timed out",
                extra={**log_context, "timeout": timeout},
            )
            raise PaystackTimeoutError(
                f"Paystack did not respond within {timeout}s",
                details={"timeout": timeout},
            ) from e
        except requests.exceptions.ConnectionError as e:
            logger.error(
                "Paystack connection error",
                extra={**log_context, "error": str(e)},
            )
            raise PaystackUnavailableError(
                "Unable to connect to Paystack",
                details={"error": str(e)},
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                "Paystack request failed",
                extra={**log_context, "error": str(e), "error_type": type(e).__name__},
            )
            raise PaystackUnavailableError(
                "Paystack request failed",
                details={"error": str(e), "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.monotonic() - start_time) * 1000
        body = cls._parse_body(response)

        if response.status_code >= 500:
            logger.error(
                "Paystack unavailable",
                extra={**log_context, "status_code": response.status_code, "duration_ms": duration_ms},
            )
            raise PaystackUnavailableError(
                body.get("message") or f"Paystack returned HTTP {response.status_code}",
                status_code=response.status_code,
                response_body=body,
            )

        if not response.ok or not body.get("status"):
            logger.warning(
                "Paystack refused refund",
                extra={**log_context, "status_code": response.status_code, "duration_ms": duration_ms},
            )
            raise PaystackAPIError(
                body.get("message") or "Paystack refund failed",
                status_code=response.status_code,
                response_body=body,
            )

        data = body.get("data") or {}
        refund_id = data.get("id")
        logger.info(
            "Paystack operation completed",
            extra={**log_context, "paystack_refund_id": refund_id, "duration_ms": duration_ms},
        )
        return RefundResult(
            id=str(refund_id) if refund_id is not None else None,
            message=body.get("message", ""),
            raw_response=body,
        )

    @staticmethod
    def _parse_body(response: requests.Response) -> dict[str, Any]:
        """Decode a JSON body; non-JSON bodies become {'message': text}."""
        try:
            body = response.json()
        except ValueError:
            return {"status": False, "message": response.text[:500]}
        return body if isinstance(body, dict) else {"status": False, "data": body}
