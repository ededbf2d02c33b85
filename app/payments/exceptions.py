"""
Payment-specific exceptions for payment operations.

Exception Hierarchy:
    PaymentError (base for payment domain)
    └── PaymentProcessingError - Refund channel failures
        └── PaystackError - Base for all Paystack errors
            ├── PaystackAPIError - Non-2xx response or status: false
            ├── PaystackUnavailableError - Connection error or 5xx
            └── PaystackTimeoutError - Request timed out

    LockAcquisitionError - Distributed lock timeout (inherits ConflictError)

Every PaystackError sends a refund down the wallet fallback path, so
the subclasses only matter for logging and audit.

Usage:
    from payments.exceptions import PaystackError, LockAcquisitionError

    try:
        response = adapter.create_refund(reference, amount_kobo)
    except PaystackError as e:
        refund.fail(reason=e.message, paystack_response=e.response_body)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    All payment-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent API error responses.
    """

    default_error_code: str = "PAYMENT_ERROR"


class PaymentProcessingError(PaymentError):
    """Raised when moving money through a refund channel fails."""

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"
    http_status = 502


# =============================================================================
# Paystack Exceptions
# =============================================================================


class PaystackError(PaymentProcessingError):
    """
    Base exception for all Paystack-related errors.

    Attributes:
        status_code: HTTP status returned by Paystack, if any
        response_body: Parsed JSON body returned by Paystack, if any
    """

    default_error_code: str = "PAYSTACK_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code
        self.response_body = response_body


class PaystackAPIError(PaystackError):
    """
    Paystack answered but refused the refund.

    Raised for 4xx responses and for 2xx responses whose body has
    ``status: false``.
    """

    default_error_code: str = "PAYSTACK_API_ERROR"


class PaystackUnavailableError(PaystackError):
    """Paystack could not be reached or answered with a 5xx."""

    default_error_code: str = "PAYSTACK_UNAVAILABLE"


class PaystackTimeoutError(PaystackError):
    """The Paystack request exceeded PAYSTACK_API_TIMEOUT_SECONDS."""

    default_error_code: str = "PAYSTACK_TIMEOUT"


# =============================================================================
# Concurrency Control Exceptions
# =============================================================================


class LockAcquisitionError(ConflictError):
    """
    Raised when a distributed lock cannot be acquired.

    This exception indicates that another process holds the lock
    and it couldn't be acquired within the timeout period.

    Example:
        lock = DistributedLock("refund:execute:123", ttl=60, timeout=5)
        if not lock.acquire():
            raise LockAcquisitionError(
                "Failed to acquire lock 'refund:execute:123' within 5s",
                details={"key": "refund:execute:123", "timeout": 5}
            )
    """

    default_error_code: str = "LOCK_ACQUISITION_FAILED"




# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "PaymentProcessingError",
    # Paystack-specific
    "PaystackError",
    "PaystackAPIError",
    "PaystackUnavailableError",
    "PaystackTimeoutError",
    # Concurrency control
    "LockAcquisitionError",
]
