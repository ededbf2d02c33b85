"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- SideEffectOutcome: Outcome of a best-effort call made after the primary work
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, business rules)
    - Exceptions: Use for unexpected failures (database errors, bugs)
    - SideEffectOutcome: Use for work that must never fail the parent
      operation (notifications, audit pings)

Usage:
    from core.services import BaseService, ServiceResult

    class OrderService(BaseService):
        @classmethod
        def confirm(cls, order_id) -> ServiceResult[Order]:
            order = Order.objects.filter(id=order_id).first()
            if order is None:
                return ServiceResult.failure(
                    "Order not found",
                    error_code="ORDER_NOT_FOUND",
                )

            with cls.atomic():
                order.confirm()
                order.save()

            result = ServiceResult.success(order)
            result.side_effects.append(
                cls.run_side_effect("notify_buyer", notify, order)
            )
            return result

    # In view
    result = OrderService.confirm(order_id)
    if result.success:
        return Response(OrderSerializer(result.data).data)
    return Response(result.to_response(), status=400)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class SideEffectOutcome:
    """
    Outcome of a best-effort side effect.

    Side effects run after the primary operation has been committed.
    Their failure is recorded here and logged, never raised.

    Attributes:
        name: Short identifier of the side effect (e.g., "notify_vendor")
        succeeded: Whether the call completed without raising
        error: Error message when the call failed
    """

    name: str
    succeeded: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        return {"name": self.name, "succeeded": self.succeeded, "error": self.error}


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures
        side_effects: Outcomes of best-effort calls made after the primary
            operation. These never change ``success``.

    Usage:
        # Success case
        return ServiceResult.success(refund)

        # Failure case
        return ServiceResult.failure("Order not found", "ORDER_NOT_FOUND")

        # Check result
        result = RefundService.process_refund(...)
        if result.success:
            refund = result.data.refund
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    side_effects: list[SideEffectOutcome] = field(default_factory=list)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure(
                "Order already refunded",
                error_code="ALREADY_REFUNDED",
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    @property
    def failed_side_effects(self) -> list[SideEffectOutcome]:
        """Side effects that raised."""
        return [outcome for outcome in self.side_effects if not outcome.succeeded]

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Best-effort side effect execution

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Example:
            with cls.atomic():
                order = Order.objects.select_for_update().get(id=order_id)
                order.cancel(by=actor, reason=reason)
                order.save()
        """
        with transaction.atomic():
            yield

    @classmethod
    def run_side_effect(
        cls,
        name: str,
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> SideEffectOutcome:
        """
        Run a best-effort call and capture its outcome.

        Exceptions are logged with the side effect name and converted
        into a failed SideEffectOutcome. Nothing is raised.

        Args:
            name: Identifier used in logs and in the outcome
            func: Callable to run
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            SideEffectOutcome describing whether func succeeded

        Example:
            outcome = cls.run_side_effect(
                "notify_buyer",
                NotificationService.dispatch,
                recipient_id=order.user_id,
                title="Refund Processed",
                message=message,
            )
        """
        try:
            func(*args, **kwargs)
        except Exception as e:
            cls.get_logger().warning(
                f"Side effect failed: {name}",
                extra={"side_effect": name, "error": str(e)},
                exc_info=True,
            )
            return SideEffectOutcome(name=name, succeeded=False, error=str(e))
        return SideEffectOutcome(name=name, succeeded=True)
