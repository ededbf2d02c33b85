"""
Payments app configuration.

This app provides refund processing infrastructure including:
- Double-entry wallet ledger
- Paystack refund integration
- Refund orchestration with wallet fallback
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
