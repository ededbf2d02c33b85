"""
URL configuration for the payments app.

Routes:
    - POST process-refund/ - Refund an order
    - GET wallet/ - Wallet balance of the current user

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments.views import ProcessRefundView, WalletBalanceView

app_name = "payments"

urlpatterns = [
    path("process-refund/", ProcessRefundView.as_view(), name="process-refund"),
    path("wallet/", WalletBalanceView.as_view(), name="wallet"),
]
