"""
URL configuration for the orders app.

Routes:
    - POST cancel-order/ - Cancel an order

All routes are prefixed with /api/v1/orders/ when included in the main URLconf.
"""

from django.urls import path

from orders.views import CancelOrderView

app_name = "orders"

urlpatterns = [
    path("cancel-order/", CancelOrderView.as_view(), name="cancel-order"),
]
