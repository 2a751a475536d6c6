"""
URL routing for restaurant API endpoints.

Menu is public; checkout and order endpoints need a signed-in customer.
"""

from django.urls import path

from apps.web.restaurant import views

app_name = "restaurant"

urlpatterns = [
    # Menu endpoints
    path("menu", views.menu_list, name="menu_list"),
    # Checkout endpoints
    path("checkout", views.create_checkout, name="checkout"),
    # Order endpoints
    path("orders/cleanup-drafts", views.cleanup_drafts, name="cleanup_drafts"),
    path("orders/<uuid:order_id>", views.get_order, name="order_detail"),
    path("orders/<uuid:order_id>/status", views.order_status, name="order_status"),
    path("orders/<uuid:order_id>/retry", views.retry_cart, name="order_retry"),
    path(
        "orders/<uuid:order_id>/retry-checkout",
        views.retry_checkout,
        name="order_retry_checkout",
    ),
    path(
        "orders/<uuid:order_id>/verify-payment",
        views.verify_payment,
        name="order_verify_payment",
    ),
    path("orders/<uuid:order_id>/cancel", views.cancel_order, name="order_cancel"),
]
