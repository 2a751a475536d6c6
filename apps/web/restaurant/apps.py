"""Django app configuration for the restaurant ordering module."""

from django.apps import AppConfig


class RestaurantConfig(AppConfig):
    """Menu, orders and the order lifecycle services."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.restaurant"
    verbose_name = "Ordering"
