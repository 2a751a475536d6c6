"""Django app configuration for payments."""

from typing import TYPE_CHECKING

from django.apps import AppConfig, apps
from django.core.exceptions import ImproperlyConfigured

if TYPE_CHECKING:
    from apps.web.payments.gateway import YocoGateway


class PaymentsConfig(AppConfig):
    """
    Payments app configuration.

    Builds the Yoco gateway once at startup; request handlers get it through
    get_gateway() and pass it into services explicitly.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.payments"
    verbose_name = "Payments"

    gateway: "YocoGateway | None" = None

    def ready(self) -> None:
        from apps.web.payments.gateway import YocoGateway  # noqa: PLC0415

        self.gateway = YocoGateway.from_settings()


def get_gateway() -> "YocoGateway":
    """Return the process-wide YocoGateway built in PaymentsConfig.ready()."""
    config = apps.get_app_config("payments")
    if config.gateway is None:
        raise ImproperlyConfigured("Payments app is not ready; no Yoco gateway built")
    return config.gateway
