"""Admin registration for payment webhook events."""

from django.contrib import admin

from apps.web.payments.models import PaymentWebhookEvent


@admin.register(PaymentWebhookEvent)
class PaymentWebhookEventAdmin(admin.ModelAdmin):
    """Read-only audit view of Yoco deliveries."""

    list_display = [
        "event_id",
        "event_type",
        "status",
        "result",
        "order",
        "delivery_count",
        "received_at",
    ]
    list_filter = ["status", "event_type", "result"]
    search_fields = ["event_id", "order_reference"]
    date_hierarchy = "received_at"
    readonly_fields = [
        "id",
        "event_id",
        "event_type",
        "order",
        "order_reference",
        "payload",
        "status",
        "result",
        "received_at",
        "processed_at",
        "error",
        "delivery_count",
    ]

    def has_add_permission(self, request) -> bool:  # type: ignore[no-untyped-def]
        return False
