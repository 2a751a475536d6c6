"""Payment webhook models - audit trail for Yoco webhook deliveries."""

import uuid

from django.db import models


class WebhookStatus(models.TextChoices):
    """Webhook processing status."""

    PENDING = "pending", "Pending"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"
    SKIPPED = "skipped", "Skipped"  # e.g., unknown order, unhandled type


class PaymentWebhookEvent(models.Model):
    """
    Audit trail for payment webhook events.

    Stores raw webhook payloads for debugging and reprocessing.
    Supports idempotency via event_id: a delivery whose id is already
    processed or skipped is acknowledged without touching the order.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    event_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Event ID from Yoco (for deduplication)",
    )
    event_type = models.CharField(
        max_length=100,
        help_text="Event type from Yoco",
    )

    # Correlation
    order = models.ForeignKey(
        "restaurant.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_events",
    )
    order_reference = models.CharField(
        max_length=255,
        blank=True,
        help_text="Raw orderId from the event metadata",
    )

    payload = models.JSONField(
        help_text="Raw webhook payload",
    )

    # Processing status
    status = models.CharField(
        max_length=20,
        choices=WebhookStatus.choices,
        default=WebhookStatus.PENDING,
    )
    result = models.CharField(
        max_length=30,
        blank=True,
        help_text="What the event did to the order",
    )
    received_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    error = models.TextField(
        blank=True,
        help_text="Error message if processing failed or was skipped",
    )
    delivery_count = models.PositiveIntegerField(
        default=1,
        help_text="How many times Yoco delivered this event",
    )

    class Meta:
        ordering = ["-received_at"]
        indexes = [
            models.Index(fields=["status", "received_at"]),
            models.Index(fields=["event_type"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_type}:{self.event_id} ({self.status})"

    @property
    def is_settled(self) -> bool:
        """Processed or skipped; redelivery must not run it again."""
        return self.status in (WebhookStatus.PROCESSED, WebhookStatus.SKIPPED)
