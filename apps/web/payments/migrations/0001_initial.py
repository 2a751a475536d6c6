import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("restaurant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentWebhookEvent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "event_id",
                    models.CharField(
                        help_text="Event ID from Yoco (for deduplication)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(help_text="Event type from Yoco", max_length=100),
                ),
                (
                    "order_reference",
                    models.CharField(
                        blank=True,
                        help_text="Raw orderId from the event metadata",
                        max_length=255,
                    ),
                ),
                ("payload", models.JSONField(help_text="Raw webhook payload")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processed", "Processed"),
                            ("failed", "Failed"),
                            ("skipped", "Skipped"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "result",
                    models.CharField(
                        blank=True,
                        help_text="What the event did to the order",
                        max_length=30,
                    ),
                ),
                ("received_at", models.DateTimeField(auto_now_add=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "error",
                    models.TextField(
                        blank=True,
                        help_text="Error message if processing failed or was skipped",
                    ),
                ),
                (
                    "delivery_count",
                    models.PositiveIntegerField(
                        default=1, help_text="How many times Yoco delivered this event"
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_events",
                        to="restaurant.order",
                    ),
                ),
            ],
            options={
                "ordering": ["-received_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "received_at"],
                        name="payments_pa_status_236c5c_idx",
                    ),
                    models.Index(
                        fields=["event_type"], name="payments_pa_event_t_14989d_idx"
                    ),
                ],
            },
        ),
    ]
