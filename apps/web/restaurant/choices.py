"""Order lifecycle enums shared by models, managers and services."""

from django.db import models


class OrderStatus(models.TextChoices):
    """Order lifecycle status."""

    DRAFT = "draft", "Draft"
    CONFIRMED = "confirmed", "Confirmed"
    PREPARING = "preparing", "Preparing"
    READY = "ready", "Ready"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class OrderType(models.TextChoices):
    """Order fulfillment type."""

    PICKUP = "pickup", "Pickup"
    DELIVERY = "delivery", "Delivery"


class PaymentStatus(models.TextChoices):
    """Payment processing status."""

    PENDING = "pending", "Pending"
    AWAITING_PAYMENT = "awaiting_payment", "Awaiting payment"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"


TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# Drafts in any of these payment states never collected money and may be swept.
UNPAID_PAYMENT_STATUSES = (
    PaymentStatus.PENDING,
    PaymentStatus.AWAITING_PAYMENT,
    PaymentStatus.FAILED,
)
