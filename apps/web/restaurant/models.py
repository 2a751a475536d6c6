"""
Restaurant models - Menu and orders.

Order and OrderItem are the order store: every checkout writes a draft Order
plus one OrderItem per cart line, and the payment webhook moves the Order
through its lifecycle.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.web.core.models import TimeStampedModel
from lattelane_schemas import to_minor_units

from .choices import (
    TERMINAL_ORDER_STATUSES,
    OrderStatus,
    OrderType,
    PaymentStatus,
)
from .managers import OrderQuerySet

__all__ = [
    "MenuCategory",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "PaymentStatus",
]

ORDER_NUMBER_PREFIX = "LL"


class MenuCategory(TimeStampedModel):
    """
    Category on the menu (e.g., Coffee, Breakfast, Pizza).
    """

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        verbose_name_plural = "menu categories"

    def __str__(self) -> str:
        return self.name


class MenuItem(TimeStampedModel):
    """
    Individual menu item.

    The live price here is only used to build carts; orders keep their own
    snapshot on OrderItem.unit_price.
    """

    category = models.ForeignKey(
        MenuCategory,
        on_delete=models.CASCADE,
        related_name="items",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image_url = models.URLField(blank=True)

    # Availability (86'd when False)
    is_available = models.BooleanField(
        default=True,
        help_text="False = 86'd (unavailable)",
    )
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        indexes = [
            models.Index(fields=["category", "is_available"]),
        ]

    def __str__(self) -> str:
        return self.name


class Order(TimeStampedModel):
    """
    Customer order - one purchase attempt.

    Starts as draft/pending at checkout. A successful payment moves it to
    confirmed/paid; a failed payment leaves it a draft so the customer can
    retry until the cleanup sweep removes it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    number = models.PositiveIntegerField(
        unique=True,
        editable=False,
        help_text="Sequential number shown to customers as LL<number>",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Customer information
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=20, blank=True)

    # Fulfillment
    order_type = models.CharField(
        max_length=20,
        choices=OrderType.choices,
        default=OrderType.PICKUP,
    )
    delivery_address = models.TextField(blank=True)
    special_instructions = models.TextField(blank=True)

    # Lifecycle
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.DRAFT,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    total_amount = models.DecimalField(max_digits=10, decimal_places=2)

    # Payment
    payment_checkout_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Latest Yoco checkout session ID",
    )
    payment_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Yoco payment ID once paid",
    )

    # Timestamps
    paid_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    estimated_ready_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Estimated time order will be ready",
    )

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "payment_status", "created_at"]),
            models.Index(fields=["user", "created_at"]),
            models.Index(fields=["payment_checkout_id"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~(
                    Q(payment_status=PaymentStatus.PAID)
                    & Q(status__in=[OrderStatus.DRAFT, OrderStatus.CANCELLED])
                ),
                name="paid_order_not_draft_or_cancelled",
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="order_total_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_number} - {self.customer_name}"

    def save(self, *args, **kwargs) -> None:  # type: ignore[no-untyped-def]
        if self.number is None:
            self.number = Order.objects.next_number()
        super().save(*args, **kwargs)

    @property
    def order_number(self) -> str:
        if self.number is None:
            return ""
        return f"{ORDER_NUMBER_PREFIX}{self.number}"

    @property
    def total_cents(self) -> int:
        return to_minor_units(self.total_amount)

    @property
    def is_draft(self) -> bool:
        return self.status == OrderStatus.DRAFT

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES

    @property
    def is_retryable(self) -> bool:
        """A draft that has not been paid can go back through checkout."""
        return self.is_draft and not self.is_paid

    def lines_total(self) -> Decimal:
        """Sum of quantity x unit price over the stored lines."""
        return sum((item.line_total for item in self.items.all()), Decimal("0.00"))


class OrderItem(TimeStampedModel):
    """
    Line item in an order.

    Stores a snapshot of the item name and unit price at checkout time. A null
    menu_item means a custom item (or one since removed from the menu).
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
        help_text="Null for custom items",
    )

    # Snapshot of item at order time
    item_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    line_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="unit_price * quantity",
    )

    customization = models.JSONField(
        default=dict,
        blank=True,
        help_text="Selected options for custom items (size, toppings, ...)",
    )
    special_instructions = models.TextField(blank=True)

    class Meta:
        ordering = ["created_at", "pk"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name="order_item_quantity_positive",
            ),
            models.CheckConstraint(
                condition=Q(unit_price__gte=0),
                name="order_item_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.item_name}"

    def save(self, *args, **kwargs) -> None:  # type: ignore[no-untyped-def]
        if self.line_total is None:
            self.line_total = self.unit_price * self.quantity
        super().save(*args, **kwargs)
