"""Tests for rebuilding a cart from an unpaid draft."""

import uuid
from decimal import Decimal

import pytest

from apps.web.restaurant.models import OrderStatus, PaymentStatus
from apps.web.restaurant.services.exceptions import OrderNotFound
from apps.web.restaurant.services.retry import load_retry_cart

from .factories import (
    MenuItemFactory,
    OrderFactory,
    OrderItemFactory,
    make_order_with_lines,
)


@pytest.mark.django_db
class TestLoadRetryCart:
    """Tests for load_retry_cart."""

    def test_rebuilds_lines_and_total(self, user):
        order = make_order_with_lines(user=user)

        cart = load_retry_cart(order.pk, user.pk)

        assert cart.order_id == order.pk
        assert cart.order_number == order.order_number
        assert cart.total == Decimal("155.00")
        assert sorted((line.name, line.quantity) for line in cart.items) == [
            ("Cappuccino", 2),
            ("Margherita Pizza", 1),
        ]
        assert sum(line.price * line.quantity for line in cart.items) == cart.total

    def test_uses_snapshot_price_and_live_name(self, user):
        menu_item = MenuItemFactory(
            name="Cappuccino", description="Double shot", price=Decimal("35.00")
        )
        order = OrderFactory(user=user, total_amount=Decimal("35.00"))
        OrderItemFactory(order=order, menu_item=menu_item)
        menu_item.name = "Cappuccino (large)"
        menu_item.price = Decimal("42.00")
        menu_item.save()

        cart = load_retry_cart(order.pk, user.pk)

        line = cart.items[0]
        assert line.name == "Cappuccino (large)"
        assert line.description == "Double shot"
        assert line.price == Decimal("35.00")
        assert line.menu_item_id == menu_item.pk

    def test_custom_line_keeps_stored_name(self, user):
        order = OrderFactory(user=user, total_amount=Decimal("95.00"))
        OrderItemFactory(
            order=order,
            menu_item=None,
            item_name="Build-your-own pizza",
            unit_price=Decimal("95.00"),
            line_total=Decimal("95.00"),
            customization={"toppings": ["feta"]},
        )

        cart = load_retry_cart(order.pk, user.pk)

        line = cart.items[0]
        assert line.menu_item_id is None
        assert line.name == "Build-your-own pizza"
        assert line.description == ""
        assert line.customization == {"toppings": ["feta"]}

    def test_failed_draft_can_be_retried(self, user):
        order = make_order_with_lines(user=user, payment_status=PaymentStatus.FAILED)

        cart = load_retry_cart(order.pk, user.pk)

        assert len(cart.items) == 2

    def test_carries_customer_details(self, user):
        order = make_order_with_lines(
            user=user, customer_name="Thandi", customer_email="thandi@example.com"
        )

        cart = load_retry_cart(order.pk, user.pk)

        assert cart.customer.name == "Thandi"
        assert cart.customer.email == "thandi@example.com"

    def test_unknown_order(self, user):
        with pytest.raises(OrderNotFound):
            load_retry_cart(uuid.uuid4(), user.pk)

    def test_other_users_order(self, user, other_user):
        order = make_order_with_lines(user=other_user)

        with pytest.raises(OrderNotFound):
            load_retry_cart(order.pk, user.pk)

    def test_anonymous_caller(self, user):
        order = make_order_with_lines(user=user)

        with pytest.raises(OrderNotFound):
            load_retry_cart(order.pk, None)

    def test_confirmed_order_not_retryable(self, user):
        order = make_order_with_lines(
            user=user, status=OrderStatus.CONFIRMED, payment_status=PaymentStatus.PAID
        )

        with pytest.raises(OrderNotFound):
            load_retry_cart(order.pk, user.pk)

    def test_cancelled_order_not_retryable(self, user):
        order = make_order_with_lines(
            user=user,
            status=OrderStatus.CANCELLED,
            payment_status=PaymentStatus.FAILED,
        )

        with pytest.raises(OrderNotFound):
            load_retry_cart(order.pk, user.pk)
