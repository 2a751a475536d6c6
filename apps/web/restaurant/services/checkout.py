"""
Checkout service - turns a cart into a draft order and a Yoco checkout.

Flow:
1. Validate the cart against the menu and its own total
2. Insert the draft Order and its OrderItems in one transaction
3. Create a hosted checkout session (outside the transaction)
4. Return the redirect URL

If step 3 fails the draft stays behind; the customer can retry it and the
cleanup sweep removes it if they never do.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from lattelane_schemas import (
    CallbackUrls,
    CheckoutLineItem,
    CheckoutSession,
    PaymentCorrelation,
    to_minor_units,
)

from apps.web.payments.exceptions import PaymentGatewayError
from apps.web.payments.gateway import YocoGateway
from apps.web.restaurant.models import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
)
from apps.web.restaurant.serializers import CheckoutRequest
from apps.web.restaurant.services.exceptions import (
    CartValidationError,
    OrderStateError,
)

logger = logging.getLogger(__name__)

# Client and server totals may differ by rounding only
TOTAL_TOLERANCE = Decimal("0.01")

# Largest value the numeric(10, 2) total and line_total columns hold
MAX_ORDER_TOTAL = Decimal("99999999.99")

# Attempts at allocating a unique order number under concurrent checkouts
ORDER_NUMBER_ATTEMPTS = 3


@dataclass(frozen=True)
class CheckoutResult:
    """A draft order and the checkout session created for it."""

    order: Order
    session: CheckoutSession
    callbacks: CallbackUrls


def cart_total(cart: CheckoutRequest) -> Decimal:
    """Sum of quantity x unit price over the cart lines."""
    return sum((line.line_total for line in cart.items), Decimal("0.00"))


def build_callback_urls(order: Order) -> CallbackUrls:
    """Browser redirect targets for the hosted checkout page."""
    base = f"{settings.SITE_URL}/cart/payment"
    return CallbackUrls(
        success_url=f"{base}/success?orderId={order.pk}",
        cancel_url=f"{base}/cancelled?orderId={order.pk}",
        failure_url=f"{base}/failed?orderId={order.pk}",
    )


def _validate_cart(cart: CheckoutRequest) -> Decimal:
    errors: list[tuple[str, str]] = []

    total = cart_total(cart)
    if total > MAX_ORDER_TOTAL:
        errors.append(("total", f"Order total may not exceed {MAX_ORDER_TOTAL}"))
    if cart.total is not None and abs(cart.total - total) > TOTAL_TOLERANCE:
        errors.append(
            ("total", f"Cart total {cart.total} does not match line items ({total})")
        )

    menu_ids = {line.menu_item_id for line in cart.items if line.menu_item_id}
    known = set(MenuItem.objects.filter(pk__in=menu_ids).values_list("pk", flat=True))
    for index, line in enumerate(cart.items):
        if line.menu_item_id and line.menu_item_id not in known:
            errors.append((f"items.{index}.menu_item_id", "Menu item not found"))

    if errors:
        raise CartValidationError(errors)
    return total


def create_draft_order(cart: CheckoutRequest, user: Any = None) -> Order:
    """
    Persist a draft order and its lines atomically.

    Line prices come from the cart as the customer saw them, not from the
    live menu.

    Raises:
        CartValidationError: If the cart total or menu references don't check out.
    """
    total = _validate_cart(cart)

    for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    user=user if user is not None and user.is_authenticated else None,
                    customer_name=cart.customer.name,
                    customer_email=cart.customer.email,
                    customer_phone=cart.customer.phone,
                    order_type=cart.order_type,
                    delivery_address=cart.delivery_address,
                    special_instructions=cart.special_instructions,
                    total_amount=total,
                    status=OrderStatus.DRAFT,
                    payment_status=PaymentStatus.PENDING,
                )
                OrderItem.objects.bulk_create(
                    [
                        OrderItem(
                            order=order,
                            menu_item_id=line.menu_item_id,
                            item_name=line.name,
                            quantity=line.quantity,
                            unit_price=line.price,
                            line_total=line.line_total,
                            customization=line.customization,
                            special_instructions=line.special_instructions,
                        )
                        for line in cart.items
                    ]
                )
            break
        except IntegrityError:
            if attempt == ORDER_NUMBER_ATTEMPTS:
                raise
            logger.warning("Order number clash on attempt %d - retrying", attempt)

    logger.info(
        "Created draft order %s (%d lines, total %s)",
        order.order_number,
        len(cart.items),
        total,
    )
    return order


def start_checkout(order: Order, gateway: YocoGateway) -> CheckoutResult:
    """
    Create a hosted checkout session for an unpaid draft.

    Used for a fresh checkout and for retrying an earlier draft; the amount
    and lines always come from the stored order.

    Raises:
        OrderStateError: If the order is no longer an unpaid draft.
        PaymentGatewayError: If Yoco can't create the session.
    """
    if not order.is_retryable:
        raise OrderStateError(
            f"Order {order.order_number} can't be paid in its current state",
            status=order.status,
            payment_status=order.payment_status,
        )

    callbacks = build_callback_urls(order)
    line_items = [
        CheckoutLineItem(
            display_name=item.item_name,
            quantity=item.quantity,
            price_cents=to_minor_units(item.unit_price),
        )
        for item in order.items.all()
    ]
    metadata = {
        **PaymentCorrelation(order_id=order.pk).to_metadata(),
        "orderNumber": order.order_number,
        "userId": str(order.user_id or ""),
        "customerEmail": order.customer_email,
    }

    session = asyncio.run(
        gateway.create_checkout(
            amount=order.total_amount,
            currency=settings.PAYMENT_CURRENCY,
            metadata=metadata,
            line_items=line_items,
            callbacks=callbacks,
        )
    )

    # Guarded update: a webhook may have settled the order meanwhile
    Order.objects.drafts().unpaid().filter(pk=order.pk).update(
        payment_checkout_id=session.id,
        payment_status=PaymentStatus.AWAITING_PAYMENT,
        updated_at=timezone.now(),
    )
    order.refresh_from_db()

    logger.info(
        "Order %s awaiting payment (checkout %s)", order.order_number, session.id
    )
    return CheckoutResult(order=order, session=session, callbacks=callbacks)


def checkout(cart: CheckoutRequest, user: Any, gateway: YocoGateway) -> CheckoutResult:
    """
    Create a draft order from cart and send it to Yoco.

    Raises:
        CartValidationError: If the cart is inconsistent.
        PaymentGatewayError: If Yoco can't create the session; the draft is kept.
    """
    order = create_draft_order(cart, user)
    try:
        return start_checkout(order, gateway)
    except PaymentGatewayError as e:
        logger.warning(
            "Checkout for draft %s failed (status %s) - kept for retry",
            order.order_number,
            e.status_code,
        )
        raise
