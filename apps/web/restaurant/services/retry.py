"""
Order retry - rebuild a cart from an unpaid draft so checkout can resume.
"""

import logging
from typing import Any
from uuid import UUID

from apps.web.restaurant.models import Order
from apps.web.restaurant.serializers import (
    CustomerSchema,
    RetryCartLineSchema,
    RetryCartResponse,
)
from apps.web.restaurant.services.exceptions import OrderNotFound

logger = logging.getLogger(__name__)


def load_retry_cart(order_id: UUID, user_id: Any) -> RetryCartResponse:
    """
    Reconstruct the cart of a draft order owned by user_id.

    Display names and descriptions come from the live menu where the line
    still references a menu item; quantities and prices always come from
    the order's snapshot.

    Raises:
        OrderNotFound: If the order doesn't exist, isn't a draft, or belongs
            to another user. The cases are indistinguishable to the caller.
    """
    order = (
        Order.objects.drafts()
        .owned_by(user_id)
        .filter(pk=order_id)
        .prefetch_related("items__menu_item")
        .first()
    )
    if order is None or order.is_paid:
        logger.info("Retry requested for unavailable order %s", order_id)
        raise OrderNotFound(f"Order {order_id} not found")

    lines = []
    for item in order.items.all():
        menu_item = item.menu_item
        lines.append(
            RetryCartLineSchema(
                menu_item_id=item.menu_item_id,
                name=menu_item.name if menu_item else item.item_name,
                description=menu_item.description if menu_item else "",
                quantity=item.quantity,
                price=item.unit_price,
                customization=item.customization,
                special_instructions=item.special_instructions,
            )
        )

    return RetryCartResponse(
        order_id=order.pk,
        order_number=order.order_number,
        customer=CustomerSchema(
            name=order.customer_name,
            email=order.customer_email,
            phone=order.customer_phone,
        ),
        order_type=order.order_type,
        delivery_address=order.delivery_address,
        special_instructions=order.special_instructions,
        items=lines,
        total=order.total_amount,
    )
