"""
Customer-facing order access and cancellation.
"""

import logging
from typing import Any
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.web.restaurant.models import Order, OrderStatus, PaymentStatus
from apps.web.restaurant.services.exceptions import OrderNotFound, OrderStateError

logger = logging.getLogger(__name__)


def get_owned_order(order_id: UUID, user_id: Any) -> Order:
    """
    Fetch an order belonging to user_id.

    Raises:
        OrderNotFound: If the order doesn't exist or belongs to someone else.
    """
    order = Order.objects.owned_by(user_id).filter(pk=order_id).first()
    if order is None:
        raise OrderNotFound(f"Order {order_id} not found")
    return order


def cancel_draft_order(order_id: UUID, user_id: Any) -> Order:
    """
    Cancel an unpaid draft at the customer's request.

    Raises:
        OrderNotFound: If the order doesn't exist or belongs to someone else.
        OrderStateError: If the order is paid or no longer a draft.
    """
    with transaction.atomic():
        order = (
            Order.objects.select_for_update()
            .owned_by(user_id)
            .filter(pk=order_id)
            .first()
        )
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found")

        if not order.is_retryable:
            raise OrderStateError(
                f"Order {order.order_number} can't be cancelled",
                status=order.status,
                payment_status=order.payment_status,
            )

        order.status = OrderStatus.CANCELLED
        order.payment_status = PaymentStatus.FAILED
        order.cancelled_at = timezone.now()
        order.save(
            update_fields=["status", "payment_status", "cancelled_at", "updated_at"]
        )

    logger.info("Order %s cancelled by customer", order.order_number)
    return order
