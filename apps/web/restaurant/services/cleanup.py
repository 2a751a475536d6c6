"""
Draft cleanup - delete checkouts that were abandoned before payment.

Triggered externally (management command or scheduled HTTP call); there is
no in-process timer.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.web.restaurant.models import Order, OrderItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of one sweep."""

    deleted_orders: int
    deleted_items: int
    cutoff: datetime


def retention_window() -> timedelta:
    return timedelta(hours=settings.DRAFT_ORDER_RETENTION_HOURS)


def cleanup_draft_orders(now: datetime | None = None) -> CleanupResult:
    """
    Delete unpaid drafts older than the retention window, lines first.

    Both deletes re-apply the draft/unpaid predicate, so an order a webhook
    marks paid between the two statements (or before either) survives.
    Safe to run repeatedly; a second run deletes nothing.

    Args:
        now: Reference time, defaults to the current time.
    """
    cutoff = (now or timezone.now()) - retention_window()

    with transaction.atomic():
        abandoned = Order.objects.abandoned_drafts(cutoff)
        deleted_items, _ = OrderItem.objects.filter(
            order__in=abandoned.values("pk")
        ).delete()
        _, per_model = Order.objects.abandoned_drafts(cutoff).delete()

    deleted_orders = per_model.get(Order._meta.label, 0)

    logger.info(
        "Draft cleanup: removed %d orders and %d items created before %s",
        deleted_orders,
        deleted_items,
        cutoff.isoformat(),
    )
    return CleanupResult(
        deleted_orders=deleted_orders,
        deleted_items=deleted_items,
        cutoff=cutoff,
    )
