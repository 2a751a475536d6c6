"""
Order querysets.

Every lifecycle query the services run is named here so the predicates
(draft, unpaid, owned) are defined once.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from django.db import models

from .choices import UNPAID_PAYMENT_STATUSES, OrderStatus

if TYPE_CHECKING:
    from .models import Order

FIRST_ORDER_NUMBER = 1001


class OrderQuerySet(models.QuerySet["Order"]):
    """
    Usage:
        Order.objects.drafts().owned_by(request.user.pk)
        Order.objects.abandoned_drafts(cutoff).delete()
    """

    def drafts(self) -> "OrderQuerySet":
        return self.filter(status=OrderStatus.DRAFT)

    def unpaid(self) -> "OrderQuerySet":
        return self.filter(payment_status__in=UNPAID_PAYMENT_STATUSES)

    def owned_by(self, user_id: Any) -> "OrderQuerySet":
        """Orders belonging to user_id; anonymous callers (None) own nothing."""
        if user_id is None:
            return self.none()
        return self.filter(user_id=user_id)

    def abandoned_drafts(self, cutoff: datetime) -> "OrderQuerySet":
        """Unpaid drafts created strictly before cutoff."""
        return self.drafts().unpaid().filter(created_at__lt=cutoff)

    def next_number(self) -> int:
        """Next human-readable order number (callers retry on a unique clash)."""
        current = self.aggregate(highest=models.Max("number"))["highest"]
        return FIRST_ORDER_NUMBER if current is None else current + 1
