"""
Delete abandoned draft orders past the retention window.

Usage:
    uv run python manage.py cleanup_draft_orders
    uv run python manage.py cleanup_draft_orders --dry-run
"""

from typing import Any

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.web.restaurant.models import Order
from apps.web.restaurant.services.cleanup import cleanup_draft_orders, retention_window


class Command(BaseCommand):
    help = "Delete unpaid draft orders older than DRAFT_ORDER_RETENTION_HOURS"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report how many drafts would be deleted without deleting them",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        if options["dry_run"]:
            cutoff = timezone.now() - retention_window()
            count = Order.objects.abandoned_drafts(cutoff).count()
            self.stdout.write(
                f"Would delete {count} draft orders created before {cutoff}"
            )
            return

        result = cleanup_draft_orders()
        self.stdout.write(
            self.style.SUCCESS(
                f"Deleted {result.deleted_orders} draft orders "
                f"({result.deleted_items} items) created before {result.cutoff}"
            )
        )
