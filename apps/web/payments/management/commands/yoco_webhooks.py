"""
Manage Yoco webhook subscriptions.

Usage:
    uv run python manage.py yoco_webhooks list
    uv run python manage.py yoco_webhooks register
    uv run python manage.py yoco_webhooks register --url https://example.com/hook
    uv run python manage.py yoco_webhooks delete <webhook_id>

The signing secret is only shown once, on registration; store it as
YOCO_WEBHOOK_SECRET.
"""

import asyncio
from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.urls import reverse

from apps.web.payments.apps import get_gateway
from apps.web.payments.exceptions import PaymentGatewayError


def default_webhook_url() -> str:
    return f"{settings.SITE_URL}{reverse('payments:yoco-webhook')}"


class Command(BaseCommand):
    help = "Register, list or delete Yoco webhook subscriptions"

    def add_arguments(self, parser: Any) -> None:
        subparsers = parser.add_subparsers(dest="action", required=True)

        register = subparsers.add_parser("register", help="Subscribe to payment events")
        register.add_argument(
            "--url",
            default="",
            help="Webhook URL (default: SITE_URL + the webhook route)",
        )

        subparsers.add_parser("list", help="List current subscriptions")

        delete = subparsers.add_parser("delete", help="Remove a subscription")
        delete.add_argument("webhook_id")

    def handle(self, *_args: Any, **options: Any) -> None:
        gateway = get_gateway()
        try:
            match options["action"]:
                case "register":
                    url = options["url"] or default_webhook_url()
                    webhook, created = asyncio.run(gateway.ensure_webhook(url))
                    if not created:
                        self.stdout.write(f"Webhook {webhook.id} exists -> {url}")
                        return
                    self.stdout.write(
                        self.style.SUCCESS(f"Registered webhook {webhook.id} -> {url}")
                    )
                    if webhook.secret:
                        self.stdout.write(f"Signing secret: {webhook.secret}")
                case "list":
                    webhooks = asyncio.run(gateway.list_webhooks())
                    if not webhooks:
                        self.stdout.write("No webhooks registered")
                    for webhook in webhooks:
                        events = ", ".join(webhook.events) or "-"
                        self.stdout.write(f"{webhook.id}\t{webhook.url}\t{events}")
                case "delete":
                    asyncio.run(gateway.delete_webhook(options["webhook_id"]))
                    self.stdout.write(
                        self.style.SUCCESS(f"Deleted webhook {options['webhook_id']}")
                    )
        except PaymentGatewayError as e:
            raise CommandError(f"Yoco request failed: {e.message}") from e
