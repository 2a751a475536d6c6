"""Tests for the yoco_webhooks management command."""

from io import StringIO
from unittest.mock import patch

from django.core.management import CommandError, call_command

import pytest
from lattelane_schemas import WebhookRegistration

from apps.web.payments.exceptions import PaymentGatewayAuthError

WEBHOOK_URL = "https://testserver.local/api/payments/webhooks/yoco"


@pytest.fixture
def yoco(gateway):
    with patch(
        "apps.web.payments.management.commands.yoco_webhooks.get_gateway",
        return_value=gateway,
    ):
        yield gateway


class TestYocoWebhooksCommand:
    """Tests for register/list/delete."""

    def test_register_default_url(self, yoco):
        yoco.ensure_webhook.return_value = (
            WebhookRegistration(id="sub_1", url=WEBHOOK_URL, secret="whsec_abc"),
            True,
        )
        out = StringIO()

        call_command("yoco_webhooks", "register", stdout=out)

        yoco.ensure_webhook.assert_awaited_once_with(WEBHOOK_URL)
        assert "Registered webhook sub_1" in out.getvalue()
        assert "Signing secret: whsec_abc" in out.getvalue()

    def test_register_existing(self, yoco):
        yoco.ensure_webhook.return_value = (
            WebhookRegistration(id="sub_1", url="https://elsewhere.test/hook"),
            False,
        )
        out = StringIO()

        call_command(
            "yoco_webhooks",
            "register",
            "--url",
            "https://elsewhere.test/hook",
            stdout=out,
        )

        assert "Webhook sub_1 exists" in out.getvalue()
        assert "Signing secret" not in out.getvalue()

    def test_list(self, yoco):
        yoco.list_webhooks.return_value = [
            WebhookRegistration(
                id="sub_1", url=WEBHOOK_URL, events=["payment.succeeded"]
            )
        ]
        out = StringIO()

        call_command("yoco_webhooks", "list", stdout=out)

        assert f"sub_1\t{WEBHOOK_URL}\tpayment.succeeded" in out.getvalue()

    def test_list_empty(self, yoco):
        yoco.list_webhooks.return_value = []
        out = StringIO()

        call_command("yoco_webhooks", "list", stdout=out)

        assert "No webhooks registered" in out.getvalue()

    def test_delete(self, yoco):
        out = StringIO()

        call_command("yoco_webhooks", "delete", "sub_1", stdout=out)

        yoco.delete_webhook.assert_awaited_once_with("sub_1")
        assert "Deleted webhook sub_1" in out.getvalue()

    def test_gateway_error(self, yoco):
        yoco.list_webhooks.side_effect = PaymentGatewayAuthError(
            "Yoco rejected the secret key", status_code=401
        )

        with pytest.raises(CommandError, match="Yoco rejected the secret key"):
            call_command("yoco_webhooks", "list", stdout=StringIO())
