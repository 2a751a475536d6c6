"""Smoke tests for the ordering admin."""

from django.contrib.auth import get_user_model
from django.test import Client as DjangoClient

import pytest

from apps.web.payments.models import PaymentWebhookEvent, WebhookStatus

from .factories import make_order_with_lines


@pytest.fixture
def admin_client_logged_in(db) -> DjangoClient:
    admin_user = get_user_model().objects.create_superuser(
        username="admin", email="admin@example.com", password="testpass123"
    )
    client = DjangoClient()
    client.force_login(admin_user)
    return client


@pytest.mark.django_db
class TestOrderAdmin:
    def test_changelist(self, admin_client_logged_in):
        order = make_order_with_lines()

        response = admin_client_logged_in.get("/admin/restaurant/order/")

        assert response.status_code == 200
        assert order.order_number in response.content.decode()

    def test_change_view_shows_line_snapshots(self, admin_client_logged_in):
        order = make_order_with_lines()

        response = admin_client_logged_in.get(
            f"/admin/restaurant/order/{order.pk}/change/"
        )

        assert response.status_code == 200
        assert "Cappuccino" in response.content.decode()

    def test_webhook_event_changelist(self, admin_client_logged_in):
        PaymentWebhookEvent.objects.create(
            event_id="evt_admin",
            event_type="payment.succeeded",
            payload={"id": "evt_admin"},
            status=WebhookStatus.PROCESSED,
        )

        response = admin_client_logged_in.get("/admin/payments/paymentwebhookevent/")

        assert response.status_code == 200
        assert "evt_admin" in response.content.decode()
