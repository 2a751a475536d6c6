"""Tests for applying payment outcomes to orders."""

import uuid
from unittest.mock import patch

from django.utils import timezone

import pytest
from lattelane_schemas import CheckoutSession, PaymentOutcome
from lattelane_schemas import PaymentWebhookEvent as PaymentWebhookEventSchema

from apps.web.payments.models import PaymentWebhookEvent, WebhookStatus
from apps.web.payments.reconciler import (
    Transition,
    apply_payment_outcome,
    process_webhook_event,
    reconcile_checkout,
)
from apps.web.restaurant.models import OrderStatus, PaymentStatus
from apps.web.restaurant.tests.factories import OrderFactory, make_order_with_lines


@pytest.fixture
def mock_notify():
    with patch("apps.web.payments.reconciler.notify_order_confirmed") as mock:
        yield mock


def _event(order_id, event_type="payment.succeeded", event_id="evt_1", **payload):
    raw = {
        "id": event_id,
        "type": event_type,
        "createdDate": "2026-10-18T09:30:00Z",
        "payload": {
            "id": "p_abc",
            "status": "succeeded",
            "amount": 15500,
            "currency": "ZAR",
            "mode": "test",
            "metadata": {"orderId": str(order_id), "checkoutId": "ch_1"},
            **payload,
        },
    }
    return PaymentWebhookEventSchema.model_validate(raw), raw


# =============================================================================
# Transition rule
# =============================================================================


@pytest.mark.django_db
class TestApplyPaymentOutcome:
    """Tests for apply_payment_outcome."""

    def test_success_confirms_draft(self, mock_notify):
        order = make_order_with_lines(payment_status=PaymentStatus.AWAITING_PAYMENT)
        before = timezone.now()

        result = apply_payment_outcome(
            order.pk,
            PaymentOutcome.SUCCEEDED,
            amount_cents=15500,
            currency="ZAR",
            payment_id="p_abc",
        )

        assert result == Transition.CONFIRMED
        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID
        assert order.payment_id == "p_abc"
        assert order.paid_at >= before
        assert order.confirmed_at == order.paid_at
        assert order.estimated_ready_time > order.confirmed_at
        mock_notify.assert_called_once()
        assert mock_notify.call_args.args[0].pk == order.pk

    def test_success_is_idempotent(self, mock_notify):
        order = make_order_with_lines()

        first = apply_payment_outcome(order.pk, PaymentOutcome.SUCCEEDED)
        order.refresh_from_db()
        paid_at = order.paid_at
        second = apply_payment_outcome(order.pk, PaymentOutcome.SUCCEEDED)

        assert first == Transition.CONFIRMED
        assert second == Transition.ALREADY_APPLIED
        order.refresh_from_db()
        assert order.paid_at == paid_at
        mock_notify.assert_called_once()

    def test_success_on_confirmed_unpaid_order(self, mock_notify):
        order = OrderFactory(
            status=OrderStatus.CONFIRMED,
            payment_status=PaymentStatus.AWAITING_PAYMENT,
        )

        result = apply_payment_outcome(order.pk, PaymentOutcome.SUCCEEDED)

        assert result == Transition.MARKED_PAID
        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID
        mock_notify.assert_not_called()

    def test_success_for_cancelled_order_is_rejected(self, mock_notify):
        order = OrderFactory(
            status=OrderStatus.CANCELLED, payment_status=PaymentStatus.FAILED
        )

        result = apply_payment_outcome(order.pk, PaymentOutcome.SUCCEEDED)

        assert result == Transition.REJECTED
        order.refresh_from_db()
        assert order.status == OrderStatus.CANCELLED
        assert order.payment_status == PaymentStatus.FAILED
        mock_notify.assert_not_called()

    def test_amount_mismatch_is_rejected(self, mock_notify):
        order = make_order_with_lines()

        result = apply_payment_outcome(
            order.pk, PaymentOutcome.SUCCEEDED, amount_cents=100
        )

        assert result == Transition.REJECTED
        order.refresh_from_db()
        assert order.status == OrderStatus.DRAFT
        assert not order.is_paid

    def test_currency_mismatch_is_rejected(self, mock_notify):
        order = make_order_with_lines()

        result = apply_payment_outcome(
            order.pk, PaymentOutcome.SUCCEEDED, amount_cents=15500, currency="USD"
        )

        assert result == Transition.REJECTED

    def test_currency_comparison_ignores_case(self, mock_notify):
        order = make_order_with_lines()

        result = apply_payment_outcome(
            order.pk, PaymentOutcome.SUCCEEDED, amount_cents=15500, currency="zar"
        )

        assert result == Transition.CONFIRMED

    def test_failure_keeps_draft(self, mock_notify):
        order = make_order_with_lines(payment_status=PaymentStatus.AWAITING_PAYMENT)

        result = apply_payment_outcome(order.pk, PaymentOutcome.FAILED)

        assert result == Transition.MARKED_FAILED
        order.refresh_from_db()
        assert order.status == OrderStatus.DRAFT
        assert order.payment_status == PaymentStatus.FAILED
        assert order.is_retryable
        mock_notify.assert_not_called()

    def test_repeated_failure(self, mock_notify):
        order = make_order_with_lines(payment_status=PaymentStatus.FAILED)

        result = apply_payment_outcome(order.pk, PaymentOutcome.FAILED)

        assert result == Transition.ALREADY_APPLIED

    def test_failure_after_success_is_ignored(self, mock_notify):
        """A late failure must not downgrade a paid order."""
        order = make_order_with_lines()
        apply_payment_outcome(order.pk, PaymentOutcome.SUCCEEDED)

        result = apply_payment_outcome(order.pk, PaymentOutcome.FAILED)

        assert result == Transition.IGNORED
        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID

    def test_success_after_failure(self, mock_notify):
        """A retried payment can still confirm a draft whose first attempt failed."""
        order = make_order_with_lines()
        apply_payment_outcome(order.pk, PaymentOutcome.FAILED)

        result = apply_payment_outcome(order.pk, PaymentOutcome.SUCCEEDED)

        assert result == Transition.CONFIRMED

    def test_unknown_order(self, mock_notify):
        result = apply_payment_outcome(uuid.uuid4(), PaymentOutcome.SUCCEEDED)

        assert result == Transition.ORDER_NOT_FOUND


# =============================================================================
# Webhook deliveries
# =============================================================================


@pytest.mark.django_db
class TestProcessWebhookEvent:
    """Tests for process_webhook_event."""

    def test_records_and_applies_event(self, mock_notify):
        order = make_order_with_lines()
        event, raw = _event(order.pk)

        result = process_webhook_event(event, raw)

        assert result == Transition.CONFIRMED
        record = PaymentWebhookEvent.objects.get(event_id="evt_1")
        assert record.status == WebhookStatus.PROCESSED
        assert record.result == "confirmed"
        assert record.order == order
        assert record.order_reference == str(order.pk)
        assert record.payload == raw
        assert record.processed_at is not None

    def test_duplicate_event_id(self, mock_notify):
        order = make_order_with_lines()
        event, raw = _event(order.pk)

        process_webhook_event(event, raw)
        result = process_webhook_event(event, raw)

        assert result == Transition.ALREADY_APPLIED
        record = PaymentWebhookEvent.objects.get(event_id="evt_1")
        assert record.delivery_count == 2
        mock_notify.assert_called_once()

    def test_unhandled_event_type_is_skipped(self, mock_notify):
        order = make_order_with_lines()
        event, raw = _event(order.pk, event_type="refund.succeeded", status="pending")

        result = process_webhook_event(event, raw)

        assert result == Transition.IGNORED
        record = PaymentWebhookEvent.objects.get()
        assert record.status == WebhookStatus.SKIPPED
        order.refresh_from_db()
        assert order.status == OrderStatus.DRAFT

    def test_malformed_order_id_is_skipped(self, mock_notify):
        event, raw = _event("not-a-uuid")

        result = process_webhook_event(event, raw)

        assert result == Transition.ORDER_NOT_FOUND
        record = PaymentWebhookEvent.objects.get()
        assert record.status == WebhookStatus.SKIPPED
        assert record.order is None

    def test_unknown_order_is_skipped(self, mock_notify):
        event, raw = _event(uuid.uuid4())

        result = process_webhook_event(event, raw)

        assert result == Transition.ORDER_NOT_FOUND
        record = PaymentWebhookEvent.objects.get()
        assert record.status == WebhookStatus.SKIPPED
        assert record.order is None

    def test_failure_event(self, mock_notify):
        order = make_order_with_lines()
        event, raw = _event(order.pk, event_type="payment.failed", status="failed")

        result = process_webhook_event(event, raw)

        assert result == Transition.MARKED_FAILED
        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.FAILED
        assert order.status == OrderStatus.DRAFT

    def test_rejected_payment_is_noted(self, mock_notify):
        order = make_order_with_lines()
        event, raw = _event(order.pk, amount=100)

        result = process_webhook_event(event, raw)

        assert result == Transition.REJECTED
        record = PaymentWebhookEvent.objects.get()
        assert record.status == WebhookStatus.PROCESSED
        assert record.error

    def test_unexpected_error_marks_event_failed(self, mock_notify):
        """A failed event is processed again on redelivery."""
        order = make_order_with_lines()
        event, raw = _event(order.pk)

        with patch(
            "apps.web.payments.reconciler.apply_payment_outcome",
            side_effect=RuntimeError("database went away"),
        ):
            with pytest.raises(RuntimeError):
                process_webhook_event(event, raw)

        record = PaymentWebhookEvent.objects.get()
        assert record.status == WebhookStatus.FAILED
        assert "database went away" in record.error

        result = process_webhook_event(event, raw)

        assert result == Transition.CONFIRMED
        record.refresh_from_db()
        assert record.status == WebhookStatus.PROCESSED
        assert record.delivery_count == 2

    @patch(
        "apps.web.notifications.services.render_order_confirmation",
        side_effect=RuntimeError("template error"),
    )
    def test_confirmation_email_crash_does_not_fail_event(self, _mock_render):
        order = make_order_with_lines()
        event, raw = _event(order.pk)

        result = process_webhook_event(event, raw)

        assert result == Transition.CONFIRMED
        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID
        assert PaymentWebhookEvent.objects.get().status == WebhookStatus.PROCESSED


# =============================================================================
# Polling fallback
# =============================================================================


@pytest.mark.django_db
class TestReconcileCheckout:
    """Tests for reconcile_checkout."""

    def test_order_without_checkout(self, gateway, mock_notify):
        order = make_order_with_lines()

        assert reconcile_checkout(order, gateway) == Transition.IGNORED
        gateway.get_checkout.assert_not_called()

    def test_completed_checkout(self, gateway, mock_notify):
        order = make_order_with_lines(payment_checkout_id="ch_1")
        gateway.get_checkout.return_value = CheckoutSession(
            id="ch_1",
            status="completed",
            amount=15500,
            currency="ZAR",
            payment_id="p_abc",
            metadata={"orderId": str(order.pk)},
        )

        result = reconcile_checkout(order, gateway)

        assert result == Transition.CONFIRMED
        gateway.get_checkout.assert_awaited_once_with("ch_1")
        order.refresh_from_db()
        assert order.payment_id == "p_abc"

    def test_checkout_for_other_order(self, gateway, mock_notify):
        order = make_order_with_lines(payment_checkout_id="ch_1")
        gateway.get_checkout.return_value = CheckoutSession(
            id="ch_1", status="completed", metadata={"orderId": str(uuid.uuid4())}
        )

        result = reconcile_checkout(order, gateway)

        assert result == Transition.REJECTED
        order.refresh_from_db()
        assert order.status == OrderStatus.DRAFT

    def test_expired_checkout(self, gateway, mock_notify):
        order = make_order_with_lines(payment_checkout_id="ch_1")
        gateway.get_checkout.return_value = CheckoutSession(
            id="ch_1", status="expired", metadata={"orderId": str(order.pk)}
        )

        result = reconcile_checkout(order, gateway)

        assert result == Transition.MARKED_FAILED
