"""
Payment reconciler - applies gateway payment outcomes to orders.

Two entry points share one transition rule:
1. process_webhook_event: a verified webhook delivery from Yoco
2. reconcile_checkout: polling fallback that asks Yoco for a checkout's state

The transition rule (apply_payment_outcome) locks the order row, so duplicate
or out-of-order deliveries serialize and become no-ops.
"""

import asyncio
import logging
from datetime import timedelta
from enum import Enum
from typing import Any
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from lattelane_schemas import (
    PaymentCorrelation,
    PaymentOutcome,
    PaymentWebhookEvent as PaymentWebhookEventSchema,
)

from apps.web.notifications.services import notify_order_confirmed
from apps.web.payments.gateway import YocoGateway
from apps.web.payments.models import PaymentWebhookEvent, WebhookStatus
from apps.web.restaurant.models import Order, OrderStatus, PaymentStatus

logger = logging.getLogger(__name__)


class Transition(str, Enum):
    """What applying a payment outcome did to the order."""

    CONFIRMED = "confirmed"  # draft -> confirmed, payment -> paid
    MARKED_PAID = "marked_paid"  # already past draft, payment -> paid
    MARKED_FAILED = "marked_failed"
    ALREADY_APPLIED = "already_applied"
    REJECTED = "rejected"  # amount/currency mismatch or cancelled order
    ORDER_NOT_FOUND = "order_not_found"
    IGNORED = "ignored"


# =============================================================================
# Transition rule
# =============================================================================


def apply_payment_outcome(
    order_id: UUID,
    outcome: PaymentOutcome,
    amount_cents: int | None = None,
    currency: str | None = None,
    payment_id: str = "",
) -> Transition:
    """
    Apply a payment outcome to an order.

    Success: payment_status -> paid; a draft also moves to confirmed.
    Failure: payment_status -> failed; the order stays a draft so the
    customer can retry. Re-applying either outcome is a no-op.

    The confirmation email goes out only when this call performed the
    draft -> confirmed transition, after the row lock is released.
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            logger.warning(
                "Payment outcome %s for unknown order %s", outcome.value, order_id
            )
            return Transition.ORDER_NOT_FOUND

        match outcome:
            case PaymentOutcome.SUCCEEDED:
                result = _apply_success(order, amount_cents, currency, payment_id)
            case PaymentOutcome.FAILED:
                result = _apply_failure(order)
            case _:
                result = Transition.IGNORED

    if result == Transition.CONFIRMED:
        notify_order_confirmed(order)

    return result


def _apply_success(
    order: Order,
    amount_cents: int | None,
    currency: str | None,
    payment_id: str,
) -> Transition:
    if order.is_paid:
        logger.info("Order %s already paid - ignoring replay", order.order_number)
        return Transition.ALREADY_APPLIED

    if order.status == OrderStatus.CANCELLED:
        logger.error(
            "Payment received for cancelled order %s (payment %s) - needs refund",
            order.order_number,
            payment_id or "unknown",
        )
        return Transition.REJECTED

    if amount_cents is not None and amount_cents != order.total_cents:
        logger.error(
            "Amount mismatch for order %s: paid %s cents, expected %s cents",
            order.order_number,
            amount_cents,
            order.total_cents,
        )
        return Transition.REJECTED

    if currency and currency.upper() != settings.PAYMENT_CURRENCY.upper():
        logger.error(
            "Currency mismatch for order %s: paid in %s, expected %s",
            order.order_number,
            currency,
            settings.PAYMENT_CURRENCY,
        )
        return Transition.REJECTED

    now = timezone.now()
    order.payment_status = PaymentStatus.PAID
    order.paid_at = now
    update_fields = ["payment_status", "paid_at", "updated_at"]
    if payment_id:
        order.payment_id = payment_id
        update_fields.append("payment_id")

    result = Transition.MARKED_PAID
    if order.status == OrderStatus.DRAFT:
        order.status = OrderStatus.CONFIRMED
        order.confirmed_at = now
        order.estimated_ready_time = now + timedelta(
            minutes=settings.ORDER_READY_MINUTES
        )
        update_fields += ["status", "confirmed_at", "estimated_ready_time"]
        result = Transition.CONFIRMED

    order.save(update_fields=update_fields)
    logger.info("Order %s paid (%s)", order.order_number, result.value)
    return result


def _apply_failure(order: Order) -> Transition:
    if order.is_paid:
        logger.warning(
            "Ignoring payment failure for already-paid order %s", order.order_number
        )
        return Transition.IGNORED

    if order.payment_status == PaymentStatus.FAILED:
        return Transition.ALREADY_APPLIED

    order.payment_status = PaymentStatus.FAILED
    order.save(update_fields=["payment_status", "updated_at"])
    logger.info("Order %s payment failed - draft kept for retry", order.order_number)
    return Transition.MARKED_FAILED


# =============================================================================
# Webhook deliveries
# =============================================================================


def _claim_event(
    event: PaymentWebhookEventSchema, raw: dict[str, Any]
) -> PaymentWebhookEvent | None:
    """
    Record the delivery; None if this event id was already settled.
    """
    with transaction.atomic():
        record, created = PaymentWebhookEvent.objects.select_for_update().get_or_create(
            event_id=event.id,
            defaults={
                "event_type": event.type,
                "payload": raw,
                "order_reference": str(event.payload.metadata.get("orderId", ""))[:255],
            },
        )
        if created:
            return record

        record.delivery_count += 1
        record.save(update_fields=["delivery_count"])
        if record.is_settled:
            logger.info(
                "Duplicate webhook %s (%s) - already %s",
                event.id,
                event.type,
                record.status,
            )
            return None
        return record


def _settle(
    record: PaymentWebhookEvent,
    status: str,
    result: Transition,
    order_id: UUID | None = None,
    error: str = "",
) -> None:
    record.status = status
    record.result = result.value
    record.error = error
    record.processed_at = timezone.now()
    update_fields = ["status", "result", "error", "processed_at"]
    if order_id is not None and Order.objects.filter(pk=order_id).exists():
        record.order_id = order_id
        update_fields.append("order")
    record.save(update_fields=update_fields)


def process_webhook_event(
    event: PaymentWebhookEventSchema, raw: dict[str, Any]
) -> Transition:
    """
    Process a verified webhook event.

    Args:
        event: Parsed webhook envelope (signature already verified).
        raw: The decoded JSON body, stored for audit.

    Returns:
        The transition applied. Unknown orders and unhandled types are
        returned (not raised) so the caller can acknowledge them.

    Raises:
        Exception: Anything unexpected; the event is marked failed first so a
            redelivery is processed again.
    """
    record = _claim_event(event, raw)
    if record is None:
        return Transition.ALREADY_APPLIED

    outcome = event.outcome
    if outcome == PaymentOutcome.IGNORED:
        logger.info("Ignoring webhook %s of type %s", event.id, event.type)
        _settle(record, WebhookStatus.SKIPPED, Transition.IGNORED)
        return Transition.IGNORED

    correlation = PaymentCorrelation.from_metadata(event.payload.metadata)
    if correlation is None:
        logger.warning(
            "Webhook %s has missing or malformed orderId %r",
            event.id,
            event.payload.metadata.get("orderId"),
        )
        _settle(
            record,
            WebhookStatus.SKIPPED,
            Transition.ORDER_NOT_FOUND,
            error="missing or malformed orderId",
        )
        return Transition.ORDER_NOT_FOUND

    try:
        result = apply_payment_outcome(
            correlation.order_id,
            outcome,
            amount_cents=event.payload.amount,
            currency=event.payload.currency,
            payment_id=event.payload.payment_id or event.payload.id,
        )
    except Exception as e:
        _settle(
            record,
            WebhookStatus.FAILED,
            Transition.IGNORED,
            correlation.order_id,
            error=str(e),
        )
        raise

    if result == Transition.ORDER_NOT_FOUND:
        _settle(record, WebhookStatus.SKIPPED, result, error="order not found")
    elif result == Transition.REJECTED:
        _settle(
            record,
            WebhookStatus.PROCESSED,
            result,
            correlation.order_id,
            error="payment not applied - see logs",
        )
    else:
        _settle(record, WebhookStatus.PROCESSED, result, correlation.order_id)

    logger.info("Webhook %s (%s) -> %s", event.id, event.type, result.value)
    return result


# =============================================================================
# Polling fallback
# =============================================================================


def reconcile_checkout(order: Order, gateway: YocoGateway) -> Transition:
    """
    Ask Yoco for the order's latest checkout and apply its outcome.

    Used when a customer lands on the success page before the webhook.

    Raises:
        PaymentGatewayError: If Yoco can't be reached.
    """
    if not order.payment_checkout_id:
        return Transition.IGNORED

    session = asyncio.run(gateway.get_checkout(order.payment_checkout_id))

    correlation = PaymentCorrelation.from_metadata(session.metadata)
    if correlation is not None and correlation.order_id != order.pk:
        logger.error(
            "Checkout %s belongs to order %s, not %s",
            session.id,
            correlation.order_id,
            order.pk,
        )
        return Transition.REJECTED

    outcome = session.outcome
    if outcome == PaymentOutcome.IGNORED:
        return Transition.IGNORED

    return apply_payment_outcome(
        order.pk,
        outcome,
        amount_cents=session.amount,
        currency=session.currency,
        payment_id=session.payment_id or "",
    )
