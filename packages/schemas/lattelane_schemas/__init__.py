"""Little Latte Lane Schemas - Pydantic models for data contracts."""

from lattelane_schemas.payments import (
    CallbackUrls,
    CheckoutLineItem,
    CheckoutSession,
    PaymentCorrelation,
    PaymentOutcome,
    PaymentWebhookEvent,
    PaymentWebhookPayload,
    WebhookRegistration,
    outcome_for,
    to_minor_units,
)

__all__ = [
    "CallbackUrls",
    "CheckoutLineItem",
    "CheckoutSession",
    "PaymentCorrelation",
    "PaymentOutcome",
    "PaymentWebhookEvent",
    "PaymentWebhookPayload",
    "WebhookRegistration",
    "outcome_for",
    "to_minor_units",
]
