"""Payment gateway schemas - data contracts for Yoco checkouts and webhooks."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

CENT = Decimal("0.01")


def to_minor_units(amount: Decimal | int | str) -> int:
    """Convert a currency amount to integer cents, rounding half up."""
    rounded = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return int(rounded * 100)


# =============================================================================
# Enums
# =============================================================================


class PaymentOutcome(str, Enum):
    """What a gateway notification means for the order it refers to."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    IGNORED = "ignored"


SUCCESS_EVENT_TYPES = frozenset(
    {"payment.succeeded", "checkout.succeeded", "checkout.payment_received"}
)
FAILURE_EVENT_TYPES = frozenset(
    {"payment.failed", "checkout.failed", "checkout.cancelled", "checkout.expired"}
)
SUCCESS_STATUSES = frozenset({"succeeded", "completed"})
FAILURE_STATUSES = frozenset({"failed", "cancelled", "expired"})


def outcome_for(event_type: str | None, status: str | None) -> PaymentOutcome:
    """Map a gateway event type and/or checkout status to a PaymentOutcome."""
    if event_type in SUCCESS_EVENT_TYPES or status in SUCCESS_STATUSES:
        return PaymentOutcome.SUCCEEDED
    if event_type in FAILURE_EVENT_TYPES or status in FAILURE_STATUSES:
        return PaymentOutcome.FAILED
    return PaymentOutcome.IGNORED


# =============================================================================
# Checkout
# =============================================================================


class CheckoutLineItem(BaseModel):
    """A line shown on the hosted checkout page."""

    display_name: str
    quantity: int = Field(ge=1)
    price_cents: int = Field(ge=0, description="Unit price in minor currency units")

    def to_gateway(self) -> dict[str, Any]:
        return {
            "displayName": self.display_name,
            "quantity": self.quantity,
            "pricingDetails": {"price": self.price_cents},
        }


class CheckoutSession(BaseModel):
    """A checkout session as returned by the gateway."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    redirect_url: str = Field(default="", alias="redirectUrl")
    status: str | None = None
    amount: int | None = None
    currency: str | None = None
    payment_id: str | None = Field(default=None, alias="paymentId")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def outcome(self) -> PaymentOutcome:
        return outcome_for(None, self.status)


class CallbackUrls(BaseModel):
    """Browser redirect targets handed to the hosted checkout page."""

    success_url: str
    cancel_url: str
    failure_url: str


# =============================================================================
# Webhooks
# =============================================================================


class WebhookRegistration(BaseModel):
    """A webhook subscription registered with the gateway."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    url: str
    events: list[str] = Field(default_factory=list)
    status: str | None = None
    mode: str | None = None
    created_date: datetime | None = Field(default=None, alias="createdDate")
    secret: str | None = Field(
        default=None,
        description="Signing secret, only returned when the webhook is created",
    )


class PaymentWebhookPayload(BaseModel):
    """The `payload` object of a gateway webhook event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    status: str | None = None
    amount: int | None = Field(default=None, description="Amount in minor units")
    currency: str | None = None
    payment_id: str | None = Field(default=None, alias="paymentId")
    mode: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class PaymentWebhookEvent(BaseModel):
    """Envelope of a webhook delivery from the gateway."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    created_date: datetime | None = Field(default=None, alias="createdDate")
    payload: PaymentWebhookPayload

    @property
    def outcome(self) -> PaymentOutcome:
        return outcome_for(self.type, self.payload.status)


class PaymentCorrelation(BaseModel):
    """
    Correlation key carried through the gateway's metadata.

    The order id travels as an opaque string; it must parse as a UUID before
    it is allowed anywhere near the order store.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    order_id: UUID = Field(validation_alias=AliasChoices("orderId", "order_id"))

    @classmethod
    def from_metadata(
        cls, metadata: dict[str, Any] | None
    ) -> "PaymentCorrelation | None":
        """Parse correlation from gateway metadata; None when absent or malformed."""
        if not isinstance(metadata, dict):
            return None
        try:
            return cls.model_validate(metadata)
        except ValidationError:
            return None

    def to_metadata(self) -> dict[str, str]:
        return {"orderId": str(self.order_id)}
