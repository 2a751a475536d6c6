"""Yoco payment gateway adapter - hosted checkout and webhook management."""

import base64
import binascii
import hashlib
import hmac
import logging
import time
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

import httpx
from django.conf import settings
from lattelane_schemas import (
    CallbackUrls,
    CheckoutLineItem,
    CheckoutSession,
    WebhookRegistration,
    to_minor_units,
)
from pydantic import ValidationError

from apps.web.payments.exceptions import (
    PaymentGatewayAuthError,
    PaymentGatewayConfigError,
    PaymentGatewayError,
)

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_EVENTS = ["payment.succeeded", "payment.failed"]


class YocoGateway:
    """
    Thin client over the Yoco Online Payments API.

    Covers:
    - Hosted checkout sessions (create, fetch status)
    - Webhook subscriptions (register, list, delete)
    - Webhook signature verification (Standard Webhooks scheme)

    All amounts cross the wire as integer cents. No retries happen here:
    every failure surfaces as a PaymentGatewayError and callers decide.

    API Reference: https://developer.yoco.com/online/api-reference
    """

    DEFAULT_BASE_URL = "https://payments.yoco.com/api"
    DEFAULT_TIMEOUT = 30.0

    # Standard Webhooks: reject deliveries signed more than 5 minutes away from now
    SIGNATURE_TOLERANCE_SECONDS = 300
    WEBHOOK_SECRET_PREFIX = "whsec_"
    SIGNATURE_VERSION = "v1"

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str = "",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the Yoco gateway.

        Args:
            secret_key: Yoco secret API key (sk_live_... / sk_test_...).
            webhook_secret: Signing secret returned when the webhook was registered.
            base_url: API root, overridable for tests.
            timeout: Per-request timeout in seconds.
            http_client: Optional HTTP client for dependency injection (testing).
                Without one, each call opens and closes its own client.
        """
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(cls) -> "YocoGateway":
        """Build a gateway from Django settings."""
        return cls(
            secret_key=settings.YOCO_SECRET_KEY,
            webhook_secret=settings.YOCO_WEBHOOK_SECRET,
            base_url=getattr(settings, "YOCO_API_BASE_URL", cls.DEFAULT_BASE_URL),
            timeout=getattr(settings, "YOCO_TIMEOUT_SECONDS", cls.DEFAULT_TIMEOUT),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._secret_key)

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._secret_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request to the Yoco API and return the decoded JSON body.

        Raises:
            PaymentGatewayConfigError: If no secret key is configured.
            PaymentGatewayAuthError: If Yoco rejects the secret key.
            PaymentGatewayError: On any other non-2xx response or network error.
        """
        if not self._secret_key:
            raise PaymentGatewayConfigError("YOCO_SECRET_KEY is not configured")

        url = f"{self._base_url}{path}"
        try:
            async with self._client() as client:
                response = await client.request(
                    method, url, json=json, headers=self._headers()
                )
        except httpx.RequestError as e:
            raise PaymentGatewayError(f"Yoco request failed: {e}") from e

        if response.status_code in (401, 403):
            raise PaymentGatewayAuthError(
                "Yoco rejected the secret key",
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PaymentGatewayError(
                f"Yoco API error: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise PaymentGatewayError(
                "Yoco returned a non-JSON response",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    @staticmethod
    def _parse(model: type, data: Any, what: str) -> Any:
        try:
            return model.model_validate(data)  # type: ignore[attr-defined]
        except ValidationError as e:
            raise PaymentGatewayError(
                f"Unexpected Yoco {what} response",
                response_body=str(data),
            ) from e

    # =========================================================================
    # Checkouts
    # =========================================================================

    async def create_checkout(
        self,
        amount: Decimal,
        currency: str,
        metadata: Mapping[str, str],
        line_items: list[CheckoutLineItem] | None = None,
        callbacks: CallbackUrls | None = None,
    ) -> CheckoutSession:
        """
        Create a hosted checkout session.

        Args:
            amount: Total in major units (rands); rounded to the nearest cent.
            currency: ISO currency code (ZAR).
            metadata: Opaque correlation values echoed back in webhooks.
            line_items: Lines to display on the hosted page.
            callbacks: Browser redirect targets after payment.

        Returns:
            The created session, including the redirect URL for the customer.
        """
        body: dict[str, Any] = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "metadata": dict(metadata),
        }
        if callbacks is not None:
            body["successUrl"] = callbacks.success_url
            body["cancelUrl"] = callbacks.cancel_url
            body["failureUrl"] = callbacks.failure_url
        if line_items:
            body["lineItems"] = [item.to_gateway() for item in line_items]

        data = await self._request("POST", "/checkouts", json=body)
        session: CheckoutSession = self._parse(CheckoutSession, data, "checkout")
        logger.info(
            "Created Yoco checkout %s for %s cents %s",
            session.id,
            body["amount"],
            currency,
        )
        return session

    async def get_checkout(self, checkout_id: str) -> CheckoutSession:
        """Fetch the current state of a checkout session."""
        data = await self._request("GET", f"/checkouts/{checkout_id}")
        return self._parse(CheckoutSession, data, "checkout")

    # =========================================================================
    # Webhook subscriptions
    # =========================================================================

    async def register_webhook(
        self,
        url: str,
        events: list[str] | None = None,
    ) -> WebhookRegistration:
        """
        Subscribe url to payment events.

        The returned registration carries the signing secret; Yoco only
        reveals it on creation, so callers must store it.
        """
        data = await self._request(
            "POST",
            "/webhooks",
            json={"url": url, "events": events or DEFAULT_WEBHOOK_EVENTS},
        )
        return self._parse(WebhookRegistration, data, "webhook")

    async def list_webhooks(self) -> list[WebhookRegistration]:
        data = await self._request("GET", "/webhooks")
        if isinstance(data, dict):
            data = data.get("webhooks") or data.get("subscriptions") or []
        return [
            self._parse(WebhookRegistration, item, "webhook") for item in data or []
        ]

    async def delete_webhook(self, webhook_id: str) -> None:
        await self._request("DELETE", f"/webhooks/{webhook_id}")
        logger.info("Deleted Yoco webhook %s", webhook_id)

    async def ensure_webhook(self, url: str) -> tuple[WebhookRegistration, bool]:
        """
        Register url unless a subscription for it already exists.

        Returns:
            (registration, created) - created is False when reusing an existing one.
        """
        for webhook in await self.list_webhooks():
            if webhook.url == url:
                return webhook, False
        return await self.register_webhook(url), True

    # =========================================================================
    # Webhook verification
    # =========================================================================

    def _signing_key(self) -> bytes:
        secret = self._webhook_secret
        if not secret:
            raise PaymentGatewayConfigError("YOCO_WEBHOOK_SECRET is not configured")
        if secret.startswith(self.WEBHOOK_SECRET_PREFIX):
            secret = secret[len(self.WEBHOOK_SECRET_PREFIX) :]
        try:
            return base64.b64decode(secret)
        except (binascii.Error, ValueError) as e:
            raise PaymentGatewayConfigError(
                "YOCO_WEBHOOK_SECRET is not valid base64"
            ) from e

    def verify_webhook_signature(
        self,
        payload: bytes,
        headers: Mapping[str, str],
        now: float | None = None,
    ) -> bool:
        """
        Verify a Yoco webhook delivery.

        Yoco signs "{webhook-id}.{webhook-timestamp}.{body}" with HMAC-SHA256
        keyed by the base64-decoded secret. The webhook-signature header holds
        one or more space-separated "v1,<base64 signature>" entries.

        Args:
            payload: Raw request body bytes, exactly as received.
            headers: Request headers (case-insensitive mapping).
            now: Current unix time, overridable for tests.

        Returns:
            True if a signature matches and the timestamp is fresh.

        Raises:
            PaymentGatewayConfigError: If no usable webhook secret is configured.
        """
        key = self._signing_key()

        webhook_id = headers.get("webhook-id")
        timestamp = headers.get("webhook-timestamp")
        signature_header = headers.get("webhook-signature")
        if not webhook_id or not timestamp or not signature_header:
            logger.warning("Yoco webhook missing signature headers")
            return False

        try:
            sent_at = int(timestamp)
        except ValueError:
            logger.warning("Yoco webhook has malformed timestamp %r", timestamp)
            return False

        current = time.time() if now is None else now
        if abs(current - sent_at) > self.SIGNATURE_TOLERANCE_SECONDS:
            logger.warning("Yoco webhook %s timestamp outside tolerance", webhook_id)
            return False

        signed_content = f"{webhook_id}.{timestamp}.".encode() + payload
        expected = base64.b64encode(
            hmac.new(key, signed_content, hashlib.sha256).digest()
        ).decode()

        for entry in signature_header.split():
            version, _, signature = entry.partition(",")
            if version == self.SIGNATURE_VERSION and hmac.compare_digest(
                signature, expected
            ):
                return True

        logger.warning("Yoco webhook %s signature mismatch", webhook_id)
        return False

    def sign_webhook(self, webhook_id: str, timestamp: int, payload: bytes) -> str:
        """Produce the webhook-signature header value Yoco would send for payload."""
        key = self._signing_key()
        signed_content = f"{webhook_id}.{timestamp}.".encode() + payload
        digest = hmac.new(key, signed_content, hashlib.sha256).digest()
        return f"{self.SIGNATURE_VERSION},{base64.b64encode(digest).decode()}"
