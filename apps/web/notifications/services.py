"""
Notification services - transactional email via Resend.
"""

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

import resend

if TYPE_CHECKING:
    from apps.web.restaurant.models import Order

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when email sending fails."""

    pass


def send_email(to_email: str, subject: str, body: str) -> str:
    """
    Send a plain-text email via Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject
        body: Email body text

    Returns:
        Resend email ID

    Raises:
        EmailError: If sending fails
    """
    if not to_email:
        raise EmailError("Recipient email address is required")

    if not subject:
        raise EmailError("Email subject is required")

    if not body:
        raise EmailError("Email body is required")

    api_key = getattr(settings, "RESEND_API_KEY", None)
    if not api_key:
        raise EmailError("Resend API key not configured")

    resend.api_key = api_key

    try:
        response = resend.Emails.send(
            {
                "from": settings.ORDER_EMAIL_FROM,
                "to": to_email,
                "subject": subject,
                "text": body,
            }
        )
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        raise EmailError(f"Failed to send email: {e}") from e

    email_id = response.get("id", "") if isinstance(response, dict) else ""
    logger.info("Sent email to %s (ID: %s)", to_email, email_id)
    return str(email_id)


def render_order_confirmation(order: "Order") -> tuple[str, str]:
    """Build (subject, body) for an order confirmation email."""
    subject = f"Order Confirmation #{order.order_number} - Little Latte Lane"

    lines = [
        f"  {item.quantity}x {item.item_name} - R{item.line_total:.2f}"
        for item in order.items.all()
    ]
    details = [
        f"- Order Number: #{order.order_number}",
        f"- Total Amount: R{order.total_amount:.2f}",
        f"- Order Type: {order.get_order_type_display()}",
    ]
    if order.estimated_ready_time:
        ready = timezone.localtime(order.estimated_ready_time)
        details.append(f"- Estimated Ready Time: {ready:%H:%M}")

    body = "\n".join(
        [
            f"Dear {order.customer_name or 'Valued Customer'},",
            "",
            "Thank you for your order at Little Latte Lane!",
            "",
            "Order Details:",
            *details,
            "",
            "Items Ordered:",
            *lines,
            "",
            f"You can track your order at: {settings.SITE_URL}/orders/{order.pk}",
            "",
            "Best regards,",
            "The Little Latte Lane Team",
        ]
    )
    return subject, body


def send_order_confirmation(order: "Order") -> str:
    """
    Email the customer that their order is confirmed.

    Raises:
        EmailError: If sending fails
    """
    subject, body = render_order_confirmation(order)
    return send_email(order.customer_email, subject, body)


def notify_order_confirmed(order: "Order") -> None:
    """
    Best-effort confirmation email.

    The order is already confirmed when this runs; a failed email is logged
    and never propagated.
    """
    try:
        send_order_confirmation(order)
    except EmailError as e:
        logger.warning(
            "Confirmation email for order %s not sent: %s", order.order_number, e
        )
    except Exception:
        logger.exception(
            "Unexpected error sending confirmation for order %s", order.order_number
        )
