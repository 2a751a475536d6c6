"""
Yoco webhook handler.

Handles payment events from Yoco:
- payment.succeeded / checkout.succeeded: order paid, draft confirmed
- payment.failed / checkout.failed|cancelled|expired: payment failed, draft kept

Response codes tell Yoco whether to redeliver:
- 200: processed, duplicate, or deliberately ignored (no redelivery)
- 400: malformed body
- 401: signature check failed
- 500: our fault, redelivery welcome
"""

import json
import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from lattelane_schemas import PaymentWebhookEvent as PaymentWebhookEventSchema
from pydantic import ValidationError

from apps.web.payments.apps import get_gateway
from apps.web.payments.exceptions import PaymentGatewayConfigError
from apps.web.payments.reconciler import process_webhook_event

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def yoco_webhook(request: HttpRequest) -> JsonResponse:
    """
    Handle Yoco webhook events.

    POST /api/payments/webhooks/yoco
    """
    payload = request.body

    # Verify webhook signature before trusting anything in the body
    try:
        is_valid = get_gateway().verify_webhook_signature(payload, request.headers)
    except PaymentGatewayConfigError as e:
        logger.error("Cannot verify Yoco webhook: %s", e)
        return JsonResponse({"error": "Webhook verification unavailable"}, status=500)

    if not is_valid:
        return JsonResponse({"error": "Invalid signature"}, status=401)

    try:
        raw = json.loads(payload)
        event = PaymentWebhookEventSchema.model_validate(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Invalid Yoco webhook payload: %s", e)
        return JsonResponse({"error": "Invalid payload"}, status=400)
    except ValidationError as e:
        logger.warning("Malformed Yoco webhook event: %s", e.errors())
        return JsonResponse({"error": "Invalid payload"}, status=400)

    logger.info("Received Yoco event %s (%s)", event.id, event.type)

    try:
        result = process_webhook_event(event, raw)
    except Exception:
        logger.exception("Failed to process Yoco webhook %s", event.id)
        return JsonResponse({"error": "Internal error"}, status=500)

    # Unknown orders are acknowledged too, so Yoco stops redelivering them
    return JsonResponse({"received": True, "result": result.value})
