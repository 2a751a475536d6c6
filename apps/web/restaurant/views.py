"""
Menu and Order API views - Public endpoints for the ordering site.

These endpoints are used by the storefront:
- Menu browsing
- Checkout (draft order + Yoco redirect) and retry of unpaid drafts
- Order status polling after the Yoco redirect
- Scheduled cleanup of abandoned drafts
"""

import hmac
import json
import logging
from typing import Any
from uuid import UUID

from django.conf import settings
from django.db.models import Prefetch
from django.http import HttpRequest, JsonResponse
from django.views.decorators.cache import cache_control
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from pydantic import ValidationError as PydanticValidationError

from apps.web.core.decorators import idempotency_key_required, login_required_json
from apps.web.payments.apps import get_gateway
from apps.web.payments.exceptions import PaymentGatewayError
from apps.web.payments.reconciler import reconcile_checkout
from apps.web.restaurant.models import MenuCategory, MenuItem, Order
from apps.web.restaurant.serializers import (
    CheckoutRequest,
    CheckoutResponse,
    CleanupResponse,
    CustomerSchema,
    MenuCategorySchema,
    MenuItemSchema,
    MenuListResponse,
    OrderDetailResponse,
    OrderItemResponseSchema,
    OrderStatusResponse,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from apps.web.restaurant.services.checkout import (
    CheckoutResult,
    checkout,
    start_checkout,
)
from apps.web.restaurant.services.cleanup import cleanup_draft_orders
from apps.web.restaurant.services.exceptions import (
    CartValidationError,
    OrderNotFound,
    OrderStateError,
)
from apps.web.restaurant.services.orders import cancel_draft_order, get_owned_order
from apps.web.restaurant.services.retry import load_retry_cart

logger = logging.getLogger(__name__)


def _cors_headers() -> dict[str, str]:
    """CORS headers for storefront access."""
    return {
        "Access-Control-Allow-Origin": settings.SITE_URL,
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Idempotency-Key",
        "Access-Control-Allow-Credentials": "true",
    }


def _json_response(data: dict[str, Any], status: int = 200) -> JsonResponse:
    """Create a JSON response with CORS headers."""
    response = JsonResponse(data, status=status)
    for key, value in _cors_headers().items():
        response[key] = value
    return response


def _validation_error(details: list[tuple[str, str]]) -> JsonResponse:
    response = ValidationErrorResponse(
        error="validation_error",
        details=[
            ValidationErrorDetail(field=field, message=message)
            for field, message in details
        ],
    )
    return _json_response(response.model_dump(), status=400)


def _not_found() -> JsonResponse:
    return _json_response({"error": "Order not found"}, status=404)


def _state_error(e: OrderStateError) -> JsonResponse:
    return _json_response(
        {
            "error": "invalid_order_state",
            "message": e.message,
            "status": e.status,
            "payment_status": e.payment_status,
        },
        status=409,
    )


def _gateway_error(e: PaymentGatewayError) -> JsonResponse:
    logger.error(
        "Payment gateway error: %s (status %s, body %s)",
        e.message,
        e.status_code,
        e.response_body,
    )
    return _json_response(
        {
            "error": "payment_gateway_error",
            "message": "Payment provider is unavailable, please try again",
            "retryable": True,
        },
        status=502,
    )


def _checkout_response(result: CheckoutResult, status: int) -> JsonResponse:
    response = CheckoutResponse(
        order_id=result.order.pk,
        order_number=result.order.order_number,
        checkout_id=result.session.id,
        redirect_url=result.session.redirect_url,
        total=result.order.total_amount,
        success_url=result.callbacks.success_url,
        cancel_url=result.callbacks.cancel_url,
        failure_url=result.callbacks.failure_url,
    )
    return _json_response(response.model_dump(mode="json"), status=status)


def _serialize_order(order: Order) -> OrderDetailResponse:
    return OrderDetailResponse(
        order_id=order.pk,
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        customer=CustomerSchema(
            name=order.customer_name,
            email=order.customer_email,
            phone=order.customer_phone,
        ),
        items=[
            OrderItemResponseSchema.model_validate(item) for item in order.items.all()
        ],
        order_type=order.order_type,
        delivery_address=order.delivery_address,
        special_instructions=order.special_instructions,
        total=order.total_amount,
        created_at=order.created_at,
        paid_at=order.paid_at,
        confirmed_at=order.confirmed_at,
        estimated_ready_time=order.estimated_ready_time,
    )


def _serialize_status(order: Order) -> OrderStatusResponse:
    return OrderStatusResponse(
        order_id=order.pk,
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        updated_at=order.updated_at,
        estimated_ready_time=order.estimated_ready_time,
    )


# =============================================================================
# Menu
# =============================================================================


@require_GET
@cache_control(max_age=300, public=True)  # 5 minutes
def menu_list(_request: HttpRequest) -> JsonResponse:
    """
    GET /api/menu

    Active categories with their items, availability included.
    """
    categories = MenuCategory.objects.filter(is_active=True).prefetch_related(
        Prefetch("items", queryset=MenuItem.objects.order_by("display_order", "name"))
    )
    response = MenuListResponse(
        categories=[
            MenuCategorySchema(
                id=category.pk,
                name=category.name,
                description=category.description,
                items=[
                    MenuItemSchema.model_validate(item) for item in category.items.all()
                ],
            )
            for category in categories
        ]
    )
    return _json_response(response.model_dump(mode="json"))


# =============================================================================
# Checkout
# =============================================================================


@csrf_exempt
@require_POST
@login_required_json
@idempotency_key_required
def create_checkout(request: HttpRequest) -> JsonResponse:
    """
    POST /api/checkout

    Create a draft order from the cart and a Yoco checkout for it.

    Request body: CheckoutRequest schema
    Response: CheckoutResponse (201), ValidationErrorResponse (400),
        or payment_gateway_error (502, the draft is kept for retry)
    """
    try:
        body = json.loads(request.body)
        cart = CheckoutRequest.model_validate(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _json_response(
            {"error": "Invalid JSON in request body"},
            status=400,
        )
    except PydanticValidationError as e:
        return _validation_error(
            [
                (".".join(str(loc) for loc in err["loc"]), err["msg"])
                for err in e.errors()
            ]
        )

    try:
        result = checkout(cart, request.user, get_gateway())
    except CartValidationError as e:
        return _validation_error(e.details)
    except PaymentGatewayError as e:
        return _gateway_error(e)

    return _checkout_response(result, status=201)


@csrf_exempt
@require_POST
@login_required_json
def retry_checkout(request: HttpRequest, order_id: UUID) -> JsonResponse:
    """
    POST /api/orders/{order_id}/retry-checkout

    New Yoco checkout for an existing unpaid draft, reusing its stored lines
    and total.
    """
    try:
        order = get_owned_order(order_id, request.user.pk)
        result = start_checkout(order, get_gateway())
    except OrderNotFound:
        return _not_found()
    except OrderStateError as e:
        return _state_error(e)
    except PaymentGatewayError as e:
        return _gateway_error(e)

    return _checkout_response(result, status=200)


# =============================================================================
# Orders
# =============================================================================


@require_GET
@login_required_json
def get_order(request: HttpRequest, order_id: UUID) -> JsonResponse:
    """
    GET /api/orders/{order_id}

    Full order details for the owner.
    """
    try:
        order = get_owned_order(order_id, request.user.pk)
    except OrderNotFound:
        return _not_found()

    return _json_response(_serialize_order(order).model_dump(mode="json"))


@require_GET
@login_required_json
@cache_control(max_age=5, private=True)  # 5 seconds
def order_status(request: HttpRequest, order_id: UUID) -> JsonResponse:
    """
    GET /api/orders/{order_id}/status

    Lightweight status for polling after the Yoco redirect.
    """
    try:
        order = get_owned_order(order_id, request.user.pk)
    except OrderNotFound:
        return _not_found()

    return _json_response(_serialize_status(order).model_dump(mode="json"))


@require_GET
@login_required_json
def retry_cart(request: HttpRequest, order_id: UUID) -> JsonResponse:
    """
    GET /api/orders/{order_id}/retry

    Rebuild the cart of an unpaid draft so the customer can check out again.
    """
    try:
        cart = load_retry_cart(order_id, request.user.pk)
    except OrderNotFound:
        return _not_found()

    return _json_response(cart.model_dump(mode="json"))


@csrf_exempt
@require_POST
@login_required_json
def verify_payment(request: HttpRequest, order_id: UUID) -> JsonResponse:
    """
    POST /api/orders/{order_id}/verify-payment

    Ask Yoco for the latest checkout state and apply it, for when the
    customer returns before the webhook arrives.
    """
    try:
        order = get_owned_order(order_id, request.user.pk)
        transition = reconcile_checkout(order, get_gateway())
    except OrderNotFound:
        return _not_found()
    except PaymentGatewayError as e:
        return _gateway_error(e)

    order.refresh_from_db()
    data = _serialize_status(order).model_dump(mode="json")
    data["result"] = transition.value
    return _json_response(data)


@csrf_exempt
@require_POST
@login_required_json
def cancel_order(request: HttpRequest, order_id: UUID) -> JsonResponse:
    """
    POST /api/orders/{order_id}/cancel

    Customer abandons an unpaid draft.
    """
    try:
        order = cancel_draft_order(order_id, request.user.pk)
    except OrderNotFound:
        return _not_found()
    except OrderStateError as e:
        return _state_error(e)

    return _json_response(_serialize_status(order).model_dump(mode="json"))


# =============================================================================
# Maintenance
# =============================================================================


def _is_cron_request(request: HttpRequest) -> bool:
    secret = getattr(settings, "CRON_SECRET", "")
    if not secret:
        return False
    auth = request.headers.get("Authorization", "")
    return hmac.compare_digest(auth, f"Bearer {secret}")


@csrf_exempt
@require_POST
def cleanup_drafts(request: HttpRequest) -> JsonResponse:
    """
    POST /api/orders/cleanup-drafts

    Delete unpaid drafts past the retention window. Callable by staff or by
    the scheduler with `Authorization: Bearer <CRON_SECRET>`.
    """
    if not (request.user.is_authenticated and request.user.is_staff):
        if not _is_cron_request(request):
            return _json_response({"error": "Unauthorized"}, status=401)

    result = cleanup_draft_orders()
    response = CleanupResponse(deleted=result.deleted_orders, cutoff=result.cutoff)
    return _json_response(response.model_dump(mode="json"))
