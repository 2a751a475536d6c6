"""
Pydantic schemas for the ordering API.

These schemas define the public API contract for menu, checkout and order data.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Menu
# =============================================================================


class MenuItemSchema(BaseModel):
    """A menu item as shown to customers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    price: Decimal
    image_url: str
    is_available: bool


class MenuCategorySchema(BaseModel):
    """A category with its items."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    items: list[MenuItemSchema] = Field(default_factory=list)


class MenuListResponse(BaseModel):
    """Response for GET /api/menu."""

    categories: list[MenuCategorySchema]


# =============================================================================
# Checkout
# =============================================================================


class CustomerSchema(BaseModel):
    """Customer contact information for an order."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r"^[^@]+@[^@]+\.[^@]+$")
    phone: str = Field(default="", max_length=20)


class CartLineSchema(BaseModel):
    """
    A single cart line.

    `price` is the unit price the customer saw when the cart was built; it is
    stored as-is on the order line. menu_item_id is null for custom items.
    """

    menu_item_id: int | None = None
    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., ge=1, le=99)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    customization: dict[str, Any] = Field(default_factory=dict)
    special_instructions: str = Field(default="", max_length=500)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CheckoutRequest(BaseModel):
    """Request body for POST /api/checkout."""

    customer: CustomerSchema
    order_type: Literal["pickup", "delivery"] = "pickup"
    delivery_address: str = Field(default="", max_length=500)
    special_instructions: str = Field(default="", max_length=1000)
    items: list[CartLineSchema] = Field(..., min_length=1)
    total: Decimal | None = Field(
        default=None,
        ge=0,
        description="Client-side cart total, checked against the lines",
    )

    @model_validator(mode="after")
    def _delivery_needs_address(self) -> "CheckoutRequest":
        if self.order_type == "delivery" and not self.delivery_address.strip():
            raise ValueError("delivery_address is required for delivery orders")
        return self


class CheckoutResponse(BaseModel):
    """Response for POST /api/checkout and POST /api/orders/{id}/retry-checkout."""

    order_id: UUID
    order_number: str
    checkout_id: str
    redirect_url: str
    total: Decimal
    success_url: str
    cancel_url: str
    failure_url: str


# =============================================================================
# Orders
# =============================================================================


class OrderItemResponseSchema(BaseModel):
    """A line item in an order response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    menu_item_id: int | None
    item_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    customization: dict[str, Any]
    special_instructions: str


class OrderDetailResponse(BaseModel):
    """Response for GET /api/orders/{order_id}."""

    order_id: UUID
    order_number: str
    status: str
    payment_status: str
    customer: CustomerSchema
    items: list[OrderItemResponseSchema]
    order_type: str
    delivery_address: str
    special_instructions: str
    total: Decimal
    created_at: datetime
    paid_at: datetime | None
    confirmed_at: datetime | None
    estimated_ready_time: datetime | None


class OrderStatusResponse(BaseModel):
    """Response for GET /api/orders/{order_id}/status."""

    order_id: UUID
    order_number: str
    status: str
    payment_status: str
    updated_at: datetime
    estimated_ready_time: datetime | None


class RetryCartLineSchema(BaseModel):
    """A cart line rebuilt from a draft order."""

    menu_item_id: int | None
    name: str
    description: str
    quantity: int
    price: Decimal
    customization: dict[str, Any]
    special_instructions: str


class RetryCartResponse(BaseModel):
    """Response for GET /api/orders/{order_id}/retry."""

    order_id: UUID
    order_number: str
    customer: CustomerSchema
    order_type: str
    delivery_address: str
    special_instructions: str
    items: list[RetryCartLineSchema]
    total: Decimal


class CleanupResponse(BaseModel):
    """Response for POST /api/orders/cleanup-drafts."""

    deleted: int
    cutoff: datetime


# =============================================================================
# Errors
# =============================================================================


class ValidationErrorDetail(BaseModel):
    """A single validation error."""

    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Response for validation errors."""

    error: Literal["validation_error"]
    details: list[ValidationErrorDetail]
