"""Order lifecycle services - checkout, retry, cancellation and cleanup."""

from apps.web.restaurant.services.exceptions import (
    CartValidationError,
    OrderNotFound,
    OrderServiceError,
    OrderStateError,
)

__all__ = [
    "CartValidationError",
    "OrderNotFound",
    "OrderServiceError",
    "OrderStateError",
]
