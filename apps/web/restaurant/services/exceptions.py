"""
Order service exceptions.

Views translate these to HTTP responses; services never build responses.
"""


class OrderServiceError(Exception):
    """Base exception for order lifecycle operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OrderNotFound(OrderServiceError):
    """
    Order does not exist or does not belong to the caller.

    Both cases raise the same error so callers can't probe for other
    customers' orders.
    """


class OrderStateError(OrderServiceError):
    """Operation not allowed in the order's current lifecycle state."""

    def __init__(
        self, message: str, status: str = "", payment_status: str = ""
    ) -> None:
        super().__init__(message)
        self.status = status
        self.payment_status = payment_status


class CartValidationError(OrderServiceError):
    """Cart failed a check that needs the database or the full cart."""

    def __init__(self, details: list[tuple[str, str]]) -> None:
        super().__init__("; ".join(f"{field}: {message}" for field, message in details))
        self.details = details
