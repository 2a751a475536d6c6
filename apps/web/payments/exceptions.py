"""Payment gateway exceptions."""


class PaymentGatewayError(Exception):
    """
    Request to the payment provider failed.

    status_code is None for network-level failures (timeout, DNS, refused).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class PaymentGatewayAuthError(PaymentGatewayError):
    """Provider rejected our secret key (401/403)."""


class PaymentGatewayConfigError(PaymentGatewayError):
    """Gateway is missing configuration (secret key, webhook secret)."""
