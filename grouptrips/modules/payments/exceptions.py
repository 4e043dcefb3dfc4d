"""Payment gateway exceptions."""


class PaymentGatewayError(Exception):
    """Raised when the payment provider cannot be reached or rejects a call."""


class PaymentUnavailableError(PaymentGatewayError):
    """Raised when no redirect towards the payment provider can be produced."""
