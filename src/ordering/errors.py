"""Checkout error taxonomy.

Field-level input problems are reported with Protean's ``ValidationError``.
The classes below cover the remaining categories the checkout path can hit:
missing records, state conflicts, payment provider failures, and opaque
transaction failures. Each carries a human-readable ``reason`` that is safe
to show to the buyer.
"""


class CheckoutError(Exception):
    """Base class for expected, recoverable checkout failures."""

    def __init__(self, reason: str, **context) -> None:
        super().__init__(reason)
        self.reason = reason
        self.context = context


class NotFoundError(CheckoutError):
    """A cart, order, product, or customer does not exist."""


class StateConflictError(CheckoutError):
    """The request is well-formed but the current state forbids it.

    ``remediation`` names the screen the buyer should be sent to, when there
    is one (``cart``, ``shipping-address``, ``payment-method``).
    """

    def __init__(self, reason: str, remediation: str | None = None, **context) -> None:
        super().__init__(reason, **context)
        self.remediation = remediation


class OrderAlreadyPaidError(StateConflictError):
    """The order has already gone through the paid transition."""

    def __init__(self, order_id: str) -> None:
        super().__init__("Order is already paid", order_id=order_id)
        self.order_id = order_id


class PaymentGatewayError(CheckoutError):
    """A payment provider timed out, refused, or returned unverifiable data.

    ``detail`` holds the provider's status text for the logs. It is never
    returned to the buyer.
    """

    def __init__(self, reason: str = "Payment could not be processed", detail: str | None = None, **context) -> None:
        super().__init__(reason, **context)
        self.detail = detail


class WebhookVerificationError(PaymentGatewayError):
    """An inbound provider event failed signature verification."""


class TransactionFailedError(CheckoutError):
    """A unit of work failed for an unexpected reason and was rolled back."""

    def __init__(self, reason: str = "The operation could not be completed", **context) -> None:
        super().__init__(reason, **context)
