"""Stripe webhook adapter.

Stripe signs every webhook delivery with the endpoint's signing secret and
sends it in the ``Stripe-Signature`` header. Verification, including the
replay tolerance window, is done by the Stripe SDK.

Only ``charge.succeeded`` moves an order to paid; every other event type is
parsed and reported as not succeeded.
"""

import json

import stripe
import structlog

from ordering.errors import PaymentGatewayError, WebhookVerificationError
from payments.gateway.port import WebhookCharge, WebhookGateway

logger = structlog.get_logger(__name__)

SUCCESS_EVENT = "charge.succeeded"
DEFAULT_TOLERANCE_SECONDS = stripe.Webhook.DEFAULT_TOLERANCE


def build_signature_header(secret: str, payload: str, timestamp: int | None = None) -> str:
    """Produce a header the way Stripe does. Used by tests and local tooling."""
    return stripe.WebhookSignature.generate_signature_header(payload, secret, timestamp=timestamp)


def parse_charge_event(payload: str) -> WebhookCharge:
    """Read a Stripe-shaped event body into a ``WebhookCharge``."""
    try:
        event = json.loads(payload)
        charge = event["data"]["object"]
        event_type = event["type"]
    except (ValueError, KeyError, TypeError) as exc:
        raise PaymentGatewayError(detail=f"Malformed webhook payload: {exc}") from exc

    metadata = charge.get("metadata") or {}
    billing = charge.get("billing_details") or {}
    return WebhookCharge(
        event_type=event_type,
        charge_id=charge.get("id"),
        succeeded=event_type == SUCCESS_EVENT and charge.get("status", "succeeded") == "succeeded",
        order_id=metadata.get("orderId") or metadata.get("order_id"),
        billing_email=billing.get("email"),
        amount_cents=charge.get("amount"),
    )


class StripeWebhookGateway(WebhookGateway):
    """Verifies and parses Stripe webhook deliveries."""

    def __init__(self, webhook_secret: str, tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS) -> None:
        if not webhook_secret:
            raise ValueError("A Stripe webhook signing secret is required")
        self.webhook_secret = webhook_secret
        self.tolerance_seconds = tolerance_seconds

    def verify_webhook(self, payload: str, signature: str) -> bool:
        try:
            return stripe.WebhookSignature.verify_header(
                payload, signature, self.webhook_secret, tolerance=self.tolerance_seconds
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("Stripe signature rejected", reason=str(exc))
            return False

    def verify_and_parse(self, payload: str, signature: str) -> WebhookCharge:
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret, tolerance=self.tolerance_seconds)
        except stripe.SignatureVerificationError as exc:
            logger.warning("Stripe signature rejected", reason=str(exc))
            raise WebhookVerificationError(detail=str(exc)) from exc
        except ValueError as exc:
            raise PaymentGatewayError(detail=f"Malformed webhook payload: {exc}") from exc
        return self.parse_event(payload)

    def parse_event(self, payload: str) -> WebhookCharge:
        return parse_charge_event(payload)
