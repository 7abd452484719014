"""Payment gateway factory.

Provides get/set/reset accessors for each gateway capability:
- Fake gateways for development and testing (the default)
- PayPal (capture) and Stripe (webhook) when PAYMENT_GATEWAY_MODE=live
"""

import os

from payments.gateway.fake_adapter import FakeCaptureGateway, FakeWebhookGateway
from payments.gateway.port import CaptureGateway, WebhookGateway

_current_capture_gateway: CaptureGateway | None = None
_current_webhook_gateway: WebhookGateway | None = None


def _live_mode() -> bool:
    return os.getenv("PAYMENT_GATEWAY_MODE", "fake").lower() == "live"


def _build_capture_gateway() -> CaptureGateway:
    if not _live_mode():
        return FakeCaptureGateway()

    from payments.gateway.paypal_adapter import SANDBOX_API_URL, PayPalCaptureGateway

    return PayPalCaptureGateway(
        client_id=os.environ["PAYPAL_CLIENT_ID"],
        app_secret=os.environ["PAYPAL_APP_SECRET"],
        api_url=os.getenv("PAYPAL_API_URL", SANDBOX_API_URL),
        timeout=float(os.getenv("PAYPAL_TIMEOUT_SECONDS", "10")),
    )


def _build_webhook_gateway() -> WebhookGateway:
    if not _live_mode():
        return FakeWebhookGateway()

    from payments.gateway.stripe_adapter import StripeWebhookGateway

    return StripeWebhookGateway(
        webhook_secret=os.environ["STRIPE_WEBHOOK_SECRET"],
        tolerance_seconds=int(os.getenv("STRIPE_WEBHOOK_TOLERANCE_SECONDS", "300")),
    )


def get_capture_gateway() -> CaptureGateway:
    """Return the current capture gateway, building it on first use."""
    global _current_capture_gateway
    if _current_capture_gateway is None:
        _current_capture_gateway = _build_capture_gateway()
    return _current_capture_gateway


def set_capture_gateway(gateway: CaptureGateway) -> None:
    """Override the active capture gateway (useful for tests)."""
    global _current_capture_gateway
    _current_capture_gateway = gateway


def get_webhook_gateway() -> WebhookGateway:
    """Return the current webhook gateway, building it on first use."""
    global _current_webhook_gateway
    if _current_webhook_gateway is None:
        _current_webhook_gateway = _build_webhook_gateway()
    return _current_webhook_gateway


def set_webhook_gateway(gateway: WebhookGateway) -> None:
    """Override the active webhook gateway (useful for tests)."""
    global _current_webhook_gateway
    _current_webhook_gateway = gateway


def reset_gateways() -> None:
    """Reset to default gateways."""
    global _current_capture_gateway, _current_webhook_gateway
    _current_capture_gateway = None
    _current_webhook_gateway = None
