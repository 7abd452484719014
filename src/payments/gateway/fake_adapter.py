"""Configurable fake payment gateways for development and testing.

These adapters simulate the providers without any external calls. They can
be configured at runtime to succeed or fail, making them useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials

The fake webhook gateway accepts the literal signature ``test-signature``
and reads Stripe-shaped event bodies.
"""

from uuid import uuid4

from ordering.errors import PaymentGatewayError
from payments.gateway.port import CaptureGateway, CaptureResult, PaymentIntent, WebhookCharge, WebhookGateway
from payments.gateway.stripe_adapter import parse_charge_event

TEST_SIGNATURE = "test-signature"


class FakeCaptureGateway(CaptureGateway):
    """Configurable fake two-phase gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined"
        self.capture_status: str = "COMPLETED"
        self.payer_email: str = "buyer@example.com"
        self.intents: dict[str, float] = {}
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Payment declined",
        capture_status: str = "COMPLETED",
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.capture_status = capture_status

    def create_intent(self, amount: float, reference: str) -> PaymentIntent:
        self.calls.append({"method": "create_intent", "amount": amount, "reference": reference})

        if not self.should_succeed:
            raise PaymentGatewayError(detail=self.failure_reason)

        intent_id = f"fake_intent_{uuid4().hex[:12]}"
        self.intents[intent_id] = amount
        return PaymentIntent(intent_id=intent_id, status="CREATED")

    def capture_and_verify(self, intent_id: str) -> CaptureResult:
        self.calls.append({"method": "capture_and_verify", "intent_id": intent_id})

        if not self.should_succeed:
            raise PaymentGatewayError(detail=self.failure_reason)

        return CaptureResult(
            intent_id=intent_id,
            status=self.capture_status,
            payer_email=self.payer_email,
            captured_amount=self.intents.get(intent_id),
        )


class FakeWebhookGateway(WebhookGateway):
    """Fake webhook provider that trusts only ``test-signature``."""

    def __init__(self) -> None:
        self.calls: list[dict] = []

    def verify_webhook(self, payload: str, signature: str) -> bool:  # noqa: ARG002
        self.calls.append({"method": "verify_webhook", "signature": signature})
        return signature == TEST_SIGNATURE

    def parse_event(self, payload: str) -> WebhookCharge:
        return parse_charge_event(payload)
