"""Payment gateway ports (abstract interfaces).

Two styles of provider are supported, each behind its own capability:

- ``CaptureGateway`` — two-phase providers (create an intent, then capture
  and verify it once the buyer has approved). PayPal works this way.
- ``WebhookGateway`` — providers that notify us server-to-server when a
  charge succeeds. Stripe works this way.

Reconciliation code only ever talks to these ports, so a new provider is a
new adapter, not a change to the paid-transition logic.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ordering.errors import WebhookVerificationError


@dataclass(frozen=True)
class PaymentIntent:
    """A remote payment intent created for an order's total."""

    intent_id: str
    status: str | None = None


@dataclass(frozen=True)
class CaptureResult:
    """What the provider reports after capturing an intent."""

    intent_id: str
    status: str
    payer_email: str | None = None
    captured_amount: float | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == "COMPLETED"


@dataclass(frozen=True)
class WebhookCharge:
    """A verified inbound provider event, reduced to what reconciliation needs."""

    event_type: str
    charge_id: str | None
    succeeded: bool
    order_id: str | None = None
    billing_email: str | None = None
    amount_cents: int | None = None

    @property
    def amount(self) -> float | None:
        if self.amount_cents is None:
            return None
        return self.amount_cents / 100


class CaptureGateway(ABC):
    """Two-phase capture provider."""

    @abstractmethod
    def create_intent(self, amount: float, reference: str) -> PaymentIntent:
        """Create a remote intent for ``amount``, tagged with our ``reference``."""
        ...

    @abstractmethod
    def capture_and_verify(self, intent_id: str) -> CaptureResult:
        """Capture a previously approved intent and report its outcome."""
        ...


class WebhookGateway(ABC):
    """Provider that pushes signed payment events to us."""

    @abstractmethod
    def verify_webhook(self, payload: str, signature: str) -> bool:
        """Return True only if ``payload`` was signed by the provider."""
        ...

    @abstractmethod
    def parse_event(self, payload: str) -> WebhookCharge:
        """Extract the charge details from a verified payload."""
        ...

    def verify_and_parse(self, payload: str, signature: str) -> WebhookCharge:
        if not signature or not self.verify_webhook(payload, signature):
            raise WebhookVerificationError(detail="Webhook signature verification failed")
        return self.parse_event(payload)
