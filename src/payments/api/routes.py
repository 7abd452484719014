"""FastAPI routes for payments — gateway capture, provider webhooks, and fake gateway controls."""

import os

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ordering.api.errors import failure
from ordering.api.identity import RequestIdentity, signed_in_user
from ordering.errors import CheckoutError
from ordering.order.queries import get_order
from payments.api.schemas import (
    CaptureRequest,
    CaptureResponse,
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    PaymentIntentResponse,
    WebhookResponse,
)
from payments.gateway import get_capture_gateway
from payments.gateway.fake_adapter import FakeCaptureGateway
from payments.reconciliation import confirm_capture, handle_webhook, initiate_capture

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/orders/{order_id}/intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    order_id: str,
    identity: RequestIdentity = Depends(signed_in_user),
) -> PaymentIntentResponse:
    """Create the gateway intent the buyer approves in the provider's popup."""
    get_order(order_id, customer_id=identity.user_id)
    intent_id = initiate_capture(order_id)
    return PaymentIntentResponse(order_id=order_id, intent_id=intent_id)


@payment_router.post("/orders/{order_id}/capture", response_model=CaptureResponse)
async def capture_payment(
    order_id: str,
    body: CaptureRequest,
    identity: RequestIdentity = Depends(signed_in_user),
) -> CaptureResponse:
    """Capture an approved intent and mark the order paid."""
    get_order(order_id, customer_id=identity.user_id)
    confirm_capture(order_id, body.intent_id)
    return CaptureResponse(message="Your order has been paid", order_id=order_id)


@payment_router.post("/webhook", response_model=WebhookResponse)
async def receive_webhook(request: Request, stripe_signature: str = Header(default="")):
    """Provider webhook endpoint.

    Any rejection is answered with 400 so the provider redelivers the event.
    A redelivery for an order that is already paid is acknowledged.
    """
    payload = (await request.body()).decode("utf-8")
    try:
        outcome = handle_webhook(payload, stripe_signature)
    except CheckoutError as exc:
        return failure(400, "Webhook rejected", reason=exc.reason)

    return WebhookResponse(outcome=outcome.value)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the fake capture gateway (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows toggling success/failure behavior for manual API testing.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_capture_gateway()
    if not isinstance(gateway, FakeCaptureGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for the fake gateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        capture_status=body.capture_status,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
        capture_status=gateway.capture_status,
    )
