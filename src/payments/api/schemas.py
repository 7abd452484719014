"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from pydantic import BaseModel


class PaymentIntentResponse(BaseModel):
    order_id: str
    intent_id: str


class CaptureRequest(BaseModel):
    intent_id: str

    model_config = {"json_schema_extra": {"examples": [{"intent_id": "5O190127TN364715T"}]}}


class CaptureResponse(BaseModel):
    success: bool = True
    message: str
    order_id: str


class WebhookResponse(BaseModel):
    received: bool = True
    outcome: str


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Payment declined"
    capture_status: str = "COMPLETED"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
    capture_status: str
