"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class PricesSchema(BaseModel):
    items_price: float
    shipping_price: float
    tax_price: float
    total_price: float


class LineSchema(BaseModel):
    product_id: str
    name: str
    slug: str
    image: str | None = None
    price: float
    quantity: int


class AddressSchema(BaseModel):
    full_name: str = Field(min_length=1)
    street_address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "full_name": "Jane Doe",
                    "street_address": "1 Market St",
                    "city": "Springfield",
                    "postal_code": "12345",
                    "country": "US",
                }
            ]
        }
    }


class PaymentResultSchema(BaseModel):
    transaction_id: str | None = None
    status: str | None = None
    email_address: str | None = None
    amount_paid: float | None = None


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)

    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod-001", "quantity": 2}]}}


class MergeGuestCartRequest(BaseModel):
    session_cart_id: str


class CartResponse(PricesSchema):
    cart_id: str | None = None
    items: list[LineSchema] = []


# ---------------------------------------------------------------------------
# Customer Schemas
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    name: str | None = None
    email: str | None = None


class SelectPaymentMethodRequest(BaseModel):
    payment_method: str

    model_config = {"json_schema_extra": {"examples": [{"payment_method": "PayPal"}]}}


# ---------------------------------------------------------------------------
# Order Schemas
# ---------------------------------------------------------------------------
class OrderResponse(PricesSchema):
    order_id: str
    customer_id: str
    payment_method: str
    shipping_address: AddressSchema | None = None
    items: list[LineSchema] = []
    is_paid: bool
    paid_at: datetime | None = None
    payment_result: PaymentResultSchema | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    created_at: datetime | None = None


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
