"""Integration tests for the provider webhook endpoint."""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_error_handlers
from ordering.order.order import Order
from payments.api.routes import payment_router
from payments.gateway import set_webhook_gateway
from payments.gateway.stripe_adapter import StripeWebhookGateway, build_signature_header
from protean import current_domain


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(payment_router)
    register_error_handlers(app)
    return TestClient(app)


def _payload(order_id, event_type="charge.succeeded"):
    return json.dumps(
        {
            "type": event_type,
            "data": {
                "object": {
                    "id": "ch_001",
                    "amount": 7898,
                    "metadata": {"orderId": order_id},
                    "billing_details": {"email": "payer@example.com"},
                }
            },
        }
    )


def _post(client, payload, signature="test-signature"):
    return client.post(
        "/payments/webhook",
        content=payload,
        headers={"Content-Type": "application/json", "Stripe-Signature": signature},
    )


class TestWebhookEndpoint:
    def test_paid(self, client, placed_order):
        order_id = placed_order(payment_method="Stripe")
        response = _post(client, _payload(order_id))
        assert response.status_code == 200
        assert response.json()["outcome"] == "paid"
        assert current_domain.repository_for(Order).get(order_id).is_paid

    def test_redelivery_is_acknowledged(self, client, placed_order):
        order_id = placed_order(payment_method="Stripe")
        _post(client, _payload(order_id))
        response = _post(client, _payload(order_id))
        assert response.status_code == 200
        assert response.json()["outcome"] == "duplicate"

    def test_bad_signature_is_400(self, client, placed_order):
        order_id = placed_order(payment_method="Stripe")
        response = _post(client, _payload(order_id), signature="forged")
        assert response.status_code == 400
        assert not current_domain.repository_for(Order).get(order_id).is_paid

    def test_processing_failure_is_400(self, client):
        response = _post(client, _payload("ord-missing"))
        assert response.status_code == 400

    def test_ignored_event(self, client, placed_order):
        order_id = placed_order(payment_method="Stripe")
        response = _post(client, _payload(order_id, event_type="payment_intent.created"))
        assert response.status_code == 200
        assert response.json()["outcome"] == "ignored"


class TestStripeSignedWebhook:
    def test_signed_delivery(self, client, placed_order):
        set_webhook_gateway(StripeWebhookGateway(webhook_secret="whsec_test"))
        order_id = placed_order(payment_method="Stripe")
        payload = _payload(order_id)

        response = _post(client, payload, signature=build_signature_header("whsec_test", payload))

        assert response.status_code == 200
        assert response.json()["outcome"] == "paid"

    def test_tampered_body_is_rejected(self, client, placed_order):
        set_webhook_gateway(StripeWebhookGateway(webhook_secret="whsec_test"))
        order_id = placed_order(payment_method="Stripe")
        signature = build_signature_header("whsec_test", _payload(order_id))

        response = _post(client, _payload("ord-other"), signature=signature)

        assert response.status_code == 400
