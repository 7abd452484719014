"""Application tests for the provider webhook path."""

import json

import pytest
from ordering.errors import NotFoundError, PaymentGatewayError, WebhookVerificationError
from ordering.order.order import Order
from payments.gateway.fake_adapter import TEST_SIGNATURE
from payments.reconciliation import WebhookOutcome, handle_webhook
from protean import current_domain


def _event(order_id, event_type="charge.succeeded", charge_id="ch_001", amount=7898):
    return json.dumps(
        {
            "type": event_type,
            "data": {
                "object": {
                    "id": charge_id,
                    "amount": amount,
                    "status": "succeeded",
                    "metadata": {"orderId": order_id},
                    "billing_details": {"email": "payer@example.com"},
                }
            },
        }
    )


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestHandleWebhook:
    def test_charge_succeeded_marks_paid(self, placed_order):
        order_id = placed_order(payment_method="Stripe")

        outcome = handle_webhook(_event(order_id), TEST_SIGNATURE)

        assert outcome == WebhookOutcome.PAID
        order = _order(order_id)
        assert order.is_paid
        assert order.payment_result.transaction_id == "ch_001"
        assert order.payment_result.email_address == "payer@example.com"
        assert order.payment_result.amount_paid == 78.98

    def test_redelivery_is_absorbed(self, placed_order):
        order_id = placed_order(payment_method="Stripe")
        handle_webhook(_event(order_id), TEST_SIGNATURE)
        paid_at = _order(order_id).paid_at

        outcome = handle_webhook(_event(order_id), TEST_SIGNATURE)

        assert outcome == WebhookOutcome.DUPLICATE
        assert _order(order_id).paid_at == paid_at

    def test_unsigned_event_is_rejected(self, placed_order):
        order_id = placed_order(payment_method="Stripe")
        with pytest.raises(WebhookVerificationError):
            handle_webhook(_event(order_id), "forged")
        assert not _order(order_id).is_paid

    def test_missing_signature_is_rejected(self, placed_order):
        order_id = placed_order(payment_method="Stripe")
        with pytest.raises(WebhookVerificationError):
            handle_webhook(_event(order_id), "")

    def test_other_event_types_are_ignored(self, placed_order):
        order_id = placed_order(payment_method="Stripe")
        outcome = handle_webhook(_event(order_id, event_type="charge.refunded"), TEST_SIGNATURE)
        assert outcome == WebhookOutcome.IGNORED
        assert not _order(order_id).is_paid

    def test_malformed_payload(self):
        with pytest.raises(PaymentGatewayError):
            handle_webhook("not json", TEST_SIGNATURE)

    def test_missing_order_id(self):
        with pytest.raises(PaymentGatewayError):
            handle_webhook(_event(None), TEST_SIGNATURE)

    def test_unknown_order(self):
        with pytest.raises(NotFoundError):
            handle_webhook(_event("ord-missing"), TEST_SIGNATURE)
