"""Application tests for best-effort purchase receipts."""

from notifications.channel import get_channel
from notifications.receipts import send_receipt
from ordering.customer.profile import RegisterCustomer
from ordering.order.order import Order
from payments.reconciliation import mark_order_paid
from protean import current_domain


class TestSendReceipt:
    def test_receipt_lists_items_and_totals(self, placed_order):
        order_id = placed_order()
        order = mark_order_paid(order_id, transaction_id="txn-001", status="COMPLETED")

        message = get_channel().outbox[-1]
        assert message["to"] == "jane@example.com"
        assert message["subject"] == f"Order Confirmation {order.id}"
        assert "2 x Lamp @ $29.99" in message["body"]
        assert "Total:    $78.98" in message["body"]

    def test_falls_back_to_payer_email(self, placed_order):
        order_id = placed_order()
        current_domain.process(RegisterCustomer(user_id="user-001", name="Jane Doe", email=None), asynchronous=False)

        mark_order_paid(order_id, transaction_id="txn-001", status="COMPLETED", email_address="payer@example.com")

        assert get_channel().outbox[-1]["to"] == "payer@example.com"

    def test_no_recipient(self, placed_order):
        order_id = placed_order()
        current_domain.process(RegisterCustomer(user_id="user-001", name="Jane Doe", email=None), asynchronous=False)
        mark_order_paid(order_id, transaction_id="txn-001", status="COMPLETED")

        order = current_domain.repository_for(Order).get(order_id)
        assert send_receipt(order) is False
        assert get_channel().outbox == []


class TestReceiptFailures:
    def test_provider_error_does_not_undo_payment(self, placed_order):
        order_id = placed_order()
        get_channel().configure(raise_on_send=True)

        order = mark_order_paid(order_id, transaction_id="txn-001", status="COMPLETED")

        assert order.is_paid
        assert current_domain.repository_for(Order).get(order_id).is_paid

    def test_failed_delivery_is_reported(self, placed_order):
        order_id = placed_order()
        mark_order_paid(order_id, transaction_id="txn-001", status="COMPLETED")
        get_channel().configure(should_succeed=False)

        order = current_domain.repository_for(Order).get(order_id)
        assert send_receipt(order) is False
