"""Tests for the Order aggregate's payment and delivery transitions."""

import pytest
from ordering.cart.cart import Cart
from ordering.customer.customer import SavedAddress
from ordering.errors import OrderAlreadyPaidError, StateConflictError
from ordering.order.events import OrderDelivered, OrderPaid, OrderPlaced
from ordering.order.order import MANUALLY_SETTLED, PENDING, Order
from ordering.product.product import Product


def _address():
    return SavedAddress(
        full_name="Jane Doe",
        street_address="1 Market St",
        city="Springfield",
        postal_code="12345",
        country="US",
    )


def _cart():
    cart = Cart.create(customer_id="user-001")
    cart.add_item(Product.create(name="Lamp", slug="lamp", price=29.99, stock=5), 2)
    return cart


def _order(payment_method="PayPal"):
    return Order.place(customer_id="user-001", cart=_cart(), address=_address(), payment_method=payment_method)


class TestPlace:
    def test_snapshots_cart(self):
        order = _order()
        assert order.items_price == 59.98
        assert order.shipping_price == 10.0
        assert order.tax_price == 9.0
        assert order.total_price == 78.98
        assert len(order.items) == 1
        assert order.items[0].quantity == 2
        assert order.items[0].price == 29.99

    def test_snapshots_address(self):
        order = _order()
        assert order.shipping_address.full_name == "Jane Doe"
        assert order.shipping_address.country == "US"

    def test_starts_unpaid_and_undelivered(self):
        order = _order()
        assert not order.is_paid
        assert order.paid_at is None
        assert not order.is_delivered

    def test_raises_event(self):
        order = _order()
        event = [e for e in order._events if isinstance(e, OrderPlaced)][0]
        assert event.item_count == 2
        assert event.total_price == 78.98


class TestPaymentIntent:
    def test_records_pending_result(self):
        order = _order()
        order.record_payment_intent("intent-001")
        assert order.payment_result.transaction_id == "intent-001"
        assert order.payment_result.status == PENDING
        assert order.pending_intent_id == "intent-001"
        assert not order.is_paid


class TestMarkPaid:
    def test_sets_paid_fields_together(self):
        order = _order()
        order.mark_paid("txn-001", "COMPLETED", email_address="payer@example.com", amount_paid=78.98)
        assert order.is_paid
        assert order.paid_at is not None
        assert order.payment_result.transaction_id == "txn-001"
        assert order.payment_result.amount_paid == 78.98
        assert order.pending_intent_id is None

    def test_second_attempt_is_rejected(self):
        order = _order()
        order.mark_paid("txn-001", "COMPLETED")
        paid_at = order.paid_at

        with pytest.raises(OrderAlreadyPaidError):
            order.mark_paid("txn-002", "COMPLETED")

        assert order.paid_at == paid_at
        assert order.payment_result.transaction_id == "txn-001"

    def test_intent_cannot_be_recorded_once_paid(self):
        order = _order()
        order.mark_paid("txn-001", "COMPLETED")
        with pytest.raises(OrderAlreadyPaidError):
            order.record_payment_intent("intent-002")

    def test_raises_event(self):
        order = _order()
        order.mark_paid("txn-001", "COMPLETED")
        events = [e for e in order._events if isinstance(e, OrderPaid)]
        assert len(events) == 1
        assert events[0].transaction_id == "txn-001"


class TestCashOnDelivery:
    def test_settles_with_synthetic_result(self):
        order = _order(payment_method="CashOnDelivery")
        order.settle_cash_on_delivery("admin-001")
        assert order.is_paid
        assert order.payment_result.status == MANUALLY_SETTLED
        assert order.payment_result.amount_paid == 78.98

    def test_gateway_orders_cannot_be_settled_manually(self):
        order = _order(payment_method="Stripe")
        with pytest.raises(StateConflictError):
            order.settle_cash_on_delivery("admin-001")
        assert not order.is_paid

    def test_already_paid_wins_over_method_check(self):
        order = _order(payment_method="PayPal")
        order.mark_paid("txn-001", "COMPLETED")
        with pytest.raises(OrderAlreadyPaidError):
            order.settle_cash_on_delivery("admin-001")


class TestDeliver:
    def test_unpaid_order_cannot_be_delivered(self):
        order = _order()
        with pytest.raises(StateConflictError):
            order.deliver()
        assert not order.is_delivered
        assert order.delivered_at is None

    def test_deliver_paid_order(self):
        order = _order()
        order.mark_paid("txn-001", "COMPLETED")
        assert order.deliver() is True
        assert order.is_delivered
        assert order.delivered_at is not None

    def test_repeat_delivery_raises_event_once(self):
        order = _order()
        order.mark_paid("txn-001", "COMPLETED")
        order.deliver()
        assert order.deliver() is False
        events = [e for e in order._events if isinstance(e, OrderDelivered)]
        assert len(events) == 1
