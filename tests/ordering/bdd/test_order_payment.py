"""BDD tests for the paid and delivered transitions."""

import pytest
from ordering.errors import CheckoutError
from ordering.order.delivery import deliver_order
from ordering.order.queries import get_order
from payments.reconciliation import settle_manually
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_payment.feature")


@given(
    parsers.cfparse('a cash-on-delivery order for {quantity:d} "{name}" priced {price:f}'),
    target_fixture="order_id",
)
def _(placed_order, quantity, price):
    return placed_order(payment_method="CashOnDelivery", quantity=quantity, price=price)


@given("the order was settled")
def _(order_id):
    settle_manually(order_id, operator_id="admin-001")


@when("an operator settles the order")
def _(order_id, outcome):
    try:
        outcome["result"] = settle_manually(order_id, operator_id="admin-001")
    except CheckoutError as exc:
        outcome["exc"] = exc


@when("the order is delivered")
def _(order_id, outcome):
    try:
        outcome["result"] = deliver_order(order_id)
    except CheckoutError as exc:
        outcome["exc"] = exc


@then(parsers.cfparse('the order is paid with status "{status}"'))
def _(order_id, status):
    order = get_order(order_id)
    assert order.is_paid
    assert order.paid_at is not None
    assert order.payment_result.status == status


@then(parsers.cfparse("the amount paid is {amount:f}"))
def _(order_id, amount):
    assert get_order(order_id).payment_result.amount_paid == pytest.approx(amount)


@then(parsers.cfparse('the request is rejected with "{reason}"'))
def _(outcome, reason):
    assert outcome["exc"] is not None
    assert outcome["exc"].reason == reason


@then("the order is marked delivered")
def _(order_id, outcome):
    assert outcome["result"] is True
    order = get_order(order_id)
    assert order.is_delivered
    assert order.delivered_at is not None
