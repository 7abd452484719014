"""Shared BDD fixtures and step definitions for checkout scenarios."""

import pytest
from ordering.cart.store import CartIdentity, add_item, resolve_cart
from ordering.errors import CheckoutError
from ordering.order.placement import place_order
from ordering.product.product import Product
from protean import current_domain
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def products():
    """Products created by Given steps, keyed by name."""
    return {}


@pytest.fixture()
def outcome():
    """Container for the result or error of the last When step."""
    return {"result": None, "exc": None}


def _reload(product):
    return current_domain.repository_for(Product).get(product.id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a customer ready to check out paying with "{method}"'),
    target_fixture="customer_id",
)
def _(ready_customer, method):
    return ready_customer(payment_method=method)


@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(make_product, products, name, price, stock):
    products[name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the customer has {quantity:d} "{name}" in the cart'))
def _(customer_id, products, quantity, name):
    add_item(CartIdentity(user_id=customer_id), products[name].id, quantity)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer places the order")
def _(customer_id, outcome):
    try:
        outcome["result"] = place_order(customer_id)
    except CheckoutError as exc:
        outcome["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the stock of "{name}" is {stock:d}'))
def _(products, name, stock):
    assert _reload(products[name]).stock == stock


@then("the customer's cart is empty")
def _(customer_id):
    assert resolve_cart(CartIdentity(user_id=customer_id)).is_empty


@then(parsers.cfparse('the customer\'s cart holds {quantity:d} "{name}"'))
def _(customer_id, products, quantity, name):
    cart = resolve_cart(CartIdentity(user_id=customer_id))
    assert cart.quantity_of(products[name].id) == quantity
