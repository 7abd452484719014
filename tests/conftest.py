import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from ordering.domain import ordering

    ordering.init()
    ordering.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from notifications.channel import reset_channels
    from ordering.concurrency import reset_locks
    from payments.gateway import reset_gateways
    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_gateways()
    reset_channels()
    reset_locks()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Persist a product and return it."""
    from ordering.product.product import Product
    from protean import current_domain

    def _make(name="Widget", price=10.0, stock=10, slug=None, image=None):
        product = Product.create(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            price=price,
            stock=stock,
            image=image or f"/images/{name.lower().replace(' ', '-')}.jpg",
        )
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def ready_customer():
    """A customer with an email, a saved address and a chosen payment method."""
    from ordering.customer.profile import RegisterCustomer, SaveShippingAddress, SelectPaymentMethod
    from protean import current_domain

    def _ready(user_id="user-001", payment_method="PayPal", email="jane@example.com"):
        current_domain.process(RegisterCustomer(user_id=user_id, name="Jane Doe", email=email), asynchronous=False)
        current_domain.process(
            SaveShippingAddress(
                user_id=user_id,
                full_name="Jane Doe",
                street_address="1 Market St",
                city="Springfield",
                postal_code="12345",
                country="US",
            ),
            asynchronous=False,
        )
        current_domain.process(
            SelectPaymentMethod(user_id=user_id, payment_method=payment_method),
            asynchronous=False,
        )
        return user_id

    return _ready


@pytest.fixture()
def placed_order(make_product, ready_customer):
    """Place an order for two units of a 29.99 product and return its id."""
    from ordering.cart.store import CartIdentity, add_item
    from ordering.order.placement import place_order

    def _place(user_id="user-001", payment_method="PayPal", quantity=2, price=29.99, stock=10):
        ready_customer(user_id=user_id, payment_method=payment_method)
        product = make_product(name="Lamp", price=price, stock=stock)
        add_item(CartIdentity(user_id=user_id), product.id, quantity)
        return place_order(user_id)

    return _place
