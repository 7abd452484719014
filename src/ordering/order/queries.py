"""Read-side lookups for a buyer's orders."""

from protean.utils.globals import current_domain

from ordering.errors import NotFoundError
from ordering.order.order import Order
from ordering.order.payment import load_order


def get_order(order_id: str, customer_id: str | None = None) -> Order:
    """Load an order, hiding other customers' orders when ``customer_id`` is given."""
    order = load_order(order_id)
    if customer_id is not None and str(order.customer_id) != str(customer_id):
        raise NotFoundError("Order not found", order_id=str(order_id))
    return order


def orders_for_customer(customer_id: str) -> list[Order]:
    return current_domain.repository_for(Order).for_customer(customer_id)
