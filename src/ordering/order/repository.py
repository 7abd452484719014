"""Repository for the Order aggregate."""

from datetime import UTC, datetime

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id) -> list[Order]:
        """A customer's orders, newest first."""
        orders = self._dao.query.filter(customer_id=str(customer_id)).all().items
        epoch = datetime.min.replace(tzinfo=UTC)
        return sorted(orders, key=lambda order: order.created_at or epoch, reverse=True)
