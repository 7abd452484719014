"""Order delivery — command, handler and entry point."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.concurrency import get_locks, order_key
from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.payment import load_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class DeliverOrder:
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class DeliverOrderHandler:
    @handle(DeliverOrder)
    def deliver_order(self, command):
        order = load_order(command.order_id)
        first_delivery = order.deliver()
        current_domain.repository_for(Order).add(order)
        return first_delivery


def deliver_order(order_id: str) -> bool:
    """Mark a paid order delivered. Returns False when it already was."""
    with get_locks().hold(order_key(order_id)):
        first_delivery = current_domain.process(DeliverOrder(order_id=order_id), asynchronous=False)

    if first_delivery:
        logger.info("Order delivered", order_id=order_id)
    else:
        logger.info("Order delivery re-recorded", order_id=order_id)
    return first_delivery
