"""Order payment — commands and handler.

All three payment paths end in ``MarkOrderPaid`` (or ``SettleOrderManually``,
which is the same transition for cash-on-delivery orders). The handler
re-reads the order inside the unit of work and writes its ``Settlement`` next
to it, so the already-paid guard and the write commit together and a second
paid transition fails on the settlement key even across processes.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import NotFoundError, OrderAlreadyPaidError, PaymentGatewayError
from ordering.order.order import Order
from ordering.order.settlement import Settlement


@ordering.command(part_of="Order")
class RecordPaymentIntent:
    order_id = Identifier(required=True)
    intent_id = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=255)
    status = String(required=True, max_length=50)
    email_address = String(max_length=255)
    amount_paid = Float()
    expected_intent_id = String(max_length=255)  # Set by the capture path only


@ordering.command(part_of="Order")
class SettleOrderManually:
    order_id = Identifier(required=True)
    operator_id = Identifier(required=True)


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFoundError("Order not found", order_id=str(order_id))


def _commit_paid(order: Order) -> None:
    settlements = current_domain.repository_for(Settlement)
    if settlements._dao.query.filter(order_id=str(order.id)).all().items:
        raise OrderAlreadyPaidError(str(order.id))
    settlements.add(Settlement.of(order))
    current_domain.repository_for(Order).add(order)


@ordering.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(RecordPaymentIntent)
    def record_payment_intent(self, command):
        order = load_order(command.order_id)
        order.record_payment_intent(command.intent_id)
        current_domain.repository_for(Order).add(order)

    @handle(MarkOrderPaid)
    def mark_order_paid(self, command):
        order = load_order(command.order_id)
        if command.expected_intent_id and order.pending_intent_id != command.expected_intent_id:
            if not order.is_paid:
                raise PaymentGatewayError(
                    detail="Payment intent changed during capture",
                    order_id=str(order.id),
                )

        order.mark_paid(
            transaction_id=command.transaction_id,
            status=command.status,
            email_address=command.email_address,
            amount_paid=command.amount_paid,
        )
        _commit_paid(order)

    @handle(SettleOrderManually)
    def settle_order_manually(self, command):
        order = load_order(command.order_id)
        order.settle_cash_on_delivery(command.operator_id)
        _commit_paid(order)
