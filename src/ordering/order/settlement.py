"""Settlement — the at-most-once record of an order's paid transition.

One settlement exists per paid order, keyed by the order id. It is written in
the same unit of work as the paid order, so a second paid transition for the
same order fails on the duplicate key even when two workers loaded the order
before either committed.
"""

from protean.fields import DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.aggregate
class Settlement:
    order_id = Identifier(identifier=True)
    transaction_id = String(required=True, max_length=255)
    status = String(required=True, max_length=50)
    payment_method = String(required=True, max_length=50)
    amount_paid = Float()
    settled_at = DateTime(required=True)

    @classmethod
    def of(cls, order) -> "Settlement":
        result = order.payment_result
        return cls(
            order_id=str(order.id),
            transaction_id=result.transaction_id,
            status=result.status,
            payment_method=order.payment_method,
            amount_paid=result.amount_paid,
            settled_at=order.paid_at,
        )
