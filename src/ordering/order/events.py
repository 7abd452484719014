"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was turned into an order and its stock reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    cart_id = Identifier()
    payment_method = String(required=True)
    item_count = Integer(required=True)
    items_price = Float(required=True)
    shipping_price = Float(required=True)
    tax_price = Float(required=True)
    total_price = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentIntentRecorded:
    """A gateway payment intent was created for the order's total."""

    __version__ = 1

    order_id = Identifier(required=True)
    intent_id = String(required=True)
    amount = Float(required=True)


@ordering.event(part_of="Order")
class OrderPaid:
    """The order went through its one and only paid transition."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_method = String(required=True)
    transaction_id = String()
    status = String()
    amount_paid = Float()
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    """A paid order was handed to the buyer."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    delivered_at = DateTime(required=True)
