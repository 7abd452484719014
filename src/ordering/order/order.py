"""Order aggregate — a placed, priced purchase and its payment and delivery state.

Everything copied from the cart at placement time (lines, unit prices, the
four totals, the shipping address, the payment method) is frozen for the
life of the order. Only two groups of fields change afterwards:

    Unpaid ──mark_paid──▶ Paid ──deliver──▶ Delivered

``mark_paid`` fires at most once per order, whichever payment path triggers
it. ``deliver`` requires a paid order and may be repeated.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from ordering.customer.customer import PaymentMethod
from ordering.domain import ordering
from ordering.errors import OrderAlreadyPaidError, StateConflictError
from ordering.order.events import OrderDelivered, OrderPaid, OrderPlaced, PaymentIntentRecorded

PENDING = "PENDING"
COMPLETED = "COMPLETED"
MANUALLY_SETTLED = "MANUALLY_SETTLED"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships. Later edits to the customer's saved address do not reach it."""

    full_name = String(required=True, max_length=255)
    street_address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@ordering.value_object(part_of="Order")
class PaymentResult:
    """How the order was (or is about to be) paid.

    A pending result holds only the gateway's intent id. The paid transition
    replaces it with the captured transaction.
    """

    transaction_id = String(max_length=255)
    status = String(max_length=50)
    email_address = String(max_length=255)
    amount_paid = Float()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    image = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(required=True, choices=PaymentMethod, max_length=50)
    items = HasMany(OrderItem)
    items_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    total_price = Float(default=0.0)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    payment_result = ValueObject(PaymentResult)
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    created_at = DateTime()

    @invariant.post
    def paid_at_is_set_exactly_when_paid(self):
        if bool(self.is_paid) != (self.paid_at is not None):
            raise ValidationError({"paid_at": ["paid_at must be set if and only if the order is paid"]})

    @invariant.post
    def delivered_orders_must_be_paid(self):
        if self.is_delivered and not self.is_paid:
            raise ValidationError({"is_delivered": ["An order cannot be delivered before it is paid"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, cart, address, payment_method):
        """Snapshot a cart into a new order.

        Lines and prices are copied from the cart as they are, never
        re-derived from current product prices.
        """
        now = datetime.now(UTC)
        prices = cart.prices
        order = cls(
            customer_id=customer_id,
            shipping_address=ShippingAddress(
                full_name=address.full_name,
                street_address=address.street_address,
                city=address.city,
                postal_code=address.postal_code,
                country=address.country,
            ),
            payment_method=payment_method,
            created_at=now,
            **prices.as_floats(),
        )
        for line in cart.lines:
            order.add_items(
                OrderItem(
                    product_id=line.product_id,
                    name=line.name,
                    slug=line.slug,
                    image=line.image,
                    price=line.price,
                    quantity=line.quantity,
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                cart_id=str(cart.id),
                payment_method=payment_method,
                item_count=sum(line.quantity for line in cart.lines),
                items_price=order.items_price,
                shipping_price=order.shipping_price,
                tax_price=order.tax_price,
                total_price=order.total_price,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_cash_on_delivery(self) -> bool:
        return self.payment_method == PaymentMethod.CASH_ON_DELIVERY.value

    @property
    def pending_intent_id(self) -> str | None:
        """The gateway intent recorded for this order, while it is still unpaid."""
        if self.is_paid or self.payment_result is None:
            return None
        return self.payment_result.transaction_id

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def _assert_unpaid(self):
        if self.is_paid:
            raise OrderAlreadyPaidError(str(self.id))

    def record_payment_intent(self, intent_id):
        self._assert_unpaid()
        self.payment_result = PaymentResult(transaction_id=intent_id, status=PENDING)
        self.raise_(
            PaymentIntentRecorded(
                order_id=str(self.id),
                intent_id=intent_id,
                amount=self.total_price,
            )
        )

    def mark_paid(self, transaction_id, status, email_address=None, amount_paid=None):
        """The paid transition. Raises ``OrderAlreadyPaidError`` on any second attempt."""
        self._assert_unpaid()

        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_paid = True
            self.paid_at = now
            self.payment_result = PaymentResult(
                transaction_id=transaction_id,
                status=status,
                email_address=email_address,
                amount_paid=amount_paid,
            )

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                payment_method=self.payment_method,
                transaction_id=transaction_id,
                status=status,
                amount_paid=amount_paid,
                paid_at=now,
            )
        )

    def settle_cash_on_delivery(self, operator_id):
        """Record cash collected by an operator against a cash-on-delivery order."""
        self._assert_unpaid()
        if not self.is_cash_on_delivery:
            raise StateConflictError(
                "Only cash-on-delivery orders can be settled manually",
                order_id=str(self.id),
                payment_method=self.payment_method,
            )

        self.mark_paid(
            transaction_id=f"manual:{operator_id}",
            status=MANUALLY_SETTLED,
            amount_paid=self.total_price,
        )

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def deliver(self) -> bool:
        """Mark the order delivered. Returns True only on the first delivery."""
        if not self.is_paid:
            raise StateConflictError("Order is not paid", order_id=str(self.id))

        first_delivery = not self.is_delivered
        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_delivered = True
            self.delivered_at = now

        if first_delivery:
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    customer_id=str(self.customer_id),
                    delivered_at=now,
                )
            )
        return first_delivery
