"""Cart aggregate — the buyer's pre-order collection of product lines.

A cart belongs either to a signed-in customer or to an anonymous session
cart id, never both. Lines carry a snapshot of the product's display data and
price taken when the product was first added. The four price fields are
recomputed from the lines after every change, so they are never stale.

Carts are created lazily on the first add, handed over to the customer at
sign-in, and emptied (not deleted) when an order is assembled from them.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from ordering.cart.events import CartClaimed, CartEmptied, CartItemAdded, CartItemRemoved
from ordering.domain import ordering
from ordering.errors import NotFoundError, StateConflictError
from ordering.pricing import CartPrices, calculate_prices, round2


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    image = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class Cart:
    customer_id = Identifier()  # Set for signed-in customers
    session_cart_id = String(max_length=255)  # Set for guest carts
    items = HasMany(CartItem)
    items_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    total_price = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_exactly_one_owner(self):
        if bool(self.customer_id) == bool(self.session_cart_id):
            raise ValidationError({"owner": ["A cart belongs to either a customer or a guest session"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id=None, session_cart_id=None):
        """Start an empty cart. A customer id takes precedence over a session id."""
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_cart_id=None if customer_id else session_cart_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def lines(self) -> list[CartItem]:
        """Lines in the order they were first added."""
        epoch = datetime.min.replace(tzinfo=UTC)
        return sorted(self.items, key=lambda item: item.added_at or epoch)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def prices(self) -> CartPrices:
        return CartPrices(
            items=round2(self.items_price or 0),
            shipping=round2(self.shipping_price or 0),
            tax=round2(self.tax_price or 0),
            total=round2(self.total_price or 0),
        )

    def line_for(self, product_id) -> CartItem | None:
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def quantity_of(self, product_id) -> int:
        line = self.line_for(product_id)
        return line.quantity if line else 0

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Put ``quantity`` units of ``product`` in the cart.

        Stock is checked against what this cart already holds plus the new
        units. Other carts and placed orders are not considered here; order
        assembly enforces stock authoritatively.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        requested = self.quantity_of(product.id) + quantity
        if requested > product.stock:
            raise StateConflictError(
                f"Not enough stock for {product.name}",
                product_id=str(product.id),
                requested=requested,
                available=product.stock,
            )

        now = datetime.now(UTC)
        existing = self.line_for(product.id)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(
                CartItem(
                    product_id=str(product.id),
                    name=product.name,
                    slug=product.slug,
                    image=product.image,
                    price=product.price,
                    quantity=quantity,
                    added_at=now,
                )
            )

        self._reprice(now)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product.id),
                quantity=quantity,
                line_quantity=requested,
            )
        )

    def remove_item(self, product_id):
        """Take one unit of a product out; drop the line when none remain."""
        line = self.line_for(product_id)
        if line is None:
            raise NotFoundError("Item not found in cart", cart_id=str(self.id), product_id=str(product_id))

        if line.quantity > 1:
            line.quantity -= 1
            remaining = line.quantity
        else:
            self.remove_items(line)
            remaining = 0

        self._reprice(datetime.now(UTC))

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                line_quantity=remaining,
            )
        )

    def empty(self, order_id=None):
        """Drop every line and zero the prices. The cart stays addressable."""
        for line in list(self.items):
            self.remove_items(line)

        self._reprice(datetime.now(UTC))

        self.raise_(
            CartEmptied(
                cart_id=str(self.id),
                order_id=str(order_id) if order_id else None,
            )
        )

    # -------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------
    def claim(self, customer_id, discarded_cart_id=None):
        """Hand a guest cart over to a signed-in customer.

        The session id is cleared, so the guest identity no longer resolves
        to this cart.
        """
        if self.customer_id:
            raise StateConflictError("Only guest carts can be claimed", cart_id=str(self.id))

        source_session_cart_id = self.session_cart_id
        with atomic_change(self):
            self.customer_id = customer_id
            self.session_cart_id = None
            self.updated_at = datetime.now(UTC)

        self.raise_(
            CartClaimed(
                cart_id=str(self.id),
                customer_id=str(customer_id),
                source_session_cart_id=source_session_cart_id,
                discarded_cart_id=str(discarded_cart_id) if discarded_cart_id else None,
            )
        )

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def _reprice(self, now):
        prices = calculate_prices(self.items) if self.items else CartPrices.zero()
        for field_name, value in prices.as_floats().items():
            setattr(self, field_name, value)
        self.updated_at = now
