"""Product aggregate — the sellable record a cart line points at.

Only the fields the checkout path relies on live here: the authoritative
current price, the available stock, and the display snapshot (name, slug,
image) copied onto cart and order lines. Catalogue browsing and
administrative editing are handled elsewhere.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String

from ordering.domain import ordering
from ordering.errors import StateConflictError
from ordering.product.events import StockReserved


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    image = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    stock = Integer(required=True, min_value=0)

    @invariant.post
    def stock_must_not_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @classmethod
    def create(cls, name, slug, price, stock, image=None):
        return cls(name=name, slug=slug, price=price, stock=stock, image=image)

    def can_supply(self, quantity: int) -> bool:
        return self.stock >= quantity

    def reserve(self, quantity: int, order_id: str) -> None:
        """Take ``quantity`` units out of available stock for an order."""
        if not self.can_supply(quantity):
            raise StateConflictError(
                f"Not enough stock for {self.name}",
                product_id=str(self.id),
                requested=quantity,
                available=self.stock,
            )

        self.stock -= quantity

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                order_id=str(order_id),
                quantity=quantity,
                remaining_stock=self.stock,
            )
        )
