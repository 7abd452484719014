"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartItemAdded:
    """Units of a product were put in the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartItemRemoved:
    """One unit of a product was taken out of the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    line_quantity = Integer(required=True)  # 0 when the line was dropped


@ordering.event(part_of="Cart")
class CartClaimed:
    """A guest cart was taken over by a signed-in customer."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    source_session_cart_id = String(required=True)
    discarded_cart_id = Identifier()


@ordering.event(part_of="Cart")
class CartEmptied:
    """The cart's lines were moved into an order."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier()
