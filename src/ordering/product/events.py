"""Domain events for the Product aggregate."""

from protean.fields import Identifier, Integer

from ordering.domain import ordering


@ordering.event(part_of="Product")
class StockReserved:
    """Stock was set aside for a placed order."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining_stock = Integer(required=True)
