"""Repository for the Cart aggregate — lookups by owner."""

from ordering.cart.cart import Cart
from ordering.domain import ordering


@ordering.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart | None:
        if not customer_id:
            return None
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None

    def for_session(self, session_cart_id) -> Cart | None:
        if not session_cart_id:
            return None
        carts = self._dao.query.filter(session_cart_id=str(session_cart_id)).all().items
        return carts[0] if carts else None

    def for_owner(self, customer_id=None, session_cart_id=None) -> Cart | None:
        """A signed-in customer's cart wins; the session id is only used for guests."""
        if customer_id:
            return self.for_customer(customer_id)
        return self.for_session(session_cart_id)

    def discard(self, cart: Cart) -> None:
        self._dao.delete(cart)
