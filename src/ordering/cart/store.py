"""Cart store — the entry points the HTTP layer and sign-in flow call.

Every mutation runs as one command (one unit of work) while the owner's key
is held, so two requests against the same cart are applied one after the
other instead of overwriting each other.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.items import AddToCart, RemoveFromCart
from ordering.cart.management import MergeGuestCart
from ordering.concurrency import get_locks, owner_key
from ordering.errors import NotFoundError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartIdentity:
    """Who is shopping: a signed-in user, an anonymous session, or both."""

    user_id: str | None = None
    session_cart_id: str | None = None

    @property
    def owner(self) -> str | None:
        if self.user_id:
            return f"user:{self.user_id}"
        if self.session_cart_id:
            return f"session:{self.session_cart_id}"
        return None

    def require_owner(self) -> str:
        owner = self.owner
        if owner is None:
            raise ValidationError({"identity": ["A user id or a session cart id is required"]})
        return owner


def resolve_cart(identity: CartIdentity) -> Cart | None:
    return current_domain.repository_for(Cart).for_owner(identity.user_id, identity.session_cart_id)


def add_item(identity: CartIdentity, product_id: str, quantity: int = 1) -> str:
    owner = identity.require_owner()
    with get_locks().hold(owner_key(owner)):
        cart_id = current_domain.process(
            AddToCart(
                customer_id=identity.user_id,
                session_cart_id=None if identity.user_id else identity.session_cart_id,
                product_id=product_id,
                quantity=quantity,
            ),
            asynchronous=False,
        )

    logger.info("Item added to cart", cart_id=cart_id, product_id=product_id, quantity=quantity)
    return cart_id


def remove_item(identity: CartIdentity, product_id: str) -> str:
    owner = identity.owner
    if owner is None:
        raise NotFoundError("Cart not found")
    with get_locks().hold(owner_key(owner)):
        cart_id = current_domain.process(
            RemoveFromCart(
                customer_id=identity.user_id,
                session_cart_id=None if identity.user_id else identity.session_cart_id,
                product_id=product_id,
            ),
            asynchronous=False,
        )

    logger.info("Item removed from cart", cart_id=cart_id, product_id=product_id)
    return cart_id


def merge_on_sign_in(session_cart_id: str | None, user_id: str) -> str | None:
    """Hand the guest cart over to ``user_id``. Returns the surviving cart id."""
    if not session_cart_id:
        return None

    guest = CartIdentity(session_cart_id=session_cart_id)
    member = CartIdentity(user_id=user_id)
    keys = (owner_key(guest.owner), owner_key(member.owner))
    with get_locks().hold(*keys):
        cart_id = current_domain.process(
            MergeGuestCart(session_cart_id=session_cart_id, customer_id=user_id),
            asynchronous=False,
        )

    if cart_id:
        logger.info("Guest cart merged", cart_id=cart_id, customer_id=user_id)
    return cart_id
