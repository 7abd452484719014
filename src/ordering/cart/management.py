"""Cart ownership — guest cart hand-over at sign-in."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.domain import ordering


@ordering.command(part_of="Cart")
class MergeGuestCart:
    """Make the session cart the signed-in customer's cart.

    Any cart the customer already had is discarded; the session cart's lines
    replace it wholesale.
    """

    session_cart_id = String(required=True, max_length=255)
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(Cart)
        guest_cart = repo.for_session(command.session_cart_id)
        if guest_cart is None:
            return None

        previous = repo.for_customer(command.customer_id)
        discarded_cart_id = None
        if previous is not None:
            discarded_cart_id = str(previous.id)
            repo.discard(previous)

        guest_cart.claim(command.customer_id, discarded_cart_id=discarded_cart_id)
        repo.add(guest_cart)
        return str(guest_cart.id)
