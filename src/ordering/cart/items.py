"""Cart item management — commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.domain import ordering
from ordering.errors import NotFoundError
from ordering.product.product import Product


@ordering.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier()
    session_cart_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier()
    session_cart_id = String(max_length=255)
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        try:
            product = current_domain.repository_for(Product).get(command.product_id)
        except ObjectNotFoundError:
            raise NotFoundError("Product not found", product_id=str(command.product_id))

        repo = current_domain.repository_for(Cart)
        cart = repo.for_owner(command.customer_id, command.session_cart_id)
        if cart is None:
            cart = Cart.create(
                customer_id=command.customer_id,
                session_cart_id=command.session_cart_id,
            )

        cart.add_item(product, command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_owner(command.customer_id, command.session_cart_id)
        if cart is None:
            raise NotFoundError("Cart not found")

        cart.remove_item(command.product_id)
        repo.add(cart)
        return str(cart.id)
