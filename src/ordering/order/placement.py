"""Order placement — turning a cart into a paid-for-later order.

Placement is one command handled in one unit of work: the order and its
lines are written, stock is reserved for every line, and the cart is
emptied. Every stock level is checked before any is decremented, so a
shortage on the last line leaves the first line's product untouched too.
"""

from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.store import CartIdentity
from ordering.concurrency import get_locks, owner_key, product_key
from ordering.customer.customer import Customer
from ordering.domain import ordering
from ordering.errors import CheckoutError, NotFoundError, StateConflictError, TransactionFailedError
from ordering.order.order import Order
from ordering.product.product import Product

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    session_cart_id = String(max_length=255)


def _find_cart(customer_id, session_cart_id=None) -> Cart | None:
    carts = current_domain.repository_for(Cart)
    return carts.for_customer(customer_id) or carts.for_session(session_cart_id)


def _find_customer(customer_id) -> Customer | None:
    try:
        return current_domain.repository_for(Customer).get(customer_id)
    except ObjectNotFoundError:
        return None


def _quantities_by_product(cart: Cart) -> dict[str, int]:
    quantities: dict[str, int] = defaultdict(int)
    for line in cart.lines:
        quantities[str(line.product_id)] += line.quantity
    return dict(quantities)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = _find_cart(command.customer_id, command.session_cart_id)
        if cart is None or cart.is_empty:
            raise StateConflictError("Your cart is empty", remediation="cart")

        customer = _find_customer(command.customer_id)
        if customer is None or not customer.has_address:
            raise StateConflictError("A shipping address is required", remediation="shipping-address")
        if not customer.has_payment_method:
            raise StateConflictError("A payment method is required", remediation="payment-method")

        product_repo = current_domain.repository_for(Product)
        wanted = _quantities_by_product(cart)
        products = {}
        for product_id, quantity in sorted(wanted.items()):
            try:
                product = product_repo.get(product_id)
            except ObjectNotFoundError:
                raise NotFoundError("Product not found", product_id=product_id)

            if not product.can_supply(quantity):
                logger.warning(
                    "Order placement aborted for insufficient stock",
                    product_id=product_id,
                    requested=quantity,
                    available=product.stock,
                )
                raise StateConflictError(
                    f"Not enough stock for {product.name}",
                    product_id=product_id,
                    requested=quantity,
                    available=product.stock,
                )
            products[product_id] = product

        order = Order.place(
            customer_id=command.customer_id,
            cart=cart,
            address=customer.address,
            payment_method=customer.payment_method,
        )
        current_domain.repository_for(Order).add(order)

        for product_id, quantity in sorted(wanted.items()):
            product = products[product_id]
            product.reserve(quantity, order.id)
            product_repo.add(product)

        cart.empty(order_id=order.id)
        current_domain.repository_for(Cart).add(cart)

        return str(order.id)


def place_order(customer_id: str, session_cart_id: str | None = None) -> str:
    """Place an order from the customer's cart and return the new order id.

    The cart owner's key is held first, which freezes the cart's product
    set; then every product on it is locked before the unit of work runs.
    """
    owners = [owner_key(CartIdentity(user_id=customer_id).owner)]
    if session_cart_id:
        owners.append(owner_key(CartIdentity(session_cart_id=session_cart_id).owner))

    locks = get_locks()
    try:
        with locks.hold(*owners):
            cart = _find_cart(customer_id, session_cart_id)
            product_ids = sorted(_quantities_by_product(cart)) if cart else []
            with locks.hold(*(product_key(pid) for pid in product_ids)):
                order_id = current_domain.process(
                    PlaceOrder(customer_id=customer_id, session_cart_id=session_cart_id),
                    asynchronous=False,
                )
    except (CheckoutError, ValidationError):
        raise
    except Exception as exc:
        logger.exception("Order placement failed", customer_id=customer_id)
        raise TransactionFailedError() from exc

    logger.info("Order placed", order_id=order_id, customer_id=customer_id)
    return order_id
