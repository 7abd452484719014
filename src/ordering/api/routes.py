"""FastAPI routes for the Ordering domain — cart, checkout profile, and orders."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from ordering.api.identity import RequestIdentity, admin_user, request_identity, signed_in_user
from ordering.api.schemas import (
    AddressSchema,
    AddToCartRequest,
    CartResponse,
    LineSchema,
    MergeGuestCartRequest,
    OrderIdResponse,
    OrderResponse,
    PaymentResultSchema,
    RegisterCustomerRequest,
    SelectPaymentMethodRequest,
    StatusResponse,
)
from ordering.cart import store
from ordering.customer.profile import RegisterCustomer, SaveShippingAddress, SelectPaymentMethod
from ordering.order.delivery import deliver_order
from ordering.order.placement import place_order
from ordering.order.queries import get_order, orders_for_customer
from payments.reconciliation import settle_manually


def _line(item) -> LineSchema:
    return LineSchema(
        product_id=str(item.product_id),
        name=item.name,
        slug=item.slug,
        image=item.image,
        price=item.price,
        quantity=item.quantity,
    )


def _cart_response(cart) -> CartResponse:
    if cart is None:
        return CartResponse(items_price=0.0, shipping_price=0.0, tax_price=0.0, total_price=0.0)
    return CartResponse(
        cart_id=str(cart.id),
        items=[_line(item) for item in cart.lines],
        **cart.prices.as_floats(),
    )


def order_response(order) -> OrderResponse:
    address = order.shipping_address
    result = order.payment_result
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        payment_method=order.payment_method,
        shipping_address=AddressSchema(
            full_name=address.full_name,
            street_address=address.street_address,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
        )
        if address
        else None,
        items=[_line(item) for item in order.items],
        items_price=order.items_price,
        shipping_price=order.shipping_price,
        tax_price=order.tax_price,
        total_price=order.total_price,
        is_paid=bool(order.is_paid),
        paid_at=order.paid_at,
        payment_result=PaymentResultSchema(
            transaction_id=result.transaction_id,
            status=result.status,
            email_address=result.email_address,
            amount_paid=result.amount_paid,
        )
        if result
        else None,
        is_delivered=bool(order.is_delivered),
        delivered_at=order.delivered_at,
        created_at=order.created_at,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def view_cart(identity: RequestIdentity = Depends(request_identity)) -> CartResponse:
    return _cart_response(store.resolve_cart(identity.cart_identity))


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, identity: RequestIdentity = Depends(request_identity)) -> CartResponse:
    store.add_item(identity.cart_identity, body.product_id, body.quantity)
    return _cart_response(store.resolve_cart(identity.cart_identity))


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, identity: RequestIdentity = Depends(request_identity)) -> CartResponse:
    store.remove_item(identity.cart_identity, product_id)
    return _cart_response(store.resolve_cart(identity.cart_identity))


@cart_router.post("/merge", response_model=CartResponse)
async def merge_guest_cart(
    body: MergeGuestCartRequest,
    identity: RequestIdentity = Depends(signed_in_user),
) -> CartResponse:
    """Called by the sign-in flow to hand the guest cart over to the user."""
    store.merge_on_sign_in(body.session_cart_id, identity.user_id)
    return _cart_response(store.resolve_cart(identity.cart_identity))


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.post("/me", response_model=StatusResponse)
async def register_customer(
    body: RegisterCustomerRequest,
    identity: RequestIdentity = Depends(signed_in_user),
) -> StatusResponse:
    current_domain.process(
        RegisterCustomer(user_id=identity.user_id, name=body.name, email=body.email),
        asynchronous=False,
    )
    return StatusResponse(status="registered")


@customer_router.put("/me/address", response_model=StatusResponse)
async def save_shipping_address(
    body: AddressSchema,
    identity: RequestIdentity = Depends(signed_in_user),
) -> StatusResponse:
    current_domain.process(
        SaveShippingAddress(user_id=identity.user_id, **body.model_dump()),
        asynchronous=False,
    )
    return StatusResponse(status="address_saved")


@customer_router.put("/me/payment-method", response_model=StatusResponse)
async def select_payment_method(
    body: SelectPaymentMethodRequest,
    identity: RequestIdentity = Depends(signed_in_user),
) -> StatusResponse:
    current_domain.process(
        SelectPaymentMethod(user_id=identity.user_id, payment_method=body.payment_method),
        asynchronous=False,
    )
    return StatusResponse(status="payment_method_selected")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(identity: RequestIdentity = Depends(signed_in_user)) -> OrderIdResponse:
    order_id = place_order(identity.user_id, identity.session_cart_id)
    return OrderIdResponse(order_id=order_id)


@order_router.get("", response_model=list[OrderResponse])
async def list_my_orders(identity: RequestIdentity = Depends(signed_in_user)) -> list[OrderResponse]:
    return [order_response(order) for order in orders_for_customer(identity.user_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def view_order(order_id: str, identity: RequestIdentity = Depends(signed_in_user)) -> OrderResponse:
    owner = None if identity.is_admin else identity.user_id
    return order_response(get_order(order_id, customer_id=owner))


@order_router.put("/{order_id}/deliver", response_model=StatusResponse)
async def mark_delivered(order_id: str, identity: RequestIdentity = Depends(admin_user)) -> StatusResponse:
    deliver_order(order_id)
    return StatusResponse(status="delivered")


@order_router.put("/{order_id}/pay", response_model=StatusResponse)
async def mark_paid_cash_on_delivery(
    order_id: str,
    identity: RequestIdentity = Depends(admin_user),
) -> StatusResponse:
    settle_manually(order_id, operator_id=identity.user_id)
    return StatusResponse(status="paid")
