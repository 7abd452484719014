"""Application tests for the cart store entry points."""

import pytest
from ordering.cart.cart import Cart
from ordering.cart.store import CartIdentity, add_item, merge_on_sign_in, remove_item, resolve_cart
from ordering.concurrency import get_locks
from ordering.errors import NotFoundError, StateConflictError
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

USER = CartIdentity(user_id="user-001")
GUEST = CartIdentity(session_cart_id="sess-001")


class TestResolveCart:
    def test_no_cart(self):
        assert resolve_cart(USER) is None
        assert resolve_cart(GUEST) is None

    def test_user_id_wins_when_both_present(self, make_product):
        product = make_product()
        add_item(GUEST, product.id, 1)
        both = CartIdentity(user_id="user-001", session_cart_id="sess-001")
        assert resolve_cart(both) is None

    def test_guest_lookup(self, make_product):
        product = make_product()
        cart_id = add_item(GUEST, product.id, 1)
        assert str(resolve_cart(GUEST).id) == cart_id


class TestAddItem:
    def test_first_add_creates_cart(self, make_product):
        product = make_product(price=29.99)
        cart_id = add_item(USER, product.id, 2)

        cart = current_domain.repository_for(Cart).get(cart_id)
        assert cart.customer_id == "user-001"
        assert cart.total_price == 78.98

    def test_guest_cart_is_owned_by_session(self, make_product):
        product = make_product()
        add_item(GUEST, product.id, 1)
        cart = resolve_cart(GUEST)
        assert cart.session_cart_id == "sess-001"
        assert cart.customer_id is None

    def test_second_add_reuses_cart(self, make_product):
        product = make_product()
        first = add_item(USER, product.id, 1)
        second = add_item(USER, product.id, 1)
        assert first == second
        assert resolve_cart(USER).quantity_of(product.id) == 2

    def test_unknown_product(self):
        with pytest.raises(NotFoundError):
            add_item(USER, "prod-missing", 1)
        assert resolve_cart(USER) is None

    def test_over_stock(self, make_product):
        product = make_product(stock=2)
        add_item(USER, product.id, 2)
        with pytest.raises(StateConflictError):
            add_item(USER, product.id, 1)
        assert resolve_cart(USER).quantity_of(product.id) == 2

    def test_identity_required(self, make_product):
        product = make_product()
        with pytest.raises(ValidationError):
            add_item(CartIdentity(), product.id, 1)

    def test_locks_are_released(self, make_product):
        product = make_product()
        add_item(USER, product.id, 1)
        assert get_locks().active_keys() == set()


class TestRemoveItem:
    def test_decrements(self, make_product):
        product = make_product()
        add_item(USER, product.id, 2)
        remove_item(USER, product.id)
        assert resolve_cart(USER).quantity_of(product.id) == 1

    def test_no_cart(self):
        with pytest.raises(NotFoundError):
            remove_item(USER, "prod-001")

    def test_no_identity_is_not_found(self, make_product):
        product = make_product()
        add_item(USER, product.id, 1)
        with pytest.raises(NotFoundError) as exc:
            remove_item(CartIdentity(), product.id)
        assert exc.value.reason == "Cart not found"
        assert resolve_cart(USER).quantity_of(product.id) == 1

    def test_no_line(self, make_product):
        product = make_product()
        add_item(USER, product.id, 1)
        with pytest.raises(NotFoundError):
            remove_item(USER, "prod-other")


class TestMergeOnSignIn:
    def test_session_cart_replaces_user_cart(self, make_product):
        lamp = make_product(name="Lamp")
        desk = make_product(name="Desk")
        add_item(GUEST, lamp.id, 1)
        old_cart_id = add_item(USER, desk.id, 1)

        merged_id = merge_on_sign_in("sess-001", "user-001")

        cart = resolve_cart(USER)
        assert str(cart.id) == merged_id
        assert [line.name for line in cart.lines] == ["Lamp"]
        assert resolve_cart(GUEST) is None
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Cart).get(old_cart_id)

    def test_session_cart_becomes_user_cart(self, make_product):
        lamp = make_product(name="Lamp")
        add_item(GUEST, lamp.id, 3)

        merge_on_sign_in("sess-001", "user-001")

        cart = resolve_cart(USER)
        assert cart.quantity_of(lamp.id) == 3
        assert cart.session_cart_id is None

    def test_no_session_cart_is_a_no_op(self, make_product):
        desk = make_product(name="Desk")
        add_item(USER, desk.id, 1)

        assert merge_on_sign_in("sess-unknown", "user-001") is None
        assert resolve_cart(USER).quantity_of(desk.id) == 1

    def test_no_session_id(self):
        assert merge_on_sign_in(None, "user-001") is None
