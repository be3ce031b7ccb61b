"""Tests for the Cart aggregate — lines, totals, and lifecycle."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from carts.cart.cart import Cart, CartStatus
from carts.cart.errors import (
    CartNotActive,
    DuplicateProduct,
    InvalidQuantity,
    ItemNotFound,
    QuantityMustBePositive,
)
from carts.cart.events import (
    CartAbandoned,
    CartCreated,
    CartItemAdded,
    CartItemQuantityIncremented,
    CartItemRemoved,
)

NOW = datetime(2026, 3, 2, 12, 0, 0)
PRICES = {"p1": Decimal("10.0"), "p2": Decimal("15.0")}


def unit_price(product_id):
    return PRICES[product_id]


def _make_cart():
    return Cart.create(at=NOW)


class TestCartCreation:
    def test_new_cart_is_active_and_free(self):
        cart = _make_cart()
        assert cart.status == CartStatus.ACTIVE.value
        assert cart.total_price == 0.0
        assert len(cart.items) == 0
        assert cart.last_interaction_at == NOW

    def test_create_raises_event(self):
        cart = _make_cart()
        assert any(isinstance(e, CartCreated) for e in cart._events)


class TestAddLine:
    def test_add_line_sets_total(self):
        cart = _make_cart()
        cart.add_line("p1", 2, unit_price, at=NOW)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.total_price == 20.0

    def test_add_line_touches_cart(self):
        cart = _make_cart()
        later = NOW + timedelta(minutes=5)
        cart.add_line("p1", 1, unit_price, at=later)
        assert cart.last_interaction_at == later

    def test_add_line_raises_event(self):
        cart = _make_cart()
        cart._events.clear()
        cart.add_line("p1", 1, unit_price, at=NOW)
        assert len(cart._events) == 1
        event = cart._events[0]
        assert isinstance(event, CartItemAdded)
        assert event.product_id == "p1"
        assert event.total_price == 10.0

    def test_duplicate_product_is_rejected(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        with pytest.raises(DuplicateProduct):
            cart.add_line("p1", 3, unit_price, at=NOW)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 1

    @pytest.mark.parametrize("quantity", [0, -1, None])
    def test_non_positive_quantity_is_rejected(self, quantity):
        cart = _make_cart()
        with pytest.raises(InvalidQuantity):
            cart.add_line("p1", quantity, unit_price, at=NOW)
        assert len(cart.items) == 0


class TestIncrementLine:
    def test_increment_updates_quantity_and_total(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        cart.increment_line("p1", 1, unit_price, at=NOW)
        assert cart.items[0].quantity == 2
        assert cart.total_price == 20.0

    def test_increment_raises_event(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        cart._events.clear()
        cart.increment_line("p1", 2, unit_price, at=NOW)
        event = cart._events[0]
        assert isinstance(event, CartItemQuantityIncremented)
        assert event.previous_quantity == 1
        assert event.new_quantity == 3

    def test_increment_missing_product(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        with pytest.raises(ItemNotFound):
            cart.increment_line("p2", 1, unit_price, at=NOW)

    @pytest.mark.parametrize("delta", [0, -2])
    def test_non_positive_delta_is_rejected(self, delta):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        with pytest.raises(QuantityMustBePositive):
            cart.increment_line("p1", delta, unit_price, at=NOW)
        assert cart.items[0].quantity == 1


class TestRemoveLine:
    def test_remove_one_of_two_lines(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        cart.add_line("p2", 1, unit_price, at=NOW)
        cart.remove_line("p1", unit_price, at=NOW)
        assert [str(i.product_id) for i in cart.items] == ["p2"]
        assert cart.total_price == 15.0
        assert not cart.is_empty

    def test_remove_last_line_leaves_empty_cart(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        cart.remove_line("p1", unit_price, at=NOW)
        assert cart.is_empty
        assert cart.total_price == 0.0

    def test_remove_touches_cart_and_raises_event(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        cart._events.clear()
        later = NOW + timedelta(hours=1)
        cart.remove_line("p1", unit_price, at=later)
        assert cart.last_interaction_at == later
        assert isinstance(cart._events[0], CartItemRemoved)

    def test_remove_missing_product(self):
        cart = _make_cart()
        with pytest.raises(ItemNotFound):
            cart.remove_line("p1", unit_price, at=NOW)


class TestAbandonment:
    def test_mark_abandoned(self):
        cart = _make_cart()
        assert cart.mark_abandoned(at=NOW) is True
        assert cart.status == CartStatus.ABANDONED.value
        assert any(isinstance(e, CartAbandoned) for e in cart._events)

    def test_mark_abandoned_twice_is_a_noop(self):
        cart = _make_cart()
        cart.mark_abandoned(at=NOW)
        cart._events.clear()
        assert cart.mark_abandoned(at=NOW) is False
        assert cart.status == CartStatus.ABANDONED.value
        assert len(cart._events) == 0

    def test_abandonment_does_not_touch_cart(self):
        cart = _make_cart()
        cart.mark_abandoned(at=NOW + timedelta(hours=4))
        assert cart.last_interaction_at == NOW

    def test_abandoned_cart_rejects_line_changes(self):
        cart = _make_cart()
        cart.add_line("p1", 1, unit_price, at=NOW)
        cart.mark_abandoned(at=NOW)
        with pytest.raises(CartNotActive):
            cart.add_line("p2", 1, unit_price, at=NOW)
        with pytest.raises(CartNotActive):
            cart.increment_line("p1", 1, unit_price, at=NOW)
        with pytest.raises(CartNotActive):
            cart.remove_line("p1", unit_price, at=NOW)
