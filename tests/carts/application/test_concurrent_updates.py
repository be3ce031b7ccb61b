"""Concurrent writers on one cart are serialised by the aggregate version.

The losing writer gets ``ExpectedVersionError`` from the store and the
service retries once on fresh state. These tests stage the race by letting a
competing command commit right before the first attempt fails.
"""

from datetime import datetime
from unittest.mock import patch

import pytest
from carts.cart import service
from carts.cart.cart import Cart
from carts.cart.errors import DuplicateProduct
from carts.cart.items import AddItem
from carts.cart.management import CreateCart
from carts.catalogue.product import Catalogue
from carts.domain import carts
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

NOW = datetime(2026, 3, 2, 12, 0, 0)
P1, P2 = "prod-p1", "prod-p2"


def _lose_first_attempt_to(competing_command):
    """Build a ``process`` stand-in whose first call loses the race."""
    real_process = carts.process
    calls = []

    def process(command, asynchronous=True):
        calls.append(command)
        if len(calls) == 1:
            real_process(competing_command, asynchronous=False)
            raise ExpectedVersionError("Wrong expected version")
        return real_process(command, asynchronous=asynchronous)

    return process, calls


class TestConcurrentCreate:
    def test_losing_create_of_same_product_is_a_duplicate(self, products):
        cart = service.create_cart(None, P1, 1, as_of=NOW)
        winner = CreateCart(cart_id=cart.id, product_id=P2, quantity=1, as_of=NOW)
        process, calls = _lose_first_attempt_to(winner)

        with patch.object(carts, "process", side_effect=process):
            with pytest.raises(DuplicateProduct):
                service.create_cart(cart.id, P2, 1, as_of=NOW)

        assert len(calls) == 2
        stored = service.get_cart(cart.id)
        assert [(str(i.product_id), i.quantity) for i in stored.items if str(i.product_id) == P2] == [(P2, 1)]
        assert stored.total_price == 25.0

    def test_retry_of_different_product_succeeds(self, products):
        cart = service.create_cart(None, P1, 1, as_of=NOW)
        winner = AddItem(cart_id=cart.id, product_id=P1, quantity=2, as_of=NOW)
        process, _ = _lose_first_attempt_to(winner)

        with patch.object(carts, "process", side_effect=process):
            cart = service.create_cart(cart.id, P2, 1, as_of=NOW)

        quantities = {str(i.product_id): i.quantity for i in cart.items}
        assert quantities == {P1: 3, P2: 1}
        assert cart.total_price == 45.0


class TestConcurrentIncrement:
    def test_losing_increment_is_applied_on_top(self, products):
        cart = service.create_cart(None, P1, 1, as_of=NOW)
        winner = AddItem(cart_id=cart.id, product_id=P1, quantity=1, as_of=NOW)
        process, calls = _lose_first_attempt_to(winner)

        with patch.object(carts, "process", side_effect=process):
            cart = service.add_item(cart.id, P1, 1, as_of=NOW)

        assert len(calls) == 2
        assert cart.items[0].quantity == 3
        assert cart.total_price == 30.0

    def test_only_one_retry(self, products):
        cart = service.create_cart(None, P1, 1, as_of=NOW)

        with patch.object(carts, "process", side_effect=ExpectedVersionError("Wrong expected version")) as process:
            with pytest.raises(ExpectedVersionError):
                service.add_item(cart.id, P1, 1, as_of=NOW)

        assert process.call_count == 2
        assert service.get_cart(cart.id).items[0].quantity == 1


class TestStoreVersionCheck:
    def test_saving_a_stale_copy_is_rejected(self, products):
        cart = service.create_cart(None, P1, 1, as_of=NOW)
        repo = current_domain.repository_for(Cart)
        first = repo.get(cart.id)
        second = repo.get(cart.id)

        first.increment_line(P1, 1, Catalogue().unit_price, at=NOW)
        repo.add(first)

        second.increment_line(P1, 2, Catalogue().unit_price, at=NOW)
        with pytest.raises(ExpectedVersionError):
            repo.add(second)

        stored = repo.get(cart.id)
        assert stored.items[0].quantity == 2
        assert stored.total_price == 20.0
