"""Cart service — the contract the transport layer consumes.

Every operation takes an explicit cart id (resolved from the session once, at
the boundary) and returns the persisted ``Cart`` so callers always render the
committed state.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from carts.cart.abandonment import SweepReport, run_abandonment_sweep
from carts.cart.cart import Cart
from carts.cart.errors import CartNotFound
from carts.cart.items import AddItem, RemoveItem
from carts.cart.management import CreateCart
from carts.messages import message_for

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartRemoved:
    """Outcome of removing the last line: the cart itself is gone."""

    cart_id: str
    message: str = message_for("cart_removed_empty")


def _process(command):
    """Process a cart command, retrying once if another writer won the race.

    Concurrent writers on one cart are serialised by the aggregate version.
    The retry re-reads the cart, so a losing create of the same product
    deterministically fails with DuplicateProduct, and a losing increment is
    applied on top of the winner's quantity.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError:
        logger.info(
            "Concurrent cart update detected, retrying",
            command=command.__class__.__name__,
            cart_id=str(command.cart_id) if command.cart_id else None,
        )
        return current_domain.process(command, asynchronous=False)


def get_cart(cart_id) -> Cart:
    cart = current_domain.repository_for(Cart).find_by_session(cart_id)
    if cart is None:
        raise CartNotFound(cart_id=str(cart_id) if cart_id else None)
    return cart


def create_cart(cart_id, product_id, quantity, as_of=None) -> Cart:
    new_cart_id = _process(
        CreateCart(cart_id=cart_id, product_id=product_id, quantity=quantity, as_of=as_of),
    )
    return get_cart(new_cart_id)


def add_item(cart_id, product_id, quantity, as_of=None) -> Cart:
    if not cart_id:
        raise CartNotFound()
    _process(AddItem(cart_id=cart_id, product_id=product_id, quantity=quantity, as_of=as_of))
    return get_cart(cart_id)


def remove_item(cart_id, product_id, as_of=None) -> Cart | CartRemoved:
    if not cart_id:
        raise CartNotFound()
    remaining = _process(RemoveItem(cart_id=cart_id, product_id=product_id, as_of=as_of))
    if remaining is None:
        return CartRemoved(cart_id=str(cart_id))
    return get_cart(remaining)


def sweep_abandoned_carts(as_of=None) -> SweepReport:
    return run_abandonment_sweep(as_of=as_of)
