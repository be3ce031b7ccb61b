"""Cart item management — commands and handler."""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from carts.cart.cart import Cart
from carts.cart.errors import CartNotFound, QuantityMustBePositive
from carts.catalogue.product import Catalogue
from carts.clock import as_naive_utc
from carts.domain import carts

logger = structlog.get_logger(__name__)


@carts.command(part_of="Cart")
class AddItem:
    """Increase the quantity of a product that is already in the cart."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer()
    as_of = DateTime()


@carts.command(part_of="Cart")
class RemoveItem:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    as_of = DateTime()


@carts.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    def _load(self, cart_id):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_session(cart_id)
        if cart is None:
            raise CartNotFound(cart_id=str(cart_id))
        return repo, cart

    @handle(AddItem)
    def add_item(self, command):
        if command.quantity is None or command.quantity <= 0:
            raise QuantityMustBePositive(command.quantity)

        repo, cart = self._load(command.cart_id)
        item = cart.increment_line(
            command.product_id,
            command.quantity,
            Catalogue().unit_price,
            at=as_naive_utc(command.as_of),
        )
        repo.add(cart)

        logger.info(
            "Incremented cart item",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            quantity=item.quantity,
            total_price=cart.total_price,
        )
        return str(cart.id)

    @handle(RemoveItem)
    def remove_item(self, command):
        """Remove a line. Returns the cart id, or None when the cart was deleted."""
        repo, cart = self._load(command.cart_id)
        cart.remove_line(
            command.product_id,
            Catalogue().unit_price,
            at=as_naive_utc(command.as_of),
        )
        repo.add(cart)

        if cart.is_empty:
            repo.discard(cart)
            logger.info("Removed empty cart", cart_id=str(cart.id))
            return None

        logger.info(
            "Removed cart item",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            total_price=cart.total_price,
        )
        return str(cart.id)
