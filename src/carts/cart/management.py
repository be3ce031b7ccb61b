"""Cart creation — command and handler.

A cart is opened lazily by its first product: the handler resolves the
session's cart (or opens a new one) and adds the first line in the same unit
of work, so either both the cart and its line persist or neither does.
"""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from carts.cart.cart import Cart
from carts.cart.errors import InvalidQuantity, ProductNotFound
from carts.catalogue.product import Catalogue
from carts.clock import as_naive_utc
from carts.domain import carts

logger = structlog.get_logger(__name__)


@carts.command(part_of="Cart")
class CreateCart:
    """Add a product not yet in the cart, opening the cart if needed."""

    cart_id = Identifier()  # Cart bound to the session, if any
    product_id = Identifier(required=True)
    quantity = Integer()
    as_of = DateTime()  # Optional: defaults to now


@carts.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        if command.quantity is None or command.quantity <= 0:
            raise InvalidQuantity(command.quantity)

        catalogue = Catalogue()
        if not catalogue.exists(command.product_id):
            raise ProductNotFound(product_id=str(command.product_id))

        at = as_naive_utc(command.as_of)
        repo = current_domain.repository_for(Cart)

        cart = repo.find_by_session(command.cart_id)
        if cart is None or not cart.is_active:
            if cart is not None:
                logger.info("Session cart is no longer active, opening a new one", cart_id=str(cart.id))
            cart = repo.create_empty(at=at)

        cart.add_line(command.product_id, command.quantity, catalogue.unit_price, at=at)
        repo.add(cart)

        logger.info(
            "Added product to cart",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            quantity=command.quantity,
            total_price=cart.total_price,
        )
        return str(cart.id)
