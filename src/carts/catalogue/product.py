"""Product catalogue — the read-only price source for carts.

Carts never own products; they reference them by id and resolve the unit
price through ``Catalogue`` whenever a total is recomputed.
"""

from decimal import Decimal

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from carts.cart.errors import ProductNotFound
from carts.cart.pricing import to_decimal
from carts.domain import carts


@carts.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)


@carts.command(part_of="Product")
class RegisterProduct:
    """Add a product to the catalogue (seeding and administration)."""

    product_id = Identifier()
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)


@carts.command_handler(part_of=Product)
class CatalogueHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        values = {"name": command.name, "price": command.price}
        if command.product_id:
            values["id"] = command.product_id
        product = Product(**values)
        current_domain.repository_for(Product).add(product)
        return str(product.id)


class Catalogue:
    """Read-only product lookups used by the cart service."""

    def _get(self, product_id) -> Product | None:
        if not product_id:
            return None
        try:
            return current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            return None

    def exists(self, product_id) -> bool:
        return self._get(product_id) is not None

    def product(self, product_id) -> Product:
        product = self._get(product_id)
        if product is None:
            raise ProductNotFound(product_id=product_id)
        return product

    def unit_price(self, product_id) -> Decimal:
        return to_decimal(self.product(product_id).price)
