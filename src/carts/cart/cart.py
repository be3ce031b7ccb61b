"""Cart aggregate — a session cart, its line items, and their price total.

The cart is the unit of consistency: every line mutation (create, increment,
delete) touches ``last_interaction_at`` and recomputes ``total_price`` inside
the same aggregate method, so the repository always persists the three
changes together in one unit of work.
"""

from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from carts.cart.errors import CartNotActive, DuplicateProduct, InvalidQuantity, ItemNotFound, QuantityMustBePositive
from carts.cart.events import (
    CartAbandoned,
    CartCreated,
    CartItemAdded,
    CartItemQuantityIncremented,
    CartItemRemoved,
)
from carts.cart.pricing import UnitPriceLookup, aggregate_total
from carts.clock import utcnow
from carts.domain import carts


class CartStatus(Enum):
    ACTIVE = "Active"
    ABANDONED = "Abandoned"


@carts.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@carts.aggregate
class Cart:
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    items = HasMany(CartItem)
    total_price = Float(default=0.0, min_value=0.0)
    last_interaction_at = DateTime()
    created_at = DateTime()

    @invariant.post
    def total_price_must_not_be_negative(self):
        if self.total_price is not None and self.total_price < 0:
            raise ValidationError({"total_price": ["Total price cannot be negative"]})

    @invariant.post
    def each_product_has_a_single_line(self):
        product_ids = [str(item.product_id) for item in self.items or []]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can only appear once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, at=None):
        now = at or utcnow()
        cart = cls(
            status=CartStatus.ACTIVE.value,
            total_price=0.0,
            created_at=now,
            last_interaction_at=now,
        )
        cart.raise_(CartCreated(cart_id=str(cart.id), created_at=now))
        return cart

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return CartStatus(self.status) == CartStatus.ACTIVE

    @property
    def is_abandoned(self) -> bool:
        return CartStatus(self.status) == CartStatus.ABANDONED

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_line(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Line items
    # -------------------------------------------------------------------
    def add_line(self, product_id, quantity, unit_price: UnitPriceLookup, at=None):
        """Create a new line for a product that is not yet in the cart."""
        self._ensure_active()
        if quantity is None or quantity <= 0:
            raise InvalidQuantity(quantity)
        if self.find_line(product_id) is not None:
            raise DuplicateProduct(cart_id=str(self.id), product_id=str(product_id))

        item = CartItem(product_id=product_id, quantity=quantity)
        with atomic_change(self):
            self.add_items(item)
            self._touch_and_reprice(unit_price, at)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                total_price=self.total_price,
            )
        )
        return item

    def increment_line(self, product_id, delta, unit_price: UnitPriceLookup, at=None):
        """Increase the quantity of an existing line by ``delta``."""
        self._ensure_active()
        if delta is None or delta <= 0:
            raise QuantityMustBePositive(delta)

        item = self.find_line(product_id)
        if item is None:
            raise ItemNotFound(cart_id=str(self.id), product_id=str(product_id))

        previous_quantity = item.quantity
        new_quantity = previous_quantity + delta
        if new_quantity <= 0:
            raise QuantityMustBePositive(new_quantity)

        with atomic_change(self):
            item.quantity = new_quantity
            self._touch_and_reprice(unit_price, at)

        self.raise_(
            CartItemQuantityIncremented(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                total_price=self.total_price,
            )
        )
        return item

    def remove_line(self, product_id, unit_price: UnitPriceLookup, at=None):
        """Delete the line for ``product_id``; the cart may end up empty."""
        self._ensure_active()
        item = self.find_line(product_id)
        if item is None:
            raise ItemNotFound(cart_id=str(self.id), product_id=str(product_id))

        with atomic_change(self):
            self.remove_items(item)
            self._touch_and_reprice(unit_price, at)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                total_price=self.total_price,
            )
        )
        return item

    def reprice(self, unit_price: UnitPriceLookup):
        """Recompute the total from the current lines without touching the cart."""
        self.total_price = float(aggregate_total(self.items, unit_price))

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def mark_abandoned(self, at=None) -> bool:
        """Flag the cart as abandoned. Returns False when it already was."""
        if self.is_abandoned:
            return False

        now = at or utcnow()
        self.status = CartStatus.ABANDONED.value
        self.raise_(CartAbandoned(cart_id=str(self.id), abandoned_at=now))
        return True

    def _ensure_active(self):
        if not self.is_active:
            raise CartNotActive(cart_id=str(self.id), status=self.status)

    def _touch_and_reprice(self, unit_price: UnitPriceLookup, at):
        self.last_interaction_at = at or utcnow()
        self.reprice(unit_price)
