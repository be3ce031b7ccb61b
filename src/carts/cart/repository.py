"""Cart store — persistence and lifecycle queries for Cart aggregates."""

from datetime import timedelta

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from carts.cart.cart import Cart, CartItem, CartStatus
from carts.cart.pricing import UnitPriceLookup
from carts.clock import as_naive_utc
from carts.domain import carts


@carts.repository(part_of=Cart)
class CartRepository:
    """Repository for the Cart aggregate.

    Besides the standard ``add``/``get``, it carries the two sweep
    predicates over (status, last_interaction_at) and the cascading delete.
    """

    def find_by_session(self, cart_id) -> Cart | None:
        """Load the cart bound to a session, or None when there is none."""
        if not cart_id:
            return None
        try:
            return self.get(str(cart_id))
        except ObjectNotFoundError:
            return None

    def create_empty(self, at=None) -> Cart:
        """Open a new active cart with a zero total. Persisted on ``add``."""
        return Cart.create(at=at)

    def recompute_total(self, cart: Cart, unit_price: UnitPriceLookup) -> Cart:
        cart.reprice(unit_price)
        self.add(cart)
        return cart

    def mark_abandoned(self, cart: Cart, at=None) -> bool:
        """Flag a single cart as abandoned. A second call is a no-op."""
        changed = cart.mark_abandoned(at=at)
        if changed:
            self.add(cart)
        return changed

    def delete_if_abandoned(self, cart: Cart) -> bool:
        """Delete the cart and its items only if it is abandoned right now.

        The status is re-read from the store so that a cart that changed
        since it was fetched is left alone.
        """
        current = self.find_by_session(cart.id)
        if current is None or not current.is_abandoned:
            return False
        self.discard(current)
        return True

    def discard(self, cart: Cart) -> None:
        """Delete a cart together with its persisted items."""
        item_dao = current_domain.repository_for(CartItem)._dao
        for item in list(cart.items):
            item_dao.delete(item)
        self._dao.delete(cart)

    # -------------------------------------------------------------------
    # Sweep queries
    # -------------------------------------------------------------------
    def inactive_active_carts(self, threshold: timedelta, as_of=None) -> list[Cart]:
        """Active carts whose last interaction is older than ``threshold``."""
        cutoff = as_naive_utc(as_of) - threshold
        return (
            self._dao.query.filter(
                status=CartStatus.ACTIVE.value,
                last_interaction_at__lt=cutoff,
            )
            .all()
            .items
        )

    def expired_abandoned_carts(self, retention: timedelta, as_of=None) -> list[Cart]:
        """Abandoned carts whose last interaction is older than ``retention``."""
        cutoff = as_naive_utc(as_of) - retention
        return (
            self._dao.query.filter(
                status=CartStatus.ABANDONED.value,
                last_interaction_at__lt=cutoff,
            )
            .all()
            .items
        )

    def abandon_inactive(self, threshold: timedelta, as_of=None) -> int:
        """Set-based transition of every inactive active cart to abandoned.

        Returns the number of carts updated.
        """
        cutoff = as_naive_utc(as_of) - threshold
        updated = self._dao._update_all(
            Q(status=CartStatus.ACTIVE.value, last_interaction_at__lt=cutoff),
            status=CartStatus.ABANDONED.value,
        )
        return updated or 0
