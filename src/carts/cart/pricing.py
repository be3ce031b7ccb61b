"""Price aggregation for cart lines.

A cart's total is derived, never edited: it is the sum of quantity times the
catalogue unit price over the cart's current lines, resolved at aggregation
time.
"""

from collections.abc import Callable, Iterable
from decimal import ROUND_HALF_UP, Decimal

from carts.cart.errors import PriceResolutionError, ProductNotFound

CENT = Decimal("0.01")

UnitPriceLookup = Callable[[str], Decimal]


def to_decimal(value) -> Decimal:
    """Convert a stored amount (float, int, str) into a Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def aggregate_total(items: Iterable, unit_price: UnitPriceLookup) -> Decimal:
    """Return ``sum(quantity * unit_price)`` over ``items``, rounded to cents.

    Each item needs ``product_id`` and ``quantity``. A product the lookup
    cannot resolve raises ``PriceResolutionError``.
    """
    total = Decimal("0")
    for item in items:
        try:
            price = unit_price(str(item.product_id))
        except ProductNotFound:
            raise PriceResolutionError(str(item.product_id)) from None
        if price is None:
            raise PriceResolutionError(str(item.product_id))
        total += to_decimal(price) * item.quantity
    return total.quantize(CENT, rounding=ROUND_HALF_UP)
