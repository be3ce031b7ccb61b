"""Cart domain errors.

Each error carries a stable ``code`` (used to look up the user-facing
message and rendered in API responses) on top of Protean's exception
hierarchy, so generic Protean handlers still classify them correctly.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from carts.messages import message_for


class CartErrorMixin:
    code = "internal_error"
    field = "cart"

    def _init_details(self, **details):
        self.message = message_for(self.code)
        self.details = details
        return {self.field: [self.message]}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
class InvalidQuantity(CartErrorMixin, ValidationError):
    """Quantity for a new cart line is missing, zero or negative."""

    code = "invalid_quantity"
    field = "quantity"

    def __init__(self, quantity=None):
        super().__init__(self._init_details(quantity=quantity))


class QuantityMustBePositive(CartErrorMixin, ValidationError):
    """Increment for an existing cart line is zero or negative."""

    code = "quantity_must_be_positive"
    field = "quantity"

    def __init__(self, quantity=None):
        super().__init__(self._init_details(quantity=quantity))


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class CartNotFound(CartErrorMixin, ObjectNotFoundError):
    code = "cart_not_found"

    def __init__(self, cart_id=None):
        super().__init__(self._init_details(cart_id=cart_id))


class ItemNotFound(CartErrorMixin, ObjectNotFoundError):
    code = "product_not_found_in_cart"
    field = "product_id"

    def __init__(self, cart_id=None, product_id=None):
        super().__init__(self._init_details(cart_id=cart_id, product_id=product_id))


class ProductNotFound(CartErrorMixin, ObjectNotFoundError):
    code = "product_not_found"
    field = "product_id"

    def __init__(self, product_id=None):
        super().__init__(self._init_details(product_id=product_id))


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------
class DuplicateProduct(CartErrorMixin, InvalidOperationError):
    code = "product_already_in_cart"
    field = "product_id"

    def __init__(self, cart_id=None, product_id=None):
        super().__init__(self._init_details(cart_id=cart_id, product_id=product_id))


class CartNotActive(CartErrorMixin, InvalidOperationError):
    code = "cart_not_active"

    def __init__(self, cart_id=None, status=None):
        super().__init__(self._init_details(cart_id=cart_id, status=status))


# ---------------------------------------------------------------------------
# Invariant violations
# ---------------------------------------------------------------------------
class PriceResolutionError(RuntimeError):
    """A cart line references a product the catalogue cannot price.

    Indicates broken referential integrity between carts and the catalogue,
    never bad client input.
    """

    code = "internal_error"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Unable to resolve unit price for product {product_id}")
