"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer

from carts.domain import carts


@carts.event(part_of="Cart")
class CartCreated:
    """An empty cart was opened for a session."""

    __version__ = 1

    cart_id = Identifier(required=True)
    created_at = DateTime(required=True)


@carts.event(part_of="Cart")
class CartItemAdded:
    """A new product line was added to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    total_price = Float(required=True)


@carts.event(part_of="Cart")
class CartItemQuantityIncremented:
    """The quantity of an existing cart line was increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    total_price = Float(required=True)


@carts.event(part_of="Cart")
class CartItemRemoved:
    """A product line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    total_price = Float(required=True)


@carts.event(part_of="Cart")
class CartAbandoned:
    """An individual cart was marked as abandoned."""

    __version__ = 1

    cart_id = Identifier(required=True)
    abandoned_at = DateTime(required=True)
