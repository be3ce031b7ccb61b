"""User-facing messages, keyed by error code."""

MESSAGES = {
    "cart_not_found": "Cart not found",
    "cart_not_active": "Cart is no longer active",
    "product_not_found": "Product not found",
    "product_not_found_in_cart": "Product not found in cart",
    "product_already_in_cart": "Product already in cart",
    "quantity_must_be_positive": "Quantity must be greater than zero",
    "invalid_quantity": "Quantity must be a positive integer",
    "cart_removed_empty": "Cart removed because it is empty",
    "internal_error": "Something went wrong while processing the cart",
}


def message_for(code: str) -> str:
    return MESSAGES.get(code, code)
