"""Pydantic request/response schemas for the Carts API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, field_serializer

from carts.cart.cart import Cart
from carts.cart.errors import PriceResolutionError, ProductNotFound
from carts.cart.pricing import to_decimal


def _money(value) -> str:
    # 20 -> "20.0", 15.50 -> "15.5"
    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return f"{int(amount)}.0"
    return format(amount.normalize(), "f")


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CartItemRequest(BaseModel):
    product_id: str
    quantity: int | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                }
            ]
        }
    }


class SweepRequest(BaseModel):
    as_of: datetime | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartLineResponse(BaseModel):
    id: str
    product_id: str
    name: str | None = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    @field_serializer("unit_price", "total_price")
    def serialize_money(self, value: Decimal) -> str:
        return _money(value)


class CartResponse(BaseModel):
    id: str
    status: str
    products: list[CartLineResponse]
    total_price: Decimal
    last_interaction_at: datetime | None = None

    @field_serializer("total_price")
    def serialize_total(self, value: Decimal) -> str:
        return _money(value)

    @classmethod
    def from_cart(cls, cart: Cart, catalogue) -> "CartResponse":
        lines = []
        for item in cart.items:
            try:
                product = catalogue.product(item.product_id)
            except ProductNotFound:
                raise PriceResolutionError(str(item.product_id)) from None
            unit_price = to_decimal(product.price)
            lines.append(
                CartLineResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    name=product.name,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    total_price=unit_price * item.quantity,
                )
            )
        return cls(
            id=str(cart.id),
            status=cart.status,
            products=lines,
            total_price=to_decimal(cart.total_price),
            last_interaction_at=cart.last_interaction_at,
        )


class CartRemovedResponse(BaseModel):
    message: str


class SweepFailureResponse(BaseModel):
    cart_id: str | None = None
    error: str
    stage: str


class SweepReportResponse(BaseModel):
    marked_count: int
    deleted_count: int
    failures: list[SweepFailureResponse]
    skipped: bool = False


class ErrorResponse(BaseModel):
    error: str
    code: str
