"""FastAPI routes for the Carts domain — the session cart and maintenance jobs.

The session is read exactly once per request, here at the boundary; the cart
service only ever sees explicit cart ids.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from carts.api.schemas import (
    CartItemRequest,
    CartRemovedResponse,
    CartResponse,
    ErrorResponse,
    SweepReportResponse,
    SweepRequest,
)
from carts.cart import service
from carts.cart.errors import CartNotFound
from carts.cart.service import CartRemoved
from carts.catalogue.product import Catalogue
from carts.session import SessionCartBinding

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Cart, line or product not found"},
    409: {"model": ErrorResponse, "description": "Product already in cart or cart no longer active"},
    422: {"model": ErrorResponse, "description": "Quantity missing or not positive"},
    500: {"model": ErrorResponse, "description": "Cart references a product that cannot be priced"},
}

cart_router = APIRouter(prefix="/cart", tags=["cart"], responses=_ERROR_RESPONSES)


def _session_cart(request: Request) -> SessionCartBinding:
    return SessionCartBinding(request.session)


def _render(cart) -> CartResponse:
    return CartResponse.from_cart(cart, Catalogue())


@cart_router.get("", response_model=CartResponse)
async def show_cart(request: Request) -> CartResponse:
    cart = service.get_cart(_session_cart(request).get())
    return _render(cart)


@cart_router.post("", response_model=CartResponse)
async def create_cart(request: Request, body: CartItemRequest) -> CartResponse:
    """Add a new product to the session cart, opening the cart on first use."""
    binding = _session_cart(request)
    cart = service.create_cart(binding.get(), body.product_id, body.quantity)
    binding.set(cart.id)
    return _render(cart)


@cart_router.post("/add_item", response_model=CartResponse)
async def add_item(request: Request, body: CartItemRequest) -> CartResponse:
    """Increase the quantity of a product already in the session cart."""
    cart_id = _session_cart(request).get()
    if cart_id is None:
        raise CartNotFound()
    cart = service.add_item(cart_id, body.product_id, body.quantity)
    return _render(cart)


@cart_router.delete("/{product_id}")
async def remove_item(request: Request, product_id: str) -> JSONResponse:
    """Remove a product; the cart itself goes away with its last product."""
    binding = _session_cart(request)
    cart_id = binding.get()
    if cart_id is None:
        raise CartNotFound()

    outcome = service.remove_item(cart_id, product_id)
    if isinstance(outcome, CartRemoved):
        binding.clear()
        body = CartRemovedResponse(message=outcome.message)
    else:
        body = _render(outcome)
    return JSONResponse(status_code=200, content=body.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/abandonment-sweep", response_model=SweepReportResponse)
async def abandonment_sweep(body: SweepRequest | None = None) -> SweepReportResponse:
    """Flag idle carts as abandoned and purge expired ones.

    Designed to be called periodically by an external scheduler. Overlapping
    calls are skipped rather than run twice.
    """
    report = service.sweep_abandoned_carts(as_of=body.as_of if body else None)
    return SweepReportResponse(**report.as_dict())
