"""Translate cart domain errors into HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from carts.cart.errors import (
    CartErrorMixin,
    CartNotActive,
    CartNotFound,
    DuplicateProduct,
    InvalidQuantity,
    ItemNotFound,
    PriceResolutionError,
    ProductNotFound,
    QuantityMustBePositive,
)
from carts.messages import message_for

logger = structlog.get_logger(__name__)

STATUS_CODES = {
    InvalidQuantity: 422,
    QuantityMustBePositive: 422,
    CartNotFound: 404,
    ItemNotFound: 404,
    ProductNotFound: 404,
    DuplicateProduct: 409,
    CartNotActive: 409,
}


def error_body(code: str, message: str | None = None) -> dict:
    return {"error": message or message_for(code), "code": code}


async def cart_error_handler(request: Request, exc: CartErrorMixin) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), 400)
    logger.info(
        "Cart request rejected",
        path=request.url.path,
        code=exc.code,
        status_code=status_code,
        **exc.details,
    )
    return JSONResponse(status_code=status_code, content=error_body(exc.code, exc.message))


async def price_resolution_error_handler(request: Request, exc: PriceResolutionError) -> JSONResponse:
    # Carts pointing at unknown products mean corrupted data; the detail stays in the logs.
    logger.error(
        "Cart references a product the catalogue cannot price",
        path=request.url.path,
        product_id=exc.product_id,
        error=str(exc),
    )
    return JSONResponse(status_code=500, content=error_body(exc.code))


def register_exception_handlers(app: FastAPI) -> None:
    """Install Protean's generic handlers plus the cart-specific ones."""
    register_protean_handlers(app)
    for exc_class in STATUS_CODES:
        app.add_exception_handler(exc_class, cart_error_handler)
    app.add_exception_handler(PriceResolutionError, price_resolution_error_handler)
