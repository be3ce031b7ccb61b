"""Carts domain API package."""

from carts.api.errors import register_exception_handlers
from carts.api.routes import cart_router, maintenance_router

__all__ = ["cart_router", "maintenance_router", "register_exception_handlers"]
