"""Carts FastAPI application.

Web server that processes cart commands synchronously via HTTP. The session
cookie carries the cart id; every request runs inside the carts domain
context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from carts.config import load_settings
from carts.domain import carts
from carts.session import SessionCartBinding
from carts.utils.logging import bind_cart_context, clear_context

# Initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the domain.toml overlay (e.g. "production").
carts.init()

settings = load_settings()


def create_app() -> FastAPI:
    from carts.api import cart_router, maintenance_router, register_exception_handlers

    app = FastAPI(
        title="Carts API",
        description="Session shopping carts with abandonment sweeping",
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the carts domain context and tag log lines with the session cart."""
        bind_cart_context(path=request.url.path, cart_id=SessionCartBinding(request.session).get())
        try:
            with carts.domain_context():
                return await call_next(request)
        finally:
            clear_context()

    # Added last so it wraps the domain context: request.session is ready
    # before any route runs.
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret_key, same_site="lax")

    app.include_router(cart_router)
    app.include_router(maintenance_router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": carts.name})

    return app


app = create_app()
