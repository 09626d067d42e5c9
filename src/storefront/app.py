"""Storefront FastAPI application.

Serves the session cart, the wishlist, search suggestions and the checkout
flow over HTTP. Every request runs inside the storefront domain context.

Usage:
    uvicorn storefront.app:create_app --factory --host 0.0.0.0 --port 8000 --reload
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api import (
    cart_router,
    checkout_router,
    install_error_handlers,
    search_router,
    wishlist_router,
)
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, configure_logging

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Initialize the domain and build the application."""
    configure_logging()
    storefront.init()

    app = FastAPI(
        title="Storefront API",
        description="Session cart, wishlist and checkout",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context for each request."""
        add_context(method=request.method, path=request.url.path)
        try:
            with storefront.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        return response

    app.include_router(cart_router)
    app.include_router(wishlist_router)
    app.include_router(search_router)
    app.include_router(checkout_router)
    install_error_handlers(app)

    @app.get("/health")
    async def health():
        settings = get_settings()
        return JSONResponse(
            content={
                "status": "ok",
                "domain": storefront.name,
                "storage_backend": settings.storage_backend,
                "order_gateway": settings.order_gateway,
            }
        )

    logger.info("Storefront application created", domain=storefront.name)
    return app
