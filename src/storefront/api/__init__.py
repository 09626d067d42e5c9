"""Storefront API package."""

from storefront.api.errors import install_error_handlers
from storefront.api.routes import cart_router, checkout_router, search_router, wishlist_router

__all__ = ["cart_router", "wishlist_router", "search_router", "checkout_router", "install_error_handlers"]
