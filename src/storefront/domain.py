"""Storefront bounded context — Shopping Cart, Wishlist and Checkout.

Holds the session cart (stock-bounded line items written through to durable
local storage), the saved-products wishlist, and the checkout flow that
prices a cart snapshot and hands it to the order-placement gateway.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
