"""Pydantic request/response schemas for the Storefront API.

These are external contracts, separate from the Protean aggregates. Money
is carried as Decimal and therefore serialized as a string.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class NotificationSchema(BaseModel):
    title: str
    description: str
    variant: str = "default"


class LineItemSchema(BaseModel):
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    image_url: str | None = None
    vendor_id: str | None = None
    vendor_name: str
    stock: int


class TotalsSchema(BaseModel):
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    free_shipping: bool


class ShippingSchema(BaseModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product: dict[str, Any]
    quantity: int = Field(default=1, ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product": {
                        "id": "prod-001",
                        "name": "Ankara Print Dress",
                        "price": 15000,
                        "stock": 5,
                        "image_url": "https://cdn.example.com/dress.jpg",
                        "vendor_id": "vend-001",
                        "vendors": {"store_name": "Lagos Looms"},
                    },
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateQuantityRequest(BaseModel):
    quantity: int


class CartResponse(BaseModel):
    items: list[LineItemSchema]
    total: Decimal
    count: int
    notifications: list[NotificationSchema] = []


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------
class AddToWishlistRequest(BaseModel):
    product: dict[str, Any]


class WishlistResponse(BaseModel):
    items: list[dict[str, Any]]
    notifications: list[NotificationSchema] = []


class MoveToCartRequest(BaseModel):
    quantity: int = Field(default=1, ge=1)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------
class SuggestionsResponse(BaseModel):
    query: str
    suggestions: list[dict[str, Any]]


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class OpenCheckoutRequest(BaseModel):
    user_email: str | None = None


class PaymentMethodRequest(BaseModel):
    payment_method: str = Field(pattern="^(card|bank|wallet)$")


class CheckoutResponse(BaseModel):
    state: str
    payment_method: str
    shipping: ShippingSchema | None = None
    missing_fields: list[str] = []
    totals: TotalsSchema | None = None


class OrderPlacedResponse(BaseModel):
    order_reference: str
    totals: TotalsSchema
    payment_method: str
    notifications: list[NotificationSchema] = []
