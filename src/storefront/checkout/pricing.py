"""Order totals derived from a cart snapshot.

Shipping is waived once the subtotal reaches the free-shipping threshold and
is otherwise a flat fee. Tax is a single flat rate on the subtotal, rounded
half-up to the smallest currency unit, so the grand total is an exact sum of
the three parts.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.cart.store import CartSnapshot
from storefront.config import StorefrontSettings, get_settings
from storefront.exceptions import CartEmpty
from storefront.shared.money import CENT, ZERO, to_money


@dataclass(frozen=True)
class OrderTotals:
    """Financial summary of a cart: subtotal, shipping, tax and grand total."""

    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    currency: str

    @property
    def free_shipping(self) -> bool:
        return self.shipping == ZERO

    def to_dict(self) -> dict:
        return {
            "subtotal": str(self.subtotal),
            "shipping": str(self.shipping),
            "tax": str(self.tax),
            "total": str(self.total),
            "currency": self.currency,
        }


def shipping_fee(subtotal: Decimal, settings: StorefrontSettings) -> Decimal:
    if subtotal >= settings.free_shipping_threshold:
        return ZERO
    return to_money(settings.flat_shipping_fee)


def compute_totals(snapshot: CartSnapshot, settings: StorefrontSettings | None = None) -> OrderTotals:
    """Price a non-empty cart snapshot. Pure; the snapshot is not touched."""
    if snapshot.is_empty:
        raise CartEmpty()

    settings = settings or get_settings()

    subtotal = to_money(snapshot.total)
    shipping = shipping_fee(subtotal, settings)
    tax = (subtotal * settings.tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)

    return OrderTotals(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=subtotal + shipping + tax,
        currency=settings.currency,
    )
