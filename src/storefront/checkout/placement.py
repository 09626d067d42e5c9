"""Order submission — hands a priced cart to the order gateway.

On success the ordered lines leave the cart; on any failure the cart and
the shipping details are left exactly as they were so the customer can
retry.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

import structlog

from storefront.cart.store import CartSnapshot, CartStore
from storefront.checkout.gateway import get_order_gateway
from storefront.checkout.gateway.port import OrderGateway, OrderLine, OrderRequest
from storefront.checkout.pricing import OrderTotals, compute_totals
from storefront.checkout.shipping import REQUIRED_FIELDS, ShippingDetails, ensure_shipping_complete
from storefront.config import StorefrontSettings
from storefront.exceptions import CartEmpty, PaymentFailed

logger = structlog.get_logger(__name__)


class PaymentMethod(Enum):
    CARD = "card"
    BANK = "bank"
    WALLET = "wallet"


@dataclass(frozen=True)
class OrderConfirmation:
    order_reference: str
    totals: OrderTotals
    payment_method: PaymentMethod
    placed_at: datetime


def build_order_request(store: CartStore, details: ShippingDetails, payment_method: PaymentMethod, totals):
    snapshot = store.snapshot()
    return OrderRequest(
        idempotency_key=f"{store.cart_id}-{uuid4().hex[:12]}",
        lines=tuple(
            OrderLine(
                product_id=item.product_id,
                name=item.name,
                vendor_id=item.vendor_id,
                vendor_name=item.vendor_name,
                unit_price=item.unit_price,
                quantity=item.quantity,
            )
            for item in snapshot.items
        ),
        subtotal=totals.subtotal,
        shipping=totals.shipping,
        tax=totals.tax,
        total=totals.total,
        currency=totals.currency,
        payment_method=payment_method.value,
        shipping_details={field: getattr(details, field) for field in (*REQUIRED_FIELDS, "postal_code")},
    )


def _remove_ordered_lines(store: CartStore, ordered: CartSnapshot) -> None:
    """Take the ordered quantities out of the cart.

    Lines added while the order was in flight stay in the cart.
    """
    if store.snapshot() == ordered:
        store.clear()
        return

    for line in ordered.items:
        current = store.snapshot().find(line.product_id)
        if current is not None:
            store.update_quantity(line.product_id, current.quantity - line.quantity)


async def submit_order(
    store: CartStore,
    details: ShippingDetails,
    payment_method: PaymentMethod,
    gateway: OrderGateway | None = None,
    settings: StorefrontSettings | None = None,
) -> OrderConfirmation:
    """Place an order for the current cart contents.

    Raises ``ValidationIncomplete`` or ``CartEmpty`` before contacting the
    gateway, and ``PaymentFailed`` when the gateway declines or cannot be
    reached.
    """
    ensure_shipping_complete(details)
    snapshot = store.snapshot()
    if snapshot.is_empty:
        raise CartEmpty()

    payment_method = PaymentMethod(payment_method)
    totals = compute_totals(snapshot, settings)
    order = build_order_request(store, details, payment_method, totals)
    gateway = gateway or get_order_gateway()

    logger.info(
        "Submitting order",
        cart_id=store.cart_id,
        idempotency_key=order.idempotency_key,
        total=str(totals.total),
        payment_method=payment_method.value,
    )

    try:
        result = await gateway.submit(order)
    except Exception as exc:
        logger.warning("Order submission errored", idempotency_key=order.idempotency_key, error=str(exc))
        raise PaymentFailed("Please try again or use a different payment method.") from exc

    if not result.success:
        logger.warning(
            "Order submission declined",
            idempotency_key=order.idempotency_key,
            reason=result.failure_reason,
        )
        raise PaymentFailed(result.failure_reason or "Payment failed")

    _remove_ordered_lines(store, snapshot)
    logger.info("Order placed", order_reference=result.order_reference, total=str(totals.total))

    return OrderConfirmation(
        order_reference=result.order_reference,
        totals=totals,
        payment_method=payment_method,
        placed_at=datetime.now(UTC),
    )
