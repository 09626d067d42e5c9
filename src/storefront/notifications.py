"""User-facing notifications (toasts) for cart changes and checkout errors.

Every error kind the cart and checkout raise ends up here rather than as an
uncaught fault: the UI boundary turns it into a transient notification and
carries on.
"""

from dataclasses import asdict, dataclass

import structlog

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved
from storefront.exceptions import (
    CartEmpty,
    InsufficientStock,
    MalformedProduct,
    PaymentFailed,
    PersistenceCorrupt,
    SubmissionInProgress,
    ValidationIncomplete,
)

logger = structlog.get_logger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = DEFAULT

    def to_dict(self) -> dict:
        return asdict(self)


def _field_label(field: str) -> str:
    return field.replace("_", " ")


def notification_for(exc: Exception) -> Notification:
    """The notification shown when ``exc`` reaches the UI boundary."""
    if isinstance(exc, InsufficientStock):
        return Notification("Insufficient stock", f"Only {exc.available} items available", DESTRUCTIVE)
    if isinstance(exc, ValidationIncomplete):
        first = exc.missing_fields[0] if exc.missing_fields else "the required fields"
        return Notification("Missing Information", f"Please fill in {_field_label(first)}", DESTRUCTIVE)
    if isinstance(exc, CartEmpty):
        return Notification("Your cart is empty", "Add some products before checking out", DESTRUCTIVE)
    if isinstance(exc, MalformedProduct):
        return Notification("Product unavailable", "This product could not be added to your cart", DESTRUCTIVE)
    if isinstance(exc, PaymentFailed):
        return Notification("Payment failed", "Please try again or use a different payment method.", DESTRUCTIVE)
    if isinstance(exc, SubmissionInProgress):
        return Notification("Processing...", "Your order is already being placed")
    if isinstance(exc, PersistenceCorrupt):
        return Notification("Cart reset", "Your saved cart could not be restored")

    logger.error("No notification mapping for error", error_type=type(exc).__name__, error=str(exc))
    return Notification("Something went wrong", "Please try again", DESTRUCTIVE)


def notification_for_event(event) -> Notification | None:
    """The notification for a cart event, or None for events shown silently."""
    if isinstance(event, CartItemAdded):
        if event.new_quantity == event.quantity_added:
            return Notification("Added to cart", f"{event.name} has been added to your cart")
        return Notification("Cart updated", f"{event.name} quantity updated to {event.new_quantity}")
    if isinstance(event, CartItemRemoved):
        return Notification("Removed from cart", f"{event.name} has been removed from your cart")
    if isinstance(event, CartCleared):
        return Notification("Cart cleared", "All items have been removed from your cart")
    return None


class NotificationFeed:
    """Cart observer that queues notifications until the UI collects them."""

    def __init__(self) -> None:
        self.pending: list[Notification] = []

    def __call__(self, snapshot, events) -> None:
        for event in events:
            notification = notification_for_event(event)
            if notification is not None:
                self.pending.append(notification)

    def push(self, notification: Notification) -> None:
        self.pending.append(notification)

    def drain(self) -> list[Notification]:
        drained, self.pending = self.pending, []
        return drained
