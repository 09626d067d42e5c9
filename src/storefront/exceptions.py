"""Storefront error kinds.

Rule violations on the cart and the checkout form are Protean
``ValidationError`` subclasses, so callers can read ``messages`` keyed by
field. Collaborator failures (payment, storage, re-entrant submission) are
plain exceptions carrying the details a notification needs.
"""

from protean.exceptions import ValidationError


class InsufficientStock(ValidationError):
    """A cart mutation would push a line item above its stock ceiling."""

    def __init__(self, product_id, requested, available, name=None):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        self.name = name
        super().__init__({"quantity": [f"Only {available} items available"]})


class MalformedProduct(ValidationError):
    """An external product record cannot be converted into a cart line item."""


class CartEmpty(ValidationError):
    """Checkout was attempted on a cart with no line items."""

    def __init__(self):
        super().__init__({"cart": ["Your cart is empty"]})


class ValidationIncomplete(ValidationError):
    """Required shipping fields are missing."""

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__({field: ["This field is required"] for field in self.missing_fields})


class PaymentFailed(Exception):
    """The order-placement collaborator reported failure; the cart is intact."""

    def __init__(self, reason, retryable=True):
        self.reason = reason
        self.retryable = retryable
        super().__init__(reason)


class PersistenceCorrupt(Exception):
    """A durable-storage snapshot could not be deserialized."""

    def __init__(self, key, detail):
        self.key = key
        self.detail = detail
        super().__init__(f"Corrupt snapshot under {key!r}: {detail}")


class SubmissionInProgress(Exception):
    """An order submission is already outstanding for this checkout."""

    def __init__(self):
        super().__init__("An order submission is already in progress")
