"""Order placement gateway port (abstract interface).

The data service creates the order and the payment provider takes the money;
to the storefront both are one asynchronous call that either confirms the
order or reports why it failed. Adapters implement ``submit`` and nothing
else.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    name: str
    vendor_id: str | None
    vendor_name: str
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class OrderRequest:
    """Everything the order service needs to create and charge an order."""

    idempotency_key: str
    lines: tuple[OrderLine, ...]
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    payment_method: str
    shipping_details: dict


@dataclass(frozen=True)
class PlacementResult:
    """Result of an order placement attempt."""

    success: bool
    order_reference: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class OrderGateway(ABC):
    """Abstract order placement interface."""

    @abstractmethod
    async def submit(self, order: OrderRequest) -> PlacementResult:
        """Create and pay for an order in a single call."""
        ...
