"""Configurable fake order gateway for development and testing.

Simulates order creation and payment without any external calls. It can be
configured at runtime to succeed, to report a declined payment, or to raise
a connection error as a dropped network call would.
"""

import asyncio
from uuid import uuid4

from storefront.checkout.gateway.port import OrderGateway, OrderRequest, PlacementResult


class FakeOrderGateway(OrderGateway):
    """Configurable fake order gateway."""

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined"
        self.raise_error: bool = False
        self.calls: list[OrderRequest] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Payment declined",
        raise_error: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_error = raise_error

    async def submit(self, order: OrderRequest) -> PlacementResult:
        self.calls.append(order)

        if self.latency:
            await asyncio.sleep(self.latency)

        if self.raise_error:
            raise ConnectionError("Order service unreachable")

        if self.should_succeed:
            return PlacementResult(
                success=True,
                order_reference=f"fake_ord_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return PlacementResult(
            success=False,
            gateway_status="failed",
            failure_reason=self.failure_reason,
        )
