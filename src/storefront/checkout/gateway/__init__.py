"""Order placement gateway factory.

Provides get_order_gateway() / set_order_gateway() to swap implementations.
FakeOrderGateway is the only adapter; the STOREFRONT_ORDER_GATEWAY setting
selects it.
"""

from storefront.checkout.gateway.port import OrderGateway
from storefront.config import get_settings

_current_gateway: OrderGateway | None = None


def get_order_gateway() -> OrderGateway:
    """Return the configured order gateway (singleton)."""
    global _current_gateway
    if _current_gateway is None:
        adapter = get_settings().order_gateway
        if adapter == "fake":
            from storefront.checkout.gateway.fake_adapter import FakeOrderGateway

            _current_gateway = FakeOrderGateway()
        else:
            raise ValueError(f"Unknown order gateway: {adapter}")
    return _current_gateway


def set_order_gateway(gateway: OrderGateway) -> None:
    """Override the active order gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_order_gateway() -> None:
    """Reset to the configured gateway."""
    global _current_gateway
    _current_gateway = None
