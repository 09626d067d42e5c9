"""Storefront settings loaded from the environment.

Every field can be overridden with a ``STOREFRONT_``-prefixed variable, e.g.
``STOREFRONT_FREE_SHIPPING_THRESHOLD=75000``. Amounts are in the storefront's
single currency (Naira by default).
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorefrontSettings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pricing
    free_shipping_threshold: Decimal = Field(default=Decimal("50000"), ge=0)
    flat_shipping_fee: Decimal = Field(default=Decimal("2500"), ge=0)
    tax_rate: Decimal = Field(default=Decimal("0.075"), ge=0, le=1)
    currency: str = "NGN"

    # Durable local storage
    storage_backend: str = "memory"
    storage_path: Path = Path(".storefront")

    # Order placement
    order_gateway: str = "fake"

    # Product suggestions
    suggestion_debounce_ms: int = Field(default=300, ge=0)
    suggestion_min_length: int = Field(default=2, ge=1)
    suggestion_limit: int = Field(default=5, ge=1)


@lru_cache()
def get_settings() -> StorefrontSettings:
    """Get cached settings instance"""
    return StorefrontSettings()
