"""Durable local storage port (abstract interface).

A plain key-value surface holding serialized JSON documents. There are no
transactional guarantees across keys; the storefront uses it purely for
restart recovery, never for concurrency control.
"""

from abc import ABC, abstractmethod

CART_KEY = "cart"
WISHLIST_KEY = "wishlist"


class LocalStorage(ABC):
    """Abstract key-value storage interface."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the JSON document stored under ``key``, or None when absent."""
        ...

    @abstractmethod
    def write(self, key: str, document: str) -> None:
        """Store ``document`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is a no-op."""
        ...
