"""Wishlist Store — saved products persisted under the ``wishlist`` key."""

import json

import structlog
from protean.exceptions import ValidationError

from storefront.cart.cart import product_from_record
from storefront.cart.store import CartStore
from storefront.exceptions import PersistenceCorrupt
from storefront.storage import get_storage
from storefront.storage.port import WISHLIST_KEY, LocalStorage
from storefront.wishlist.wishlist import Wishlist

logger = structlog.get_logger(__name__)


class WishlistStore:
    def __init__(self, storage: LocalStorage | None = None, key: str = WISHLIST_KEY) -> None:
        self.storage = storage if storage is not None else get_storage()
        self.key = key
        self._wishlist = self._restore()

    def _restore(self) -> Wishlist:
        try:
            return self._load()
        except PersistenceCorrupt as exc:
            logger.warning("Discarding corrupt wishlist snapshot", key=exc.key, detail=exc.detail)
        except OSError as exc:
            logger.error("Wishlist snapshot could not be read", key=self.key, error=str(exc))
        return Wishlist()

    def _load(self) -> Wishlist:
        try:
            document = self.storage.read(self.key)
            if document is None:
                return Wishlist()
            return Wishlist.from_snapshot(json.loads(document))
        except (ValueError, TypeError, KeyError, RecursionError, ValidationError) as exc:
            raise PersistenceCorrupt(self.key, str(exc) or type(exc).__name__) from exc

    def _persist(self) -> None:
        self.storage.write(self.key, json.dumps(self._wishlist.to_snapshot()))

    @property
    def items(self) -> list[dict]:
        return self._wishlist.to_snapshot()

    def contains(self, product_id) -> bool:
        return self._wishlist.find(product_id) is not None

    def add(self, product) -> bool:
        """Save a product (record or mapping). Saving it twice is a no-op."""
        added = self._wishlist.add(product_from_record(product))
        if added:
            self._persist()
        return added

    def remove(self, product_id) -> bool:
        removed = self._wishlist.remove(product_id)
        if removed:
            self._persist()
        return removed

    def clear(self) -> None:
        self._wishlist.clear()
        self.storage.remove(self.key)

    def move_to_cart(self, product_id, cart: CartStore, quantity=1):
        """Add a saved product to the cart, then drop it from the wishlist.

        If the cart rejects it (``InsufficientStock``) the wishlist keeps it.
        Returns the new cart snapshot, or None when the product is not saved.
        """
        item = self._wishlist.find(product_id)
        if item is None:
            return None

        snapshot = cart.add_item(item.to_product(), quantity)
        self.remove(product_id)
        return snapshot


_current_store: WishlistStore | None = None


def get_wishlist_store() -> WishlistStore:
    global _current_store
    if _current_store is None:
        _current_store = WishlistStore()
    return _current_store


def reset_wishlist_store() -> None:
    global _current_store
    _current_store = None
