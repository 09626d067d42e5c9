"""Cart Store — the one owned cart instance shared by every UI surface.

The store wraps the ``ShoppingCart`` aggregate with three duties:

* write-through persistence: after each successful mutation the snapshot is
  written to durable local storage before the call returns, and a failed
  write leaves the cart as it was;
* restart recovery: on construction the last snapshot is read back, and a
  missing or corrupt snapshot yields an empty cart instead of an error;
* change notification: observers subscribed with ``subscribe()`` receive the
  new ``CartSnapshot`` together with the domain events the mutation raised.

Mutations run synchronously and each one computes its successor state from
the state left by the previous one, so rapid sequential UI events apply in
the order received.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError

from storefront.cart.cart import ShoppingCart, product_from_record
from storefront.exceptions import PersistenceCorrupt
from storefront.shared.money import ZERO, to_money
from storefront.storage import get_storage
from storefront.storage.port import CART_KEY, LocalStorage

logger = structlog.get_logger(__name__)

CartObserver = Callable[["CartSnapshot", list], None]


@dataclass(frozen=True)
class LineItemView:
    """Read-only copy of a cart line item."""

    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    image_url: str | None
    vendor_id: str | None
    vendor_name: str
    stock: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartSnapshot:
    """The full state of the cart at a point in time."""

    items: tuple[LineItemView, ...] = ()
    total: Decimal = ZERO
    count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id) -> LineItemView | None:
        return next((i for i in self.items if i.product_id == str(product_id)), None)


class CartStore:
    """Stock-bounded session cart with write-through persistence."""

    def __init__(self, storage: LocalStorage | None = None, key: str = CART_KEY) -> None:
        self.storage = storage if storage is not None else get_storage()
        self.key = key
        self._observers: list[CartObserver] = []
        self._cart = self._restore()
        self._snapshot = self._build_snapshot()

    # -------------------------------------------------------------------
    # Restart recovery
    # -------------------------------------------------------------------
    def _restore(self) -> ShoppingCart:
        try:
            return self._load()
        except PersistenceCorrupt as exc:
            logger.warning("Discarding corrupt cart snapshot", key=exc.key, detail=exc.detail)
        except OSError as exc:
            logger.error("Cart snapshot could not be read", key=self.key, error=str(exc))
        return ShoppingCart.create()

    def _load(self) -> ShoppingCart:
        # Undecodable bytes surface from read() as UnicodeDecodeError, a ValueError
        try:
            document = self.storage.read(self.key)
            if document is None:
                return ShoppingCart.create()
            cart = ShoppingCart.from_snapshot(json.loads(document))
        except (ValueError, TypeError, KeyError, RecursionError, ValidationError) as exc:
            raise PersistenceCorrupt(self.key, str(exc) or type(exc).__name__) from exc

        logger.debug("Restored cart from storage", key=self.key, item_count=len(cart.items))
        return cart

    def _persist(self) -> None:
        self.storage.write(self.key, json.dumps(self._cart.to_snapshot()))

    # -------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------
    def subscribe(self, observer: CartObserver) -> Callable[[], None]:
        """Register ``observer(snapshot, events)``; returns an unsubscribe callable."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, events: list) -> None:
        for observer in list(self._observers):
            try:
                observer(self._snapshot, events)
            except Exception:
                logger.exception("Cart observer failed", observer=getattr(observer, "__qualname__", repr(observer)))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def cart_id(self) -> str:
        return str(self._cart.id)

    @property
    def items(self) -> tuple[LineItemView, ...]:
        return self._snapshot.items

    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    def total(self) -> Decimal:
        return self._snapshot.total

    def count(self) -> int:
        return self._snapshot.count

    def _build_snapshot(self) -> CartSnapshot:
        items = tuple(
            LineItemView(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=to_money(item.unit_price),
                quantity=item.quantity,
                image_url=item.image_url,
                vendor_id=str(item.vendor_id) if item.vendor_id else None,
                vendor_name=item.vendor_name,
                stock=item.stock,
            )
            for item in self._cart.items
        )
        return CartSnapshot(items=items, total=self._cart.total(), count=self._cart.count())

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _apply(self, mutation: Callable[[ShoppingCart], None]) -> CartSnapshot:
        previous = self._cart.to_snapshot()
        mutation(self._cart)

        events = list(self._cart._events)
        self._cart._events.clear()
        if not events:
            return self._snapshot

        try:
            self._persist()
        except Exception:
            logger.error("Cart snapshot could not be written; change reverted", key=self.key)
            self._cart = ShoppingCart.from_snapshot(previous, cart_id=self._cart.id)
            self._cart._events.clear()
            raise
        self._snapshot = self._build_snapshot()
        self._notify(events)
        return self._snapshot

    def add_item(self, product, quantity=1) -> CartSnapshot:
        """Add a product (record or mapping) to the cart.

        Raises ``MalformedProduct`` for unusable records and
        ``InsufficientStock`` when the stock ceiling would be exceeded.
        """
        record = product_from_record(product)
        snapshot = self._apply(lambda cart: cart.add_item(record, quantity))
        logger.debug("Cart item added", product_id=record.product_id, quantity=quantity, count=snapshot.count)
        return snapshot

    def update_quantity(self, product_id, new_quantity) -> CartSnapshot:
        return self._apply(lambda cart: cart.update_quantity(product_id, new_quantity))

    def remove_item(self, product_id) -> CartSnapshot:
        return self._apply(lambda cart: cart.remove_item(product_id))

    def clear(self) -> CartSnapshot:
        snapshot = self._apply(lambda cart: cart.clear())
        logger.info("Cart cleared", cart_id=self.cart_id)
        return snapshot


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------
_current_store: CartStore | None = None


def get_cart_store() -> CartStore:
    """Return the process-wide cart store, restoring it from storage on first use."""
    global _current_store
    if _current_store is None:
        _current_store = CartStore()
    return _current_store


def set_cart_store(store: CartStore) -> None:
    """Override the process-wide cart store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_cart_store() -> None:
    global _current_store
    _current_store = None
