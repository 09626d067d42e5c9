"""Shopping Cart aggregate — the session cart held on the client.

The cart owns a collection of line items, one per product. Each line item
remembers the stock ceiling the product had when it entered the cart, and
every mutation is checked against that ceiling before anything changes: a
rejected mutation leaves the cart exactly as it was.

Product payloads from the data service are loosely shaped. They are turned
into a ``ProductRecord`` once, by ``product_from_record``, before the cart
sees them.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront
from storefront.exceptions import InsufficientStock, MalformedProduct
from storefront.shared.money import ZERO, to_money

UNKNOWN_VENDOR = "Unknown Vendor"

_REQUIRED_PRODUCT_KEYS = ("id", "name", "price", "stock")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object
class ProductRecord:
    """A product as offered to the cart: price and stock as seen right now."""

    product_id = String(required=True, max_length=255)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    image_url = String(max_length=2048)
    vendor_id = String(max_length=255)
    vendor_name = String(max_length=255, default=UNKNOWN_VENDOR)
    stock = Integer(required=True, min_value=0)


def product_from_record(record) -> ProductRecord:
    """Convert an external product record into a ``ProductRecord``.

    Accepts the data service's shape, where the vendor's display name may sit
    in a nested ``vendors.store_name``. Raises ``MalformedProduct`` for
    anything that would otherwise produce a partial line item.
    """
    if isinstance(record, ProductRecord):
        return record
    if not isinstance(record, Mapping):
        raise MalformedProduct({"product": ["Product record must be a mapping"]})

    missing = [key for key in _REQUIRED_PRODUCT_KEYS if record.get(key) in (None, "")]
    if missing:
        raise MalformedProduct({key: ["This field is required"] for key in missing})

    price, stock = record["price"], record["stock"]
    if isinstance(price, bool) or not isinstance(price, (int, float, Decimal, str)):
        raise MalformedProduct({"price": [f"Invalid price: {price!r}"]})
    try:
        price = float(to_money(price))
    except ValueError:
        raise MalformedProduct({"price": [f"Invalid price: {price!r}"]}) from None
    if isinstance(stock, bool) or not isinstance(stock, int):
        raise MalformedProduct({"stock": [f"Invalid stock: {stock!r}"]})

    vendor_name = record.get("vendor_name")
    vendors = record.get("vendors")
    if not vendor_name and isinstance(vendors, Mapping):
        vendor_name = vendors.get("store_name")

    vendor_id = record.get("vendor_id")
    try:
        return ProductRecord(
            product_id=str(record["id"]),
            name=str(record["name"]),
            price=price,
            image_url=record.get("image_url") or None,
            vendor_id=str(vendor_id) if vendor_id is not None else None,
            vendor_name=vendor_name or UNKNOWN_VENDOR,
            stock=stock,
        )
    except ValidationError as exc:
        raise MalformedProduct(exc.messages) from exc


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="ShoppingCart")
class CartLineItem:
    """One product at a chosen quantity, bounded by its stock ceiling."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_url = String(max_length=2048)
    vendor_id = Identifier()
    vendor_name = String(max_length=255, default=UNKNOWN_VENDOR)
    stock = Integer(required=True, min_value=0)

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price) * self.quantity

    def to_record(self) -> dict:
        """Serialized form used in the ``cart`` storage snapshot."""
        return {
            "id": str(self.product_id),
            "name": self.name,
            "price": self.unit_price,
            "quantity": self.quantity,
            "image_url": self.image_url,
            "vendor_id": str(self.vendor_id) if self.vendor_id else None,
            "vendor_name": self.vendor_name,
            "stock": self.stock,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class ShoppingCart:
    items = HasMany(CartLineItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def quantities_must_stay_within_stock(self):
        for item in self.items:
            if item.quantity > item.stock:
                raise ValidationError({"quantity": [f"Only {item.stock} items available"]})

    @invariant.post
    def products_must_be_unique(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in the cart"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, cart_id=None):
        now = datetime.now(UTC)
        if cart_id is None:
            return cls(created_at=now, updated_at=now)
        return cls(id=cart_id, created_at=now, updated_at=now)

    @classmethod
    def from_snapshot(cls, records, cart_id=None):
        """Rebuild a cart from the records written by ``to_snapshot``.

        Raises ``ValidationError`` (or ``TypeError``/``KeyError``) when a
        record is malformed or breaks a cart invariant.
        """
        if not isinstance(records, list):
            raise ValidationError({"items": ["Cart snapshot must be a list"]})

        cart = cls.create(cart_id)
        for record in records:
            if not isinstance(record, Mapping):
                raise ValidationError({"items": ["Cart snapshot entries must be objects"]})
            if cart.find(record["id"]) is not None:
                raise ValidationError({"items": [f"Duplicate product {record['id']!r} in snapshot"]})
            if int(record["quantity"]) > int(record["stock"]):
                raise ValidationError({"quantity": [f"Only {record['stock']} items available"]})
            cart.add_items(
                CartLineItem(
                    product_id=str(record["id"]),
                    name=record["name"],
                    unit_price=record["price"],
                    quantity=record["quantity"],
                    image_url=record.get("image_url"),
                    vendor_id=record.get("vendor_id"),
                    vendor_name=record.get("vendor_name") or UNKNOWN_VENDOR,
                    stock=record["stock"],
                )
            )
        return cart

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def total(self) -> Decimal:
        """Sum of unit price times quantity over all line items."""
        return sum((item.line_total for item in self.items), ZERO)

    def count(self) -> int:
        """Sum of quantities over all line items."""
        return sum(item.quantity for item in self.items)

    def to_snapshot(self) -> list[dict]:
        return [item.to_record() for item in self.items]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product: ProductRecord, quantity=1):
        """Add ``quantity`` units of a product, topping up an existing line item.

        The whole call is rejected with ``InsufficientStock`` when the
        resulting quantity would exceed the product's stock.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.find(product.product_id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if new_quantity > product.stock:
            raise InsufficientStock(product.product_id, new_quantity, product.stock, name=product.name)

        now = datetime.now(UTC)

        if existing:
            # Refresh the ceiling first; it is at least new_quantity here.
            existing.stock = product.stock
            existing.quantity = new_quantity
        else:
            self.add_items(
                CartLineItem(
                    product_id=product.product_id,
                    name=product.name,
                    unit_price=product.price,
                    quantity=quantity,
                    image_url=product.image_url,
                    vendor_id=product.vendor_id,
                    vendor_name=product.vendor_name or UNKNOWN_VENDOR,
                    stock=product.stock,
                )
            )

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product.product_id),
                name=product.name,
                quantity_added=quantity,
                new_quantity=new_quantity,
                unit_price=product.price,
            )
        )

    def update_quantity(self, product_id, new_quantity):
        """Set a line item's quantity exactly; zero or less removes it.

        Unknown products are ignored.
        """
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int):
            raise ValidationError({"quantity": ["Quantity must be a whole number"]})

        if new_quantity <= 0:
            self.remove_item(product_id)
            return

        item = self.find(product_id)
        if item is None:
            return

        if new_quantity > item.stock:
            raise InsufficientStock(product_id, new_quantity, item.stock, name=item.name)

        previous_quantity = item.quantity
        if previous_quantity == new_quantity:
            return

        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a line item. Removing a product not in the cart is a no-op."""
        item = self.find(product_id)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                name=item.name,
            )
        )

    def clear(self):
        """Remove every line item."""
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))
