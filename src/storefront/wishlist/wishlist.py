"""Wishlist aggregate — products saved for later, one row per product."""

from collections.abc import Mapping
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.cart import UNKNOWN_VENDOR, ProductRecord
from storefront.domain import storefront


@storefront.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    image_url = String(max_length=2048)
    vendor_id = Identifier()
    vendor_name = String(max_length=255, default=UNKNOWN_VENDOR)
    stock = Integer(required=True, min_value=0)
    added_at = DateTime()

    def to_record(self) -> dict:
        return {
            "id": str(self.product_id),
            "name": self.name,
            "price": self.price,
            "image_url": self.image_url,
            "vendor_id": str(self.vendor_id) if self.vendor_id else None,
            "vendor_name": self.vendor_name,
            "stock": self.stock,
            "added_at": self.added_at.isoformat() if self.added_at else None,
        }

    def to_product(self) -> ProductRecord:
        return ProductRecord(
            product_id=str(self.product_id),
            name=self.name,
            price=self.price,
            image_url=self.image_url,
            vendor_id=str(self.vendor_id) if self.vendor_id else None,
            vendor_name=self.vendor_name,
            stock=self.stock,
        )


@storefront.aggregate
class Wishlist:
    items = HasMany(WishlistItem)

    @invariant.post
    def products_must_be_unique(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in the wishlist"]})

    @classmethod
    def from_snapshot(cls, records):
        if not isinstance(records, list):
            raise ValidationError({"items": ["Wishlist snapshot must be a list"]})

        wishlist = cls()
        for record in records:
            if not isinstance(record, Mapping):
                raise ValidationError({"items": ["Wishlist snapshot entries must be objects"]})
            added_at = record.get("added_at")
            wishlist.add_items(
                WishlistItem(
                    product_id=str(record["id"]),
                    name=record["name"],
                    price=record["price"],
                    image_url=record.get("image_url"),
                    vendor_id=record.get("vendor_id"),
                    vendor_name=record.get("vendor_name") or UNKNOWN_VENDOR,
                    stock=record["stock"],
                    added_at=datetime.fromisoformat(added_at) if added_at else None,
                )
            )
        return wishlist

    def find(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def add(self, product: ProductRecord) -> bool:
        """Save a product. Returns False when it was already saved."""
        if self.find(product.product_id) is not None:
            return False

        self.add_items(
            WishlistItem(
                product_id=product.product_id,
                name=product.name,
                price=product.price,
                image_url=product.image_url,
                vendor_id=product.vendor_id,
                vendor_name=product.vendor_name or UNKNOWN_VENDOR,
                stock=product.stock,
                added_at=datetime.now(UTC),
            )
        )
        return True

    def remove(self, product_id) -> bool:
        item = self.find(product_id)
        if item is None:
            return False
        self.remove_items(item)
        return True

    def clear(self) -> None:
        for item in list(self.items):
            self.remove_items(item)

    def to_snapshot(self) -> list[dict]:
        return [item.to_record() for item in self.items]
