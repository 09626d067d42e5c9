"""Shipping details captured on the checkout form.

Only presence is checked: a required field holding nothing but whitespace
counts as missing, but email and phone formats are left to the order
service.
"""

from protean.fields import String

from storefront.domain import storefront
from storefront.exceptions import ValidationIncomplete

REQUIRED_FIELDS = ("full_name", "email", "phone", "address", "city", "state")


@storefront.value_object
class ShippingDetails:
    """Where the order goes and who to contact about it.

    Form edits produce a new instance; see ``with_changes``.
    """

    full_name = String(max_length=255)
    email = String(max_length=254)
    phone = String(max_length=50)
    address = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)

    @classmethod
    def blank(cls, email=None):
        """An empty form, optionally pre-filled with the signed-in user's email."""
        return cls(email=email) if email else cls()

    def with_changes(self, **changes):
        unknown = set(changes) - set(REQUIRED_FIELDS) - {"postal_code"}
        if unknown:
            raise ValueError(f"Unknown shipping fields: {', '.join(sorted(unknown))}")
        values = {field: getattr(self, field) for field in (*REQUIRED_FIELDS, "postal_code")}
        values.update(changes)
        return ShippingDetails(**{k: v for k, v in values.items() if v is not None})


def validate_shipping(details: ShippingDetails) -> list[str]:
    """Names of required fields that are empty, in form order. Empty list means valid."""
    return [field for field in REQUIRED_FIELDS if not (getattr(details, field, None) or "").strip()]


def ensure_shipping_complete(details: ShippingDetails) -> None:
    missing = validate_shipping(details)
    if missing:
        raise ValidationIncomplete(missing)
