"""Decimal helpers for monetary amounts.

Prices arrive as floats from the data service and are held as ``Float``
fields on the aggregates. All arithmetic goes through ``to_money`` so that
sums are exact to the smallest currency unit.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Convert a numeric amount to a Decimal rounded half-up to the cent."""
    if isinstance(value, bool):
        raise TypeError(f"Not a monetary amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a monetary amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
