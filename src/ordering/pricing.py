"""Cart pricing: items, shipping, tax, and total for a list of line items.

All arithmetic is done in ``Decimal`` and every amount is rounded on its own
to two places, half away from zero. The total is the sum of the three
already-rounded parts, so the four figures always reconcile exactly.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

FREE_SHIPPING_THRESHOLD = Decimal("100")
FLAT_SHIPPING = Decimal("10")
TAX_RATE = Decimal("0.15")


def round2(value) -> Decimal:
    """Round a number to two decimal places, half away from zero.

    Floats are converted through ``str`` so that ``29.99`` stays ``29.99``
    instead of its binary expansion.
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartPrices:
    items: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    @classmethod
    def zero(cls) -> "CartPrices":
        return cls(items=ZERO, shipping=ZERO, tax=ZERO, total=ZERO)

    def as_floats(self) -> dict[str, float]:
        """Field values as stored on aggregates."""
        return {
            "items_price": float(self.items),
            "shipping_price": float(self.shipping),
            "tax_price": float(self.tax),
            "total_price": float(self.total),
        }


def calculate_prices(lines) -> CartPrices:
    """Price a sequence of lines, each exposing ``price`` and ``quantity``.

    Callers validate the lines beforehand; this function never raises for
    well-typed input.
    """
    items = round2(sum((round2(line.price) * line.quantity for line in lines), ZERO))
    shipping = round2(ZERO if items > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING)
    tax = round2(TAX_RATE * items)
    total = round2(items + shipping + tax)
    return CartPrices(items=items, shipping=shipping, tax=tax, total=total)
