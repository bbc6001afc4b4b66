"""Subtotal to shipping, tax and total."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from . import config

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "subtotal": str(self.subtotal),
            "shipping": str(self.shipping),
            "tax": str(self.tax),
            "total": str(self.total),
        }


def compute_pricing(
    subtotal: Decimal,
    free_shipping_threshold: Decimal = config.FREE_SHIPPING_THRESHOLD,
    shipping_fee: Decimal = config.SHIPPING_FEE,
    tax_rate: Decimal = config.TAX_RATE,
) -> PriceBreakdown:
    """
    Derive shipping, tax and total from a cart subtotal.

    Shipping is free strictly above the threshold. Tax applies to the
    subtotal only and is rounded half-up to cents.
    """
    subtotal = Decimal(subtotal)
    shipping = Decimal("0.00") if subtotal > free_shipping_threshold else shipping_fee
    tax = (subtotal * tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)
    total = subtotal + shipping + tax
    return PriceBreakdown(subtotal=subtotal, shipping=shipping, tax=tax, total=total)
