"""Utility functions for storefront."""

from decimal import Decimal

from .models import CartLine, Order, Product
from .pricing import PriceBreakdown


def format_price(amount: Decimal) -> str:
    """Format an amount as dollars, e.g. "$1,234.50"."""
    return f"${Decimal(amount):,.2f}"


def truncate_id(order_id: str) -> str:
    """Truncate an order ID for display."""
    return order_id[:8]


def format_product(product: Product) -> str:
    """Format a catalog product for display."""
    return f"{product.id:>4}  {format_price(product.price):>10}  {product.title} [{product.category}]"


def format_cart_line(line: CartLine) -> str:
    return (
        f"{line.id:>4}  {line.quantity:>3} x {format_price(line.price):>10}"
        f"  = {format_price(line.line_total):>10}  {line.title}"
    )


def format_pricing(pricing: PriceBreakdown) -> str:
    """Format a price breakdown as aligned summary lines."""
    shipping = "Free" if pricing.shipping == 0 else format_price(pricing.shipping)
    return "\n".join(
        [
            f"  Subtotal: {format_price(pricing.subtotal):>12}",
            f"  Shipping: {shipping:>12}",
            f"  Tax:      {format_price(pricing.tax):>12}",
            f"  Total:    {format_price(pricing.total):>12}",
        ]
    )


def format_order(order: Order, verbose: bool = False) -> str:
    """Format an order for display."""
    count = len(order.items)
    result = (
        f"{truncate_id(order.id)}  {order.created_at[:10]}  {order.status.value:<10}"
        f"  {format_price(order.total):>10}  ({count} item{'s' if count != 1 else ''})"
    )

    if verbose:
        for line in order.items:
            result += f"\n    {line.quantity} x {line.title} @ {format_price(line.price)}"
        addr = order.shipping_address
        result += f"\n    Ship to: {addr.full_name}, {addr.address}, {addr.city} {addr.postal_code}, {addr.country}"

    return result
