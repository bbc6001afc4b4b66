"""Command-line interface for storefront."""

import argparse
import json
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from . import __version__
from .errors import CheckoutValidationError, StorefrontError
from .logging_config import setup_logging
from .models import UserIdentity
from .services import StorefrontServices, build_services
from .utils import (
    format_cart_line,
    format_order,
    format_price,
    format_pricing,
    format_product,
)


@contextmanager
def get_services() -> Iterator[StorefrontServices]:
    """Build services backed by the configured data directory and close them on exit."""
    services = build_services()
    try:
        yield services
    finally:
        services.close()


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def cmd_products(args: argparse.Namespace) -> int:
    """List catalog products."""
    try:
        with get_services() as services:
            if args.category:
                products = services.catalog.list_products_by_category(args.category)
            else:
                products = services.catalog.list_products()

        if args.json:
            print(json.dumps([p.to_dict() for p in products], indent=2))
            return 0

        if not products:
            print("No products found.")
            return 0
        for product in products:
            print(format_product(product))
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_product(args: argparse.Namespace) -> int:
    """Show one catalog product and others from its category."""
    try:
        with get_services() as services:
            product = services.catalog.get_product(args.product_id)
            related = services.catalog.related_products(product)

        if args.json:
            output = product.to_dict()
            output["related"] = [p.to_dict() for p in related]
            print(json.dumps(output, indent=2))
            return 0

        print(f"{product.title}")
        print(f"  ID:       {product.id}")
        print(f"  Price:    {format_price(product.price)}")
        print(f"  Category: {product.category}")
        print(f"  Rating:   {product.rating.rate} ({product.rating.count} reviews)")
        if product.description:
            print(f"  {product.description}")
        if related:
            print("\nRelated:")
            for other in related:
                print(f"  {format_product(other)}")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_categories(args: argparse.Namespace) -> int:
    """List catalog categories."""
    try:
        with get_services() as services:
            categories = services.catalog.list_categories()
        for category in categories:
            print(category)
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _print_cart(services: StorefrontServices, as_json: bool = False) -> None:
    lines = services.cart.items
    pricing = services.checkout.price()

    if as_json:
        output = {
            "items": [line.to_dict() for line in lines],
            "total_items": services.cart.get_total_items(),
            "pricing": pricing.to_dict(),
        }
        print(json.dumps(output, indent=2))
        return

    if not lines:
        print("Cart is empty.")
        return

    print(f"Cart ({services.cart.get_total_items()} item(s)):")
    for line in lines:
        print(f"  {format_cart_line(line)}")
    print()
    print(format_pricing(pricing))


def cmd_cart(args: argparse.Namespace) -> int:
    """Show or change the cart."""
    try:
        with get_services() as services:
            action = args.cart_command or "show"

            if action == "add":
                product = services.catalog.get_product(args.product_id)
                services.cart.add_item(product, args.quantity)
                print(f"Added {args.quantity} x {product.title}")
            elif action == "update":
                services.cart.update_quantity(args.product_id, args.quantity)
            elif action == "remove":
                services.cart.remove_item(args.product_id)
            elif action == "clear":
                services.cart.clear_cart()
                print("Cart cleared.")
                return 0

            _print_cart(services, as_json=getattr(args, "json", False))
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_login(args: argparse.Namespace) -> int:
    """Assign the current identity."""
    try:
        with get_services() as services:
            identity = UserIdentity(
                id=args.user_id, name=args.name or args.user_id, email=args.email or ""
            )
            services.session.login(identity)
        print(f"Logged in as {identity.name} ({identity.id})")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_logout(args: argparse.Namespace) -> int:
    """Clear the current identity. Cart and orders are kept."""
    try:
        with get_services() as services:
            if not services.session.is_authenticated:
                print("Not logged in.")
                return 0
            services.session.logout()
        print("Logged out.")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_whoami(args: argparse.Namespace) -> int:
    """Show the current identity."""
    try:
        with get_services() as services:
            user = services.session.user
        if user is None:
            print("Not logged in (guest).")
        else:
            print(f"{user.name} <{user.email}> ({user.id})")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_orders(args: argparse.Namespace) -> int:
    """List order history."""
    try:
        with get_services() as services:
            owner = args.user or services.session.owner_id
            orders = services.orders.get_orders_by_user_id(owner)
            spent = services.orders.total_spent(owner)

        if args.json:
            print(json.dumps([o.to_dict() for o in orders], indent=2))
            return 0

        if not orders:
            print(f"No orders for {owner}.")
            return 0

        print(f"Orders for {owner} ({len(orders)}):")
        for order in orders:
            print(f"  {format_order(order, verbose=args.verbose)}")
        print(f"\nTotal spent: {format_price(spent)}")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_checkout(args: argparse.Namespace) -> int:
    """Place an order from the cart using a JSON form file."""
    try:
        form_path = Path(args.form)
        try:
            form_data = json.loads(form_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error: Cannot read form {form_path}: {e}", file=sys.stderr)
            return 1

        with get_services() as services:
            order = services.checkout.checkout(form_data, idempotency_key=args.key)

        print(f"Order placed: {order.id}")
        print(f"  Items: {order.item_count}")
        print(f"  Total: {format_price(order.total)}")
        print(f"  Status: {order.status.value}")
        return 0

    except CheckoutValidationError as e:
        print("Error: Invalid checkout input", file=sys.stderr)
        for name, message in sorted(e.field_errors.items()):
            print(f"  {name}: {message}", file=sys.stderr)
        return 1
    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    import uvicorn

    print(f"Starting storefront API server at http://{args.host}:{args.port}")
    print(f"API docs available at http://{args.host}:{args.port}/docs")
    uvicorn.run(
        "storefront.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="storefront",
        description="Browse the catalog, manage the cart and place orders",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level (default: STOREFRONT_LOG_LEVEL or INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # products
    products_parser = subparsers.add_parser("products", help="List catalog products")
    products_parser.add_argument("--category", "-c", help="Only products in this category")
    products_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # product
    product_parser = subparsers.add_parser("product", help="Show one product")
    product_parser.add_argument("product_id", type=int, help="Product ID")
    product_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # categories
    subparsers.add_parser("categories", help="List catalog categories")

    # cart (subcommand group)
    cart_parser = subparsers.add_parser("cart", help="Show or change the cart")
    cart_parser.add_argument("--json", action="store_true", help="Output as JSON")
    cart_subparsers = cart_parser.add_subparsers(dest="cart_command")

    cart_subparsers.add_parser("show", help="Show the cart")

    cart_add_parser = cart_subparsers.add_parser("add", help="Add a product")
    cart_add_parser.add_argument("product_id", type=int, help="Product ID")
    cart_add_parser.add_argument(
        "--quantity", "-q", type=positive_int, default=1, help="How many to add (default: 1)"
    )

    cart_update_parser = cart_subparsers.add_parser("update", help="Set a line's quantity")
    cart_update_parser.add_argument("product_id", type=int, help="Product ID")
    cart_update_parser.add_argument("quantity", type=int, help="New quantity (0 removes)")

    cart_remove_parser = cart_subparsers.add_parser("remove", help="Remove a line")
    cart_remove_parser.add_argument("product_id", type=int, help="Product ID")

    cart_subparsers.add_parser("clear", help="Empty the cart")

    # login
    login_parser = subparsers.add_parser("login", help="Log in as a user (no password)")
    login_parser.add_argument("user_id", help="User ID")
    login_parser.add_argument("--name", "-n", help="Display name (defaults to user ID)")
    login_parser.add_argument("--email", "-e", help="Email address")

    # logout / whoami
    subparsers.add_parser("logout", help="Log out (cart and orders are kept)")
    subparsers.add_parser("whoami", help="Show the current user")

    # orders
    orders_parser = subparsers.add_parser("orders", help="List order history")
    orders_parser.add_argument("--user", "-u", help="User ID (default: current user or guest)")
    orders_parser.add_argument("--json", action="store_true", help="Output as JSON")
    orders_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show items and shipping address"
    )

    # checkout
    checkout_parser = subparsers.add_parser("checkout", help="Place an order from the cart")
    checkout_parser.add_argument("form", help="Path to JSON file with checkout form fields")
    checkout_parser.add_argument(
        "--key", "-k", help="Idempotency key; repeat it to safely retry the same checkout"
    )

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", "-p", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    return parser


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.log_level)

    commands = {
        "products": cmd_products,
        "product": cmd_product,
        "categories": cmd_categories,
        "cart": cmd_cart,
        "login": cmd_login,
        "logout": cmd_logout,
        "whoami": cmd_whoami,
        "orders": cmd_orders,
        "checkout": cmd_checkout,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
