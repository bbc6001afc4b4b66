"""Integration tests for CLI."""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from conftest import PRODUCTS, write_form
from storefront.cart_store import CartStore
from storefront.models import Product
from storefront.order_store import OrderStore
from storefront.persistence import JsonFileRepository


def run_storefront(args: list[str], data_dir: Path) -> subprocess.CompletedProcess:
    """Run storefront CLI command against an isolated data directory."""
    env = dict(os.environ)
    env["STOREFRONT_DATA_DIR"] = str(data_dir)
    env["STOREFRONT_PAYMENT_DELAY"] = "0"
    # Nothing in these tests should reach the network
    env["STOREFRONT_CATALOG_URL"] = "http://127.0.0.1:9"
    env["STOREFRONT_CATALOG_TIMEOUT"] = "1"
    return subprocess.run(
        [sys.executable, "-m", "storefront.cli"] + args,
        cwd=data_dir,
        capture_output=True,
        text=True,
        env=env,
    )


@pytest.fixture
def data_dir(temp_dir):
    path = temp_dir / "data"
    path.mkdir()
    return path


def seed_cart(data_dir: Path, quantity: int = 1) -> None:
    cart = CartStore(JsonFileRepository("cart-storage", data_dir))
    cart.add_item(Product.from_dict(PRODUCTS[1]), quantity)


class TestCLIIntegration:
    def test_no_command_prints_help(self, data_dir):
        result = run_storefront([], data_dir)

        assert result.returncode == 0
        assert "usage" in result.stdout

    def test_login_whoami_logout(self, data_dir):
        result = run_storefront(["login", "user-1", "--name", "Jane", "--email", "jane@example.com"], data_dir)
        assert result.returncode == 0
        assert "Logged in as Jane" in result.stdout
        assert (data_dir / "user-storage.json").exists()

        result = run_storefront(["whoami"], data_dir)
        assert "Jane <jane@example.com> (user-1)" in result.stdout

        result = run_storefront(["logout"], data_dir)
        assert "Logged out." in result.stdout

        result = run_storefront(["whoami"], data_dir)
        assert "Not logged in" in result.stdout

    def test_cart_show_empty(self, data_dir):
        result = run_storefront(["cart"], data_dir)

        assert result.returncode == 0
        assert "Cart is empty." in result.stdout

    def test_cart_update_and_json(self, data_dir):
        seed_cart(data_dir)

        result = run_storefront(["cart", "--json", "update", "2", "3"], data_dir)

        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert data["total_items"] == 3
        assert data["pricing"]["total"] == "42.39"

    def test_cart_remove_and_clear(self, data_dir):
        seed_cart(data_dir, 2)

        result = run_storefront(["cart", "remove", "2"], data_dir)
        assert "Cart is empty." in result.stdout

        seed_cart(data_dir)
        result = run_storefront(["cart", "clear"], data_dir)
        assert "Cart cleared." in result.stdout

    @pytest.mark.parametrize("quantity", ["0", "-1", "two"])
    def test_cart_add_rejects_bad_quantity(self, data_dir, quantity):
        result = run_storefront(["cart", "add", "2", f"--quantity={quantity}"], data_dir)

        assert result.returncode == 2
        assert "--quantity" in result.stderr
        assert "Added" not in result.stdout
        assert not (data_dir / "cart-storage.json").exists()

    def test_catalog_failure_is_reported(self, data_dir):
        result = run_storefront(["cart", "add", "2"], data_dir)

        assert result.returncode == 1
        assert "Catalog request failed" in result.stderr

    def test_checkout_places_order(self, data_dir, temp_dir):
        seed_cart(data_dir)
        run_storefront(["login", "user-1"], data_dir)
        form = write_form(temp_dir / "form.json")

        result = run_storefront(["checkout", str(form)], data_dir)

        assert result.returncode == 0, result.stderr
        assert "Order placed" in result.stdout
        assert "$20.79" in result.stdout

        orders = OrderStore(JsonFileRepository("order-storage", data_dir)).get_orders_by_user_id("user-1")
        assert len(orders) == 1

        result = run_storefront(["orders", "--verbose"], data_dir)
        assert "Orders for user-1 (1)" in result.stdout
        assert "1 x T-Shirt" in result.stdout
        assert "Total spent: $20.79" in result.stdout

    def test_checkout_empty_cart(self, data_dir, temp_dir):
        form = write_form(temp_dir / "form.json")

        result = run_storefront(["checkout", str(form)], data_dir)

        assert result.returncode == 1
        assert "Cart is empty" in result.stderr

    def test_checkout_validation_errors(self, data_dir, temp_dir):
        seed_cart(data_dir)
        form = write_form(temp_dir / "form.json", cvv="1")

        result = run_storefront(["checkout", str(form)], data_dir)

        assert result.returncode == 1
        assert "cvv: CVV must be at least 3 digits" in result.stderr

    def test_checkout_retry_with_key(self, data_dir, temp_dir):
        seed_cart(data_dir)
        form = write_form(temp_dir / "form.json")

        first = run_storefront(["checkout", str(form), "--key", "k-1"], data_dir)
        second = run_storefront(["checkout", str(form), "--key", "k-1"], data_dir)

        assert first.returncode == 0
        assert second.returncode == 0
        assert first.stdout.splitlines()[0] == second.stdout.splitlines()[0]
        assert len(OrderStore(JsonFileRepository("order-storage", data_dir)).list_orders()) == 1

    def test_orders_empty(self, data_dir):
        result = run_storefront(["orders", "--user", "nobody"], data_dir)

        assert result.returncode == 0
        assert "No orders for nobody." in result.stdout
