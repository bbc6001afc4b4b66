"""Tests for CatalogClient."""

from decimal import Decimal

import httpx
import pytest

from conftest import PRODUCTS, make_catalog
from storefront.errors import CatalogError, ProductNotFoundError
from storefront.models import Product


class TestCatalogClient:
    def test_list_products(self, catalog):
        products = catalog.list_products()

        assert [p.id for p in products] == [1, 2, 3]
        assert products[0].price == Decimal("109.95")
        assert products[0].rating.count == 120

    def test_get_product(self, catalog):
        product = catalog.get_product(2)

        assert product.title == "T-Shirt"
        assert product.price == Decimal("10.0")
        assert product.category == "men's clothing"

    def test_get_unknown_product_with_empty_body(self, catalog):
        with pytest.raises(ProductNotFoundError) as exc_info:
            catalog.get_product(999)

        assert exc_info.value.product_id == 999

    def test_get_unknown_product_404(self):
        client = make_catalog(lambda request: httpx.Response(404))

        with pytest.raises(ProductNotFoundError):
            client.get_product(5)

    def test_list_categories(self, catalog):
        assert catalog.list_categories() == ["jewelery", "men's clothing"]

    def test_list_products_by_category(self, catalog):
        products = catalog.list_products_by_category("men's clothing")

        assert [p.id for p in products] == [1, 2]

    def test_unknown_category_is_empty(self, catalog):
        assert catalog.list_products_by_category("toys") == []

    def test_server_error_surfaces(self):
        client = make_catalog(lambda request: httpx.Response(503))

        with pytest.raises(CatalogError) as exc_info:
            client.list_products()

        assert "503" in exc_info.value.reason

    def test_transport_error_surfaces(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_catalog(handler)

        with pytest.raises(CatalogError):
            client.get_product(1)
        with pytest.raises(CatalogError):
            client.list_categories()

    def test_invalid_json_surfaces(self):
        client = make_catalog(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(CatalogError):
            client.list_products()

    def test_malformed_product_surfaces(self):
        client = make_catalog(lambda request: httpx.Response(200, json=[{"id": 1}]))

        with pytest.raises(CatalogError):
            client.list_products()


class TestRelatedProducts:
    def test_same_category_without_the_product(self, catalog, backpack):
        related = catalog.related_products(backpack)

        assert [p.id for p in related] == [2]

    def test_only_product_in_category(self, catalog, bracelet):
        assert catalog.related_products(bracelet) == []

    def test_limit(self):
        shirts = [
            dict(PRODUCTS[1], id=product_id, title=f"Shirt {product_id}")
            for product_id in range(10, 20)
        ]
        client = make_catalog(lambda request: httpx.Response(200, json=shirts))
        product = Product.from_dict(shirts[0])

        assert [p.id for p in client.related_products(product)] == [11, 12, 13, 14]
        assert [p.id for p in client.related_products(product, limit=2)] == [11, 12]

    def test_zero_limit(self, catalog, backpack):
        assert catalog.related_products(backpack, limit=0) == []

    def test_catalog_failure_surfaces(self, backpack):
        client = make_catalog(lambda request: httpx.Response(500))

        with pytest.raises(CatalogError):
            client.related_products(backpack)
