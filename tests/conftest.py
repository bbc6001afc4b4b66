"""Pytest fixtures for storefront tests."""

import json
import tempfile
from decimal import Decimal
from pathlib import Path

import httpx
import pytest

from storefront.catalog import CatalogClient
from storefront.models import Product, Rating, UserIdentity
from storefront.payment import SimulatedPaymentGateway
from storefront.services import build_memory_services, build_services

CATALOG_URL = "https://catalog.test"

PRODUCTS = [
    {
        "id": 1,
        "title": "Backpack",
        "price": 109.95,
        "description": "Fits 15 inch laptops",
        "category": "men's clothing",
        "image": "https://catalog.test/img/1.jpg",
        "rating": {"rate": 3.9, "count": 120},
    },
    {
        "id": 2,
        "title": "T-Shirt",
        "price": 10.0,
        "description": "Slim fit",
        "category": "men's clothing",
        "image": "https://catalog.test/img/2.jpg",
        "rating": {"rate": 4.1, "count": 259},
    },
    {
        "id": 3,
        "title": "Bracelet",
        "price": 2.5,
        "description": "Silver",
        "category": "jewelery",
        "image": "https://catalog.test/img/3.jpg",
        "rating": {"rate": 4.6, "count": 400},
    },
]

VALID_FORM = {
    "email": "jane@example.com",
    "full_name": "Jane Doe",
    "address": "123 Main Street",
    "city": "New York",
    "postal_code": "10001",
    "country": "USA",
    "card_number": "4242 4242 4242 4242",
    "expiry_date": "12/29",
    "cvv": "123",
    "card_name": "Jane Doe",
}

DECLINED_CARD = "4000000000000002"


def catalog_handler(request: httpx.Request) -> httpx.Response:
    """Serve PRODUCTS the way the remote catalog does."""
    path = request.url.path
    if path == "/products":
        return httpx.Response(200, json=PRODUCTS)
    if path == "/products/categories":
        return httpx.Response(200, json=sorted({p["category"] for p in PRODUCTS}))
    if path.startswith("/products/category/"):
        category = path[len("/products/category/"):]
        return httpx.Response(200, json=[p for p in PRODUCTS if p["category"] == category])
    if path.startswith("/products/"):
        product_id = int(path.rsplit("/", 1)[1])
        for p in PRODUCTS:
            if p["id"] == product_id:
                return httpx.Response(200, json=p)
        # Unknown IDs come back as 200 with an empty body
        return httpx.Response(200, content=b"")
    return httpx.Response(404, json={"detail": "not found"})


def make_catalog(handler=catalog_handler) -> CatalogClient:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return CatalogClient(base_url=CATALOG_URL, http_client=client)


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def catalog():
    client = make_catalog()
    yield client
    client.http_client.close()


@pytest.fixture
def payment():
    """Instant simulated payment that declines DECLINED_CARD."""
    return SimulatedPaymentGateway(delay=0, declined_cards=frozenset({DECLINED_CARD}))


@pytest.fixture
def services(catalog, payment):
    """Services with in-memory records."""
    return build_memory_services(catalog=catalog, payment=payment)


@pytest.fixture
def file_services(temp_dir, catalog, payment):
    """Services with JSON records under temp_dir."""
    return build_services(data_dir=temp_dir, catalog=catalog, payment=payment)


@pytest.fixture
def backpack() -> Product:
    return Product.from_dict(PRODUCTS[0])


@pytest.fixture
def tshirt() -> Product:
    return Product.from_dict(PRODUCTS[1])


@pytest.fixture
def bracelet() -> Product:
    return Product.from_dict(PRODUCTS[2])


@pytest.fixture
def jane() -> UserIdentity:
    return UserIdentity(id="user-1", name="Jane Doe", email="jane@example.com")


def make_product(product_id: int, price: str, title: str = "Item") -> Product:
    return Product(
        id=product_id,
        title=f"{title} {product_id}",
        price=Decimal(price),
        category="misc",
        rating=Rating(Decimal("4.0"), 1),
    )


def write_form(path: Path, **overrides) -> Path:
    form = dict(VALID_FORM, **overrides)
    path.write_text(json.dumps(form), encoding="utf-8")
    return path
