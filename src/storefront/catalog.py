"""Client for the remote product catalog."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from . import config
from .errors import CatalogError, ProductNotFoundError
from .models import Product

logger = logging.getLogger(__name__)


class CatalogClient:
    """Reads products and categories from the catalog REST service.

    Transport errors and non-200 answers raise CatalogError; they are never
    turned into empty results.
    """

    def __init__(
        self,
        base_url: str = config.CATALOG_BASE_URL,
        http_client: httpx.Client | None = None,
        timeout: float = config.CATALOG_TIMEOUT,
    ):
        """
        Initialize CatalogClient.

        Args:
            base_url: Catalog root URL.
            http_client: Preconfigured client (e.g. with a mock transport for tests).
            timeout: Request timeout in seconds when creating our own client.
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.http_client.close()

    def __enter__(self) -> "CatalogClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, path: str) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.http_client.get(url)
        except httpx.HTTPError as e:
            logger.error("Catalog request failed", extra={"url": url, "error": str(e)})
            raise CatalogError(url, str(e)) from e
        return response

    def _get_json(self, path: str) -> Any:
        return self._decode(self._get(path))

    def _decode(self, response: httpx.Response) -> Any:
        if response.status_code != 200:
            logger.warning(
                "Catalog returned non-200 status",
                extra={"url": str(response.request.url), "status_code": response.status_code},
            )
            raise CatalogError(str(response.request.url), f"HTTP {response.status_code}")
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise CatalogError(str(response.request.url), f"invalid JSON: {e}") from e

    def _products(self, data: Any, path: str) -> list[Product]:
        if not isinstance(data, list):
            raise CatalogError(f"{self.base_url}{path}", "expected a list of products")
        try:
            return [Product.from_dict(p) for p in data]
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise CatalogError(f"{self.base_url}{path}", f"malformed product: {e}") from e

    def list_products(self) -> list[Product]:
        """List every product in the catalog."""
        path = "/products"
        return self._products(self._get_json(path), path)

    def get_product(self, product_id: int) -> Product:
        """
        Get a product by ID.

        Raises:
            ProductNotFoundError: If the catalog has no such product.
            CatalogError: If the request fails.
        """
        path = f"/products/{product_id}"
        response = self._get(path)
        if response.status_code == 404:
            raise ProductNotFoundError(product_id)

        # The upstream service answers unknown IDs with 200 and an empty body
        data = self._decode(response)
        if not data:
            raise ProductNotFoundError(product_id)
        try:
            return Product.from_dict(data)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise CatalogError(str(response.request.url), f"malformed product: {e}") from e

    def list_categories(self) -> list[str]:
        """List category names."""
        data = self._get_json("/products/categories")
        if not isinstance(data, list):
            raise CatalogError(f"{self.base_url}/products/categories", "expected a list")
        return [str(c) for c in data]

    def list_products_by_category(self, category: str) -> list[Product]:
        """List products in ``category``."""
        path = f"/products/category/{quote(category, safe='')}"
        return self._products(self._get_json(path), path)

    def related_products(self, product: Product, limit: int = 4) -> list[Product]:
        """Up to ``limit`` other products from ``product``'s category, in catalog order."""
        if limit <= 0:
            return []
        others = [
            p for p in self.list_products_by_category(product.category) if p.id != product.id
        ]
        return others[:limit]
