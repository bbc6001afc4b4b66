"""Wiring of stores, catalog and checkout into one container."""

from dataclasses import dataclass
from pathlib import Path

from . import config
from .cart_store import CartStore
from .catalog import CatalogClient
from .checkout import CheckoutService
from .order_store import OrderStore
from .payment import PaymentGateway, SimulatedPaymentGateway
from .persistence import JsonFileRepository, MemoryRepository
from .session_store import SessionStore


@dataclass
class StorefrontServices:
    """Everything a caller (API, CLI, tests) needs, built once and passed around."""

    cart: CartStore
    session: SessionStore
    orders: OrderStore
    catalog: CatalogClient
    checkout: CheckoutService

    def close(self) -> None:
        self.catalog.close()


def _assemble(
    cart: CartStore,
    session: SessionStore,
    orders: OrderStore,
    catalog: CatalogClient | None,
    payment: PaymentGateway | None,
) -> StorefrontServices:
    return StorefrontServices(
        cart=cart,
        session=session,
        orders=orders,
        catalog=catalog or CatalogClient(),
        checkout=CheckoutService(cart, session, orders, payment or SimulatedPaymentGateway()),
    )


def build_services(
    data_dir: Path | None = None,
    catalog: CatalogClient | None = None,
    payment: PaymentGateway | None = None,
) -> StorefrontServices:
    """
    Build services backed by JSON records in ``data_dir``.

    Args:
        data_dir: Override data directory (defaults to STOREFRONT_DATA_DIR).
        catalog: Catalog client to use instead of the default remote one.
        payment: Payment gateway to use instead of the simulated default.
    """
    data_dir = data_dir or config.DATA_DIR
    return _assemble(
        CartStore(JsonFileRepository(config.CART_RECORD, data_dir)),
        SessionStore(JsonFileRepository(config.SESSION_RECORD, data_dir)),
        OrderStore(JsonFileRepository(config.ORDER_RECORD, data_dir)),
        catalog,
        payment,
    )


def build_memory_services(
    catalog: CatalogClient | None = None,
    payment: PaymentGateway | None = None,
) -> StorefrontServices:
    """Build services that keep their records in memory only."""
    return _assemble(
        CartStore(MemoryRepository(config.CART_RECORD)),
        SessionStore(MemoryRepository(config.SESSION_RECORD)),
        OrderStore(MemoryRepository(config.ORDER_RECORD)),
        catalog,
        payment,
    )
