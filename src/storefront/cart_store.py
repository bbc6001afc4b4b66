"""Shopping cart store."""

import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator

from .models import CartLine, Product
from .persistence import StateRepository


class CartStore:
    """Holds the current cart and derives its totals.

    Every mutation is applied under the store's lock and persisted before it
    becomes visible. At most one line exists per product ID and no line has a
    quantity below 1.
    """

    def __init__(self, repository: StateRepository):
        """
        Initialize CartStore, restoring any persisted cart.

        Args:
            repository: Where the "cart-storage" record is kept.
        """
        self.repository = repository
        self._lock = threading.RLock()
        self._lines: list[CartLine] = []

        state = repository.load()
        if state:
            self._lines = [CartLine.from_dict(line) for line in state.get("items", [])]

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the cart lock, blocking other mutations until released."""
        with self._lock:
            yield

    def _commit(self, lines: list[CartLine]) -> None:
        # Persist first so a failed save leaves the visible cart untouched
        self.repository.save({"items": [line.to_dict() for line in lines]})
        self._lines = lines

    def _index_of(self, product_id: int) -> int | None:
        for i, line in enumerate(self._lines):
            if line.id == product_id:
                return i
        return None

    @property
    def items(self) -> list[CartLine]:
        """Current lines in insertion order."""
        with self._lock:
            return list(self._lines)

    def snapshot(self) -> tuple[CartLine, ...]:
        """Immutable copy of the current lines."""
        with self._lock:
            return tuple(self._lines)

    def get_line(self, product_id: int) -> CartLine | None:
        with self._lock:
            idx = self._index_of(product_id)
            return None if idx is None else self._lines[idx]

    def is_empty(self) -> bool:
        with self._lock:
            return not self._lines

    def add_item(self, product: Product, quantity: int = 1) -> None:
        """
        Add a product to the cart.

        Increments the existing line for ``product.id`` or appends a new one.
        A non-positive ``quantity`` leaves the cart unchanged.
        """
        if quantity <= 0:
            return

        with self._lock:
            lines = list(self._lines)
            idx = self._index_of(product.id)
            if idx is None:
                lines.append(CartLine.from_product(product, quantity))
            else:
                lines[idx] = lines[idx].with_quantity(lines[idx].quantity + quantity)
            self._commit(lines)

    def remove_item(self, product_id: int) -> None:
        """Remove the line for ``product_id``. Absent IDs are ignored."""
        with self._lock:
            if self._index_of(product_id) is None:
                return
            self._commit([line for line in self._lines if line.id != product_id])

    def update_quantity(self, product_id: int, quantity: int) -> None:
        """
        Set the quantity of a line.

        A quantity of zero or less removes the line. Absent IDs are ignored.
        """
        if quantity <= 0:
            self.remove_item(product_id)
            return

        with self._lock:
            idx = self._index_of(product_id)
            if idx is None:
                return
            lines = list(self._lines)
            lines[idx] = lines[idx].with_quantity(quantity)
            self._commit(lines)

    def clear_cart(self) -> None:
        """Remove all lines."""
        with self._lock:
            self._commit([])

    def get_total_price(self) -> Decimal:
        """Sum of price * quantity over all lines."""
        with self._lock:
            return sum((line.line_total for line in self._lines), Decimal("0"))

    def get_total_items(self) -> int:
        """Sum of quantities over all lines."""
        with self._lock:
            return sum(line.quantity for line in self._lines)
