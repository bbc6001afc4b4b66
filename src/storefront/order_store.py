"""Order history store."""

import copy
import logging
import threading
from dataclasses import replace
from decimal import Decimal

from .errors import DuplicateOrderError, InvalidStatusTransitionError, OrderNotFoundError
from .models import STATUS_TRANSITIONS, Order, OrderStatus
from .persistence import StateRepository

logger = logging.getLogger(__name__)


class OrderStore:
    """Append-only history of placed orders.

    Orders are never removed or reordered. Only an order's status may change
    after it has been added. Reads return copies.
    """

    def __init__(self, repository: StateRepository):
        """
        Initialize OrderStore, restoring any persisted history.

        Args:
            repository: Where the "order-storage" record is kept.
        """
        self.repository = repository
        self._lock = threading.RLock()
        self._orders: list[Order] = []

        state = repository.load()
        if state:
            self._orders = [Order.from_dict(o) for o in state.get("orders", [])]

    def _commit(self, orders: list[Order]) -> None:
        self.repository.save({"orders": [o.to_dict() for o in orders]})
        self._orders = orders

    def _find(self, order_id: str) -> int | None:
        for i, order in enumerate(self._orders):
            if order.id == order_id:
                return i
        return None

    def add_order(self, order: Order) -> None:
        """
        Append an order to the history.

        Raises:
            DuplicateOrderError: If an order with the same ID is already recorded.
        """
        with self._lock:
            if self._find(order.id) is not None:
                logger.error("Refusing to overwrite recorded order", extra={"order_id": order.id})
                raise DuplicateOrderError(order.id)
            self._commit(self._orders + [copy.deepcopy(order)])

    def list_orders(self) -> list[Order]:
        """All orders in insertion order."""
        with self._lock:
            return copy.deepcopy(self._orders)

    def get_orders_by_user_id(self, user_id: str) -> list[Order]:
        """Orders owned by ``user_id`` in insertion order. Empty if none."""
        with self._lock:
            return [copy.deepcopy(o) for o in self._orders if o.user_id == user_id]

    def get_order(self, order_id: str) -> Order:
        """
        Get an order by ID.

        Raises:
            OrderNotFoundError: If the order doesn't exist.
        """
        with self._lock:
            idx = self._find(order_id)
            if idx is None:
                raise OrderNotFoundError(order_id)
            return copy.deepcopy(self._orders[idx])

    def find_by_idempotency_key(self, key: str) -> Order | None:
        with self._lock:
            for order in self._orders:
                if order.idempotency_key == key:
                    return copy.deepcopy(order)
            return None

    def total_spent(self, user_id: str) -> Decimal:
        """Sum of order totals for ``user_id``."""
        with self._lock:
            return sum(
                (o.total for o in self._orders if o.user_id == user_id), Decimal("0")
            )

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """
        Move an order to a new status.

        Returns:
            The updated order.

        Raises:
            OrderNotFoundError: If the order doesn't exist.
            InvalidStatusTransitionError: If the move isn't allowed.
        """
        status = OrderStatus(status)
        with self._lock:
            idx = self._find(order_id)
            if idx is None:
                raise OrderNotFoundError(order_id)

            current = self._orders[idx]
            if status not in STATUS_TRANSITIONS[current.status]:
                raise InvalidStatusTransitionError(order_id, current.status.value, status.value)

            orders = list(self._orders)
            orders[idx] = replace(current, status=status)
            self._commit(orders)
            logger.info(
                "Order status changed",
                extra={"order_id": order_id, "from": current.status.value, "to": status.value},
            )
            return copy.deepcopy(orders[idx])
