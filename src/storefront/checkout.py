"""Checkout orchestration.

A checkout attempt turns the current cart, the session identity and the
collected form into an order:

    idle -> processing -> complete
              |
              +-> idle (payment declined, cancelled, storage failure)

Validation failures never leave ``idle``. The attempt holds the cart lock
from the moment it snapshots the cart until the cart is cleared, so
concurrent cart mutations wait instead of racing the order snapshot.

Each attempt carries an idempotency key that is stored on the order it
creates. Submitting again with the same key, from the same attempt or a new
one, returns the original order instead of charging and appending twice.
"""

import logging
import threading
import uuid
from enum import Enum
from typing import Any

from .cart_store import CartStore
from .errors import (
    CheckoutCancelledError,
    CheckoutInProgressError,
    CheckoutValidationError,
    EmptyCartError,
    PaymentDeclinedError,
    StorefrontError,
)
from .models import Order, OrderStatus, _generate_id, _utc_now
from .order_store import OrderStore
from .payment import PaymentGateway, PaymentRequest
from .pricing import PriceBreakdown, compute_pricing
from .session_store import SessionStore
from .validation import CheckoutForm, validate_checkout_form

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETE = "complete"


class CheckoutAttempt:
    """State machine for one checkout attempt."""

    def __init__(self, service: "CheckoutService", idempotency_key: str):
        self.service = service
        self.idempotency_key = idempotency_key
        self.state = CheckoutState.IDLE
        self.order: Order | None = None
        self.field_errors: dict[str, str] = {}
        self.error: StorefrontError | None = None
        self._cancel_event = threading.Event()
        self._submit_lock = threading.Lock()

    def cancel(self) -> None:
        """
        Ask the attempt to stop.

        Takes effect until the payment step has answered; a cancelled attempt
        returns to idle without creating an order.
        """
        if self.state != CheckoutState.COMPLETE:
            self._cancel_event.set()

    def submit(self, form_data: dict[str, Any] | CheckoutForm) -> Order:
        """
        Run the attempt.

        Returns:
            The placed order (or the previously placed one on replay).

        Raises:
            CheckoutValidationError: Form failed validation. State stays idle.
            EmptyCartError: Nothing left in the cart to order.
            PaymentDeclinedError: Payment step rejected the charge.
            CheckoutCancelledError: ``cancel()`` was called before payment answered.
            CheckoutInProgressError: Another submit of this attempt is running.
        """
        if not self._submit_lock.acquire(blocking=False):
            raise CheckoutInProgressError(self.idempotency_key)
        try:
            if self.state == CheckoutState.COMPLETE and self.order is not None:
                return self.order
            return self._run(form_data)
        finally:
            self._submit_lock.release()

    def _run(self, form_data: dict[str, Any] | CheckoutForm) -> Order:
        service = self.service
        self.error = None

        try:
            form = validate_checkout_form(form_data)
        except CheckoutValidationError as e:
            self.field_errors = e.field_errors
            self.error = e
            raise
        self.field_errors = {}

        with service.cart.locked():
            replayed = service.orders.find_by_idempotency_key(self.idempotency_key)
            if replayed is not None:
                return self._finish_replay(replayed)

            if service.cart.is_empty():
                self.error = EmptyCartError()
                raise self.error

            snapshot = service.cart.snapshot()
            pricing = service.price(service.cart.get_total_price())

            self.state = CheckoutState.PROCESSING
            logger.info(
                "Checkout processing",
                extra={"idempotency_key": self.idempotency_key, "total": str(pricing.total)},
            )
            try:
                payment_reference = self._pay(form, pricing)
                order = Order(
                    id=_generate_id(),
                    user_id=service.session.owner_id,
                    items=snapshot,
                    subtotal=pricing.subtotal,
                    shipping=pricing.shipping,
                    tax=pricing.tax,
                    total=pricing.total,
                    shipping_address=form.shipping_address(),
                    status=OrderStatus.PROCESSING,
                    created_at=_utc_now(),
                    idempotency_key=self.idempotency_key,
                    payment_reference=payment_reference,
                )
                service.orders.add_order(order)
                service.cart.clear_cart()
            except StorefrontError as e:
                self.state = CheckoutState.IDLE
                self.error = e
                raise
            except Exception:
                self.state = CheckoutState.IDLE
                raise

        self.order = order
        self.state = CheckoutState.COMPLETE
        logger.info(
            "Order placed",
            extra={"order_id": order.id, "user_id": order.user_id, "total": str(order.total)},
        )
        return order

    def _pay(self, form: CheckoutForm, pricing: PriceBreakdown) -> str | None:
        request = PaymentRequest(
            amount=pricing.total,
            card_number=form.card_number,
            card_name=form.card_name,
            idempotency_key=self.idempotency_key,
        )
        if self._cancel_event.is_set():
            result = None
        else:
            result = self.service.payment.charge(request, self._cancel_event)

        if result is None or result.cancelled:
            self._cancel_event.clear()
            logger.info("Checkout cancelled", extra={"idempotency_key": self.idempotency_key})
            raise CheckoutCancelledError(self.idempotency_key)
        if not result.approved:
            raise PaymentDeclinedError(result.reason)
        return result.reference

    def _finish_replay(self, order: Order) -> Order:
        # An interrupted attempt may have appended the order without clearing the cart
        if self.service.cart.snapshot() == order.items:
            self.service.cart.clear_cart()
        logger.info(
            "Checkout replayed",
            extra={"order_id": order.id, "idempotency_key": self.idempotency_key},
        )
        self.order = order
        self.state = CheckoutState.COMPLETE
        return order


class CheckoutService:
    """Sequences the cart, session and order stores into checkout attempts."""

    def __init__(
        self,
        cart: CartStore,
        session: SessionStore,
        orders: OrderStore,
        payment: PaymentGateway,
    ):
        self.cart = cart
        self.session = session
        self.orders = orders
        self.payment = payment

    def price(self, subtotal=None) -> PriceBreakdown:
        """Pricing for ``subtotal``, or for the current cart when omitted."""
        if subtotal is None:
            subtotal = self.cart.get_total_price()
        return compute_pricing(subtotal)

    def begin(self, idempotency_key: str | None = None) -> CheckoutAttempt:
        """
        Start a checkout attempt.

        Args:
            idempotency_key: Client key for safe retries. Generated when omitted.

        Raises:
            EmptyCartError: If the cart is empty and the key has no recorded order.
        """
        key = idempotency_key or uuid.uuid4().hex
        if self.cart.is_empty() and self.orders.find_by_idempotency_key(key) is None:
            raise EmptyCartError()
        return CheckoutAttempt(self, key)

    def checkout(
        self,
        form_data: dict[str, Any] | CheckoutForm,
        idempotency_key: str | None = None,
    ) -> Order:
        """Begin an attempt and submit it in one call."""
        return self.begin(idempotency_key).submit(form_data)
