"""Simulated payment step used by checkout."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from . import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentRequest:
    amount: Decimal
    card_number: str
    card_name: str
    idempotency_key: str


@dataclass(frozen=True)
class PaymentResult:
    approved: bool
    reference: str | None = None
    reason: str | None = None
    cancelled: bool = False


class PaymentGateway(Protocol):
    """Accepts or rejects a charge after a bounded delay.

    Implementations must return early with ``cancelled=True`` once
    ``cancel_event`` is set.
    """

    def charge(self, request: PaymentRequest, cancel_event: threading.Event) -> PaymentResult:
        ...


class SimulatedPaymentGateway:
    """Approves every charge after a fixed delay, except for listed cards."""

    def __init__(
        self,
        delay: float = config.PAYMENT_DELAY_SECONDS,
        declined_cards: frozenset[str] = frozenset(),
    ):
        """
        Initialize SimulatedPaymentGateway.

        Args:
            delay: Seconds to wait before answering.
            declined_cards: Card numbers (digits only) that are always declined.
        """
        self.delay = delay
        self.declined_cards = declined_cards

    def charge(self, request: PaymentRequest, cancel_event: threading.Event) -> PaymentResult:
        if cancel_event.wait(self.delay):
            return PaymentResult(approved=False, reason="cancelled", cancelled=True)

        if request.card_number in self.declined_cards:
            logger.warning(
                "Simulated payment declined",
                extra={"idempotency_key": request.idempotency_key, "amount": str(request.amount)},
            )
            return PaymentResult(approved=False, reason="card declined")

        return PaymentResult(approved=True, reference=f"sim_{uuid.uuid4().hex[:12]}")
