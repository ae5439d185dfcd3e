import logging
from dataclasses import dataclass
from enum import Enum
from typing import assert_never

from storefront.errors import StoreError
from storefront.models import OrderStatus
from storefront.services.order_store import OrderStore
from storefront.services.payment_events import (
    PaymentEvent,
    PaymentIntentCanceled,
    PaymentIntentCreated,
    PaymentIntentFailed,
    PaymentIntentSucceeded,
    UnknownEvent,
)

logger = logging.getLogger(__name__)

# Target status -> statuses it may be entered from.
# Terminal statuses overwrite each other (latest event wins); nothing moves an
# order back to pending.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[str]] = {
    OrderStatus.PENDING: frozenset(),
    OrderStatus.PAID: frozenset({OrderStatus.PENDING.value, OrderStatus.FAILED.value}),
    OrderStatus.FAILED: frozenset({OrderStatus.PENDING.value, OrderStatus.PAID.value}),
}


class ReconcileOutcome(str, Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    ORDER_NOT_FOUND = "order_not_found"
    MISSING_REFERENCE = "missing_reference"
    REJECTED = "rejected"
    STORE_FAILED = "store_failed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ReconcileResult:
    event_type: str
    outcome: ReconcileOutcome
    payment_reference_id: str | None = None
    order_id: int | None = None
    previous_status: str | None = None
    status: str | None = None
    error: str | None = None

    @property
    def needs_attention(self) -> bool:
        return self.outcome is ReconcileOutcome.STORE_FAILED


class EventReconciler:
    """Apply verified payment events to order status.

    reconcile() never raises for unmatched orders or store failures; the
    returned ReconcileResult tells them apart for logging and monitoring.
    """

    def __init__(self, orders: OrderStore):
        self.orders = orders

    def reconcile(self, event: PaymentEvent) -> ReconcileResult:
        match event:
            case PaymentIntentSucceeded():
                logger.info(
                    "PaymentIntent %s succeeded (amount=%s %s)",
                    event.payment_intent_id,
                    event.amount,
                    (event.currency or "").upper(),
                )
                return self._apply(event.type, event.payment_intent_id, OrderStatus.PAID)
            case PaymentIntentFailed():
                logger.info(
                    "PaymentIntent %s failed: %s",
                    event.payment_intent_id,
                    event.failure_message or "no reason given",
                )
                return self._apply(event.type, event.payment_intent_id, OrderStatus.FAILED)
            case PaymentIntentCreated():
                logger.info("PaymentIntent created: %s", event.payment_intent_id)
                return ReconcileResult(event.type, ReconcileOutcome.IGNORED, event.payment_intent_id)
            case PaymentIntentCanceled():
                logger.info("PaymentIntent canceled: %s", event.payment_intent_id)
                return ReconcileResult(event.type, ReconcileOutcome.IGNORED, event.payment_intent_id)
            case UnknownEvent():
                logger.info("Unhandled event type: %s", event.raw_type)
                return ReconcileResult(event.type, ReconcileOutcome.IGNORED)
            case _:
                assert_never(event)

    def _apply(self, event_type: str, reference_id: str | None, target: OrderStatus) -> ReconcileResult:
        if not reference_id:
            logger.warning("%s event carries no payment intent id, nothing to reconcile", event_type)
            return ReconcileResult(event_type, ReconcileOutcome.MISSING_REFERENCE)

        try:
            transition = self.orders.transition_status(
                reference_id, target.value, ALLOWED_TRANSITIONS[target]
            )
        except StoreError as e:
            logger.exception("Database error while updating order for payment intent %s", reference_id)
            return ReconcileResult(
                event_type,
                ReconcileOutcome.STORE_FAILED,
                reference_id,
                error=str(e),
            )

        if transition is None:
            logger.warning(
                "No order found with payment reference %s; acknowledging %s without changes",
                reference_id,
                event_type,
            )
            return ReconcileResult(event_type, ReconcileOutcome.ORDER_NOT_FOUND, reference_id)

        if not transition.allowed:
            logger.warning(
                "Order %s: transition %s -> %s is not allowed, ignoring %s",
                transition.order_id,
                transition.previous_status,
                target.value,
                event_type,
            )
            outcome = ReconcileOutcome.REJECTED
        elif transition.applied:
            outcome = ReconcileOutcome.UPDATED
        else:
            logger.info("Order %s already %s, skipping", transition.order_id, transition.status)
            outcome = ReconcileOutcome.UNCHANGED

        return ReconcileResult(
            event_type,
            outcome,
            reference_id,
            order_id=transition.order_id,
            previous_status=transition.previous_status,
            status=transition.status,
        )
