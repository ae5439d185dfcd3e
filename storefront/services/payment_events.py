"""Typed payment-lifecycle events decoded from Stripe webhook payloads."""

from dataclasses import dataclass
from typing import Any, Mapping, Union

PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
PAYMENT_INTENT_CREATED = "payment_intent.created"
PAYMENT_INTENT_CANCELED = "payment_intent.canceled"


@dataclass(frozen=True)
class PaymentIntentSucceeded:
    event_id: str | None
    payment_intent_id: str | None
    amount: int | None = None
    currency: str | None = None

    type = PAYMENT_INTENT_SUCCEEDED


@dataclass(frozen=True)
class PaymentIntentFailed:
    event_id: str | None
    payment_intent_id: str | None
    failure_message: str | None = None

    type = PAYMENT_INTENT_FAILED


@dataclass(frozen=True)
class PaymentIntentCreated:
    event_id: str | None
    payment_intent_id: str | None

    type = PAYMENT_INTENT_CREATED


@dataclass(frozen=True)
class PaymentIntentCanceled:
    event_id: str | None
    payment_intent_id: str | None

    type = PAYMENT_INTENT_CANCELED


@dataclass(frozen=True)
class UnknownEvent:
    event_id: str | None
    raw_type: str

    @property
    def type(self) -> str:
        return self.raw_type


PaymentEvent = Union[
    PaymentIntentSucceeded,
    PaymentIntentFailed,
    PaymentIntentCreated,
    PaymentIntentCanceled,
    UnknownEvent,
]


def _as_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_event(payload: Mapping[str, Any]) -> PaymentEvent:
    """Map a decoded Stripe event to one of the known event kinds.

    The payment intent is read from ``data.object``. Anything that is not a
    payment intent lifecycle event becomes an UnknownEvent.
    """
    event_id = _as_str(payload.get("id"))
    event_type = str(payload.get("type") or "")
    data = payload.get("data")
    obj = data.get("object") if isinstance(data, Mapping) else None
    if not isinstance(obj, Mapping):
        obj = {}
    intent_id = _as_str(obj.get("id"))

    if event_type == PAYMENT_INTENT_SUCCEEDED:
        return PaymentIntentSucceeded(
            event_id=event_id,
            payment_intent_id=intent_id,
            amount=_as_int(obj.get("amount")),
            currency=_as_str(obj.get("currency")),
        )
    if event_type == PAYMENT_INTENT_FAILED:
        last_error = obj.get("last_payment_error")
        failure_message = last_error.get("message") if isinstance(last_error, Mapping) else None
        return PaymentIntentFailed(
            event_id=event_id,
            payment_intent_id=intent_id,
            failure_message=_as_str(failure_message),
        )
    if event_type == PAYMENT_INTENT_CREATED:
        return PaymentIntentCreated(event_id=event_id, payment_intent_id=intent_id)
    if event_type == PAYMENT_INTENT_CANCELED:
        return PaymentIntentCanceled(event_id=event_id, payment_intent_id=intent_id)
    return UnknownEvent(event_id=event_id, raw_type=event_type)
