import json
import time

import pytest

from storefront.errors import SignatureError
from storefront.services.payment_events import PaymentIntentSucceeded, UnknownEvent
from storefront.services.webhook_verifier import StripeWebhookVerifier

SECRET = "whsec_unit"


def _payload(event: dict) -> bytes:
    return json.dumps(event).encode()


def test_verify_returns_typed_event(stripe_event, sign_payload):
    raw = _payload(stripe_event("payment_intent.succeeded", "pi_123", amount=2500, currency="usd"))

    event = StripeWebhookVerifier(SECRET).verify(raw, sign_payload(raw, SECRET))

    assert event == PaymentIntentSucceeded(
        event_id="evt_test", payment_intent_id="pi_123", amount=2500, currency="usd"
    )


def test_verify_unknown_event_type(stripe_event, sign_payload):
    raw = _payload(stripe_event("charge.refunded", "ch_1"))

    event = StripeWebhookVerifier(SECRET).verify(raw, sign_payload(raw, SECRET))

    assert isinstance(event, UnknownEvent)
    assert event.type == "charge.refunded"


def test_verify_missing_header(stripe_event):
    raw = _payload(stripe_event("payment_intent.succeeded"))

    with pytest.raises(SignatureError, match="Missing signature"):
        StripeWebhookVerifier(SECRET).verify(raw, None)


def test_verify_wrong_secret(stripe_event, sign_payload):
    raw = _payload(stripe_event("payment_intent.succeeded"))

    with pytest.raises(SignatureError):
        StripeWebhookVerifier(SECRET).verify(raw, sign_payload(raw, "whsec_attacker"))


def test_verify_rejects_reserialized_body(stripe_event, sign_payload):
    event = stripe_event("payment_intent.succeeded", "pi_123")
    signed_raw = json.dumps(event).encode()
    reserialized = json.dumps(event, indent=2).encode()

    with pytest.raises(SignatureError):
        StripeWebhookVerifier(SECRET).verify(reserialized, sign_payload(signed_raw, SECRET))


def test_verify_rejects_stale_timestamp(stripe_event, sign_payload):
    raw = _payload(stripe_event("payment_intent.succeeded"))
    header = sign_payload(raw, SECRET, timestamp=int(time.time()) - 3600)

    with pytest.raises(SignatureError):
        StripeWebhookVerifier(SECRET, tolerance=300).verify(raw, header)


def test_verify_rejects_garbage_header(stripe_event):
    raw = _payload(stripe_event("payment_intent.succeeded"))

    with pytest.raises(SignatureError):
        StripeWebhookVerifier(SECRET).verify(raw, "not-a-signature")


def test_verify_rejects_when_secret_not_configured(stripe_event, sign_payload):
    raw = _payload(stripe_event("payment_intent.succeeded"))

    with pytest.raises(SignatureError, match="not configured"):
        StripeWebhookVerifier("").verify(raw, sign_payload(raw, SECRET))


def test_verify_rejects_signed_non_json_body(sign_payload):
    raw = b"definitely not json"

    with pytest.raises(SignatureError, match="Invalid payload"):
        StripeWebhookVerifier(SECRET).verify(raw, sign_payload(raw, SECRET))
