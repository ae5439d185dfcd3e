import json
import logging

import stripe

from storefront.errors import SignatureError
from storefront.services.payment_events import PaymentEvent, parse_event

logger = logging.getLogger(__name__)


class StripeWebhookVerifier:
    """Authenticate raw Stripe webhook bodies and decode them into typed events.

    The signature covers the exact request bytes, so verification must run on
    the raw body before any JSON parsing.
    """

    def __init__(self, secret: str, tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE):
        self.secret = secret
        self.tolerance = tolerance

    def verify(self, raw_payload: bytes, signature_header: str | None) -> PaymentEvent:
        if not self.secret:
            logger.error("STRIPE_WEBHOOK_SECRET is not set, refusing unverifiable webhook")
            raise SignatureError("Webhook secret is not configured")
        if not signature_header:
            raise SignatureError("Missing signature")

        try:
            payload = raw_payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SignatureError("Invalid payload encoding") from e

        try:
            stripe.WebhookSignature.verify_header(payload, signature_header, self.secret, self.tolerance)
        except stripe.SignatureVerificationError as e:
            raise SignatureError(str(e.user_message or e)) from e

        try:
            body = json.loads(payload)
        except ValueError as e:
            raise SignatureError("Invalid payload") from e
        if not isinstance(body, dict):
            raise SignatureError("Invalid payload")

        return parse_event(body)
