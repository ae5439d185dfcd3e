import logging
from dataclasses import dataclass
from typing import Mapping, Protocol

import stripe

from storefront.errors import GatewayError

logger = logging.getLogger(__name__)

REQUIRED_METADATA_KEYS = ("productId", "userId")


@dataclass(frozen=True)
class PaymentIntent:
    reference_id: str
    client_secret: str


class PaymentIntentGateway(Protocol):
    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent: ...


def validate_intent_request(amount_minor_units: int, currency: str, metadata: Mapping[str, str]) -> None:
    """Reject requests the provider would refuse anyway."""
    if isinstance(amount_minor_units, bool) or not isinstance(amount_minor_units, int):
        raise GatewayError("Amount must be an integer number of minor units")
    if amount_minor_units <= 0:
        raise GatewayError("Amount must be positive")
    if not isinstance(currency, str) or len(currency) != 3 or not currency.isalpha():
        raise GatewayError(f"Invalid currency code: {currency!r}")
    missing = [key for key in REQUIRED_METADATA_KEYS if not metadata.get(key)]
    if missing:
        raise GatewayError(f"Payment intent metadata is missing: {', '.join(missing)}")


class StripePaymentIntentGateway:
    """Create Stripe PaymentIntents with an explicitly supplied API key."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent:
        if not self.api_key:
            raise GatewayError("STRIPE_SECRET_KEY is not set")
        validate_intent_request(amount_minor_units, currency, metadata)

        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor_units,
                currency=currency.lower(),
                metadata={key: str(value) for key, value in metadata.items()},
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error("Stripe rejected payment intent creation: %s", e)
            raise GatewayError(f"Payment provider error: {e.user_message or e}") from e

        if not intent.id or not intent.client_secret:
            raise GatewayError("Payment provider returned an incomplete payment intent")
        return PaymentIntent(reference_id=intent.id, client_secret=intent.client_secret)
