from unittest.mock import MagicMock, patch

import pytest
import stripe

from storefront.errors import GatewayError
from storefront.services.payment_gateway import StripePaymentIntentGateway

METADATA = {"productId": "1", "userId": "7"}


def test_create_intent_success():
    with patch("storefront.services.payment_gateway.stripe.PaymentIntent.create") as mock_create:
        mock_create.return_value = MagicMock(id="pi_123", client_secret="pi_123_secret_xyz")

        intent = StripePaymentIntentGateway(api_key="sk_test_mock").create_intent(2500, "USD", METADATA)

    assert intent.reference_id == "pi_123"
    assert intent.client_secret == "pi_123_secret_xyz"
    mock_create.assert_called_once_with(
        amount=2500,
        currency="usd",
        metadata={"productId": "1", "userId": "7"},
        api_key="sk_test_mock",
    )


def test_create_intent_does_not_touch_global_api_key():
    original = stripe.api_key
    with patch("storefront.services.payment_gateway.stripe.PaymentIntent.create") as mock_create:
        mock_create.return_value = MagicMock(id="pi_123", client_secret="secret")
        StripePaymentIntentGateway(api_key="sk_test_other").create_intent(100, "usd", METADATA)
    assert stripe.api_key == original


def test_create_intent_without_api_key():
    with patch("storefront.services.payment_gateway.stripe.PaymentIntent.create") as mock_create:
        with pytest.raises(GatewayError, match="STRIPE_SECRET_KEY"):
            StripePaymentIntentGateway(api_key="").create_intent(2500, "usd", METADATA)
    mock_create.assert_not_called()


@pytest.mark.parametrize("amount", [0, -5, 12.5, True])
def test_create_intent_rejects_invalid_amount(amount):
    with patch("storefront.services.payment_gateway.stripe.PaymentIntent.create") as mock_create:
        with pytest.raises(GatewayError):
            StripePaymentIntentGateway(api_key="sk_test_mock").create_intent(amount, "usd", METADATA)
    mock_create.assert_not_called()


def test_create_intent_rejects_invalid_currency():
    with pytest.raises(GatewayError, match="Invalid currency"):
        StripePaymentIntentGateway(api_key="sk_test_mock").create_intent(2500, "dollars", METADATA)


def test_create_intent_requires_traceability_metadata():
    with pytest.raises(GatewayError, match="userId"):
        StripePaymentIntentGateway(api_key="sk_test_mock").create_intent(2500, "usd", {"productId": "1"})


def test_create_intent_wraps_stripe_errors():
    with patch("storefront.services.payment_gateway.stripe.PaymentIntent.create") as mock_create:
        mock_create.side_effect = stripe.APIConnectionError("Network unreachable")

        with pytest.raises(GatewayError, match="Network unreachable") as exc_info:
            StripePaymentIntentGateway(api_key="sk_test_mock").create_intent(2500, "usd", METADATA)

    assert isinstance(exc_info.value.__cause__, stripe.APIConnectionError)
