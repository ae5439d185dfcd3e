import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from storefront.dependencies import get_event_reconciler, get_webhook_verifier
from storefront.errors import SignatureError
from storefront.services.reconciler import EventReconciler
from storefront.services.webhook_verifier import StripeWebhookVerifier

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/stripe",
    summary="Stripe webhook",
)
async def stripe_webhook(
    request: Request,
    verifier: Annotated[StripeWebhookVerifier, Depends(get_webhook_verifier)],
    reconciler: Annotated[EventReconciler, Depends(get_event_reconciler)],
):
    """
    Stripe sends payment_intent events here. Succeeded/failed events move the
    matching order to paid/failed; everything else is acknowledged and ignored.
    Any authentic event is acknowledged with 200, even when no order matches or
    the update fails, so Stripe does not keep redelivering it.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    try:
        event = verifier.verify(payload, sig_header)
    except SignatureError as e:
        logger.error("Webhook signature verification failed: %s", e)
        return PlainTextResponse(f"Webhook Error: {e}", status_code=status.HTTP_400_BAD_REQUEST)

    logger.info("Stripe event %s received: %s", event.event_id, event.type)
    result = reconciler.reconcile(event)
    if result.needs_attention:
        logger.error(
            "Stripe event %s (%s) acknowledged but not applied: outcome=%s reference=%s error=%s",
            event.event_id,
            result.event_type,
            result.outcome.value,
            result.payment_reference_id,
            result.error,
        )
    else:
        logger.info(
            "Stripe event %s (%s) reconciled: outcome=%s order=%s status=%s",
            event.event_id,
            result.event_type,
            result.outcome.value,
            result.order_id,
            result.status,
        )

    return {"received": True}
