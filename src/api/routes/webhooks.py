"""
Webhook handlers.
Only Stripe webhooks - no other integrations needed.

Handles:
- checkout.session.completed
- customer.subscription.created
- customer.subscription.updated
- customer.subscription.deleted
- invoice.payment_succeeded
- invoice.payment_failed
- customer.updated

All subscription state is managed via webhooks.
Every verified event gets a 200 so Stripe never retries into a storm.
"""

import logging
from fastapi import APIRouter, Depends, Request, HTTPException

from ...lib import SignatureInvalid, StripeGateway
from ..dependencies import SyncFactory, get_sync_factory, get_webhook_gateway


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    gateway: StripeGateway = Depends(get_webhook_gateway),
    build_sync: SyncFactory = Depends(get_sync_factory),
):
    """
    Handle Stripe webhook events.

    Verifies webhook signature for security - the raw body is required.
    Updates local subscription state based on Stripe events.

    Responses:
    - 200 {"received": true}: verified, whether or not the update stuck
    - 400: signature verification failed
    - 405: not a POST (FastAPI)
    - 500: webhook secret, API key or database missing, or an unexpected error
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    if not gateway.webhook_secret:
        raise HTTPException(status_code=500, detail="Webhook secret not configured")

    try:
        event = gateway.verify_and_parse_event(payload, sig_header)
    except SignatureInvalid as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise HTTPException(status_code=400, detail="Webhook signature verification failed")

    logger.info("Received webhook event %s (%s)", event.type, event.id)
    build_sync(gateway).apply(event)

    # Acknowledge receipt
    return {"received": True}
