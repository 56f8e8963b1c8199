"""
Subscription lookup routes.

Endpoints:
- GET /{customer_id} - Stripe customer, latest subscription, linked user
- POST /cancel - Cancel at period end
"""

import logging
import stripe
from fastapi import APIRouter, Depends, HTTPException

from ...lib import SubscriptionService, UnresolvableCustomer
from ...models import CancelSubscriptionRequest, UserSubscription
from ..dependencies import get_subscription_service


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/cancel")
async def cancel_subscription(
    body: CancelSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Cancel subscription at end of billing period.

    User keeps access until paid period ends.
    The users row follows via the customer.subscription.updated webhook.

    Returns:
    - success: Whether cancellation succeeded
    - subscription: id, status, cancel_at_period_end, current_period_end
    """
    try:
        return service.cancel_subscription(body.subscription_id)
    except stripe.StripeError as e:
        logger.error("Error cancelling subscription %s: %s", body.subscription_id, e)
        raise HTTPException(status_code=502, detail=f"Failed to cancel subscription: {e.user_message or e}")


@router.get("/{customer_id}")
async def get_subscription(
    customer_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Get subscription data for a Stripe customer.

    Returns:
    - customer: Stripe customer object
    - subscription: Most recent subscription (any status) or null
    - user: Linked CRM billing record or null
    - message: Set when there is no subscription
    """
    try:
        overview = service.get_subscription_overview(customer_id)
    except UnresolvableCustomer as e:
        raise HTTPException(status_code=404, detail=str(e))
    except stripe.StripeError as e:
        logger.error("Error fetching subscription data for %s: %s", customer_id, e)
        raise HTTPException(status_code=502, detail="Failed to fetch subscription data")

    if overview["user"]:
        overview["user"] = UserSubscription(**overview["user"])

    return overview
