"""
Stripe access for the billing sync.

Verifies webhook signatures and fetches customers/subscriptions.
Objects come back as plain dicts so the sync logic never depends on
StripeObject internals.
"""

import json
import logging
from typing import Any, Optional

import stripe

from ..models import WebhookEvent
from .config import DEFAULT_WEBHOOK_TOLERANCE
from .errors import SignatureInvalid, UnresolvableCustomer


logger = logging.getLogger(__name__)


def _to_dict(obj: Any) -> dict:
    """Convert a StripeObject (or a plain dict) to a plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class StripeGateway:
    """Thin wrapper around the Stripe SDK. API key is passed per call, never set globally."""

    def __init__(
        self,
        api_key: Optional[str],
        webhook_secret: Optional[str] = None,
        tolerance: int = DEFAULT_WEBHOOK_TOLERANCE,
    ):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def verify_and_parse_event(self, payload: bytes, sig_header: Optional[str]) -> WebhookEvent:
        """
        Verify the Stripe-Signature header against the raw body and parse the event.

        Raises SignatureInvalid for a missing/malformed header, a bad
        signature, a stale timestamp, or a body that isn't a Stripe event.
        Nothing downstream runs unless this succeeds.
        """
        if not self.webhook_secret:
            raise ValueError("STRIPE_WEBHOOK_SECRET must be set")

        if not sig_header:
            raise SignatureInvalid("Missing Stripe-Signature header")

        try:
            body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
            stripe.WebhookSignature.verify_header(
                body, sig_header, self.webhook_secret, self.tolerance
            )
            data = json.loads(body)
        except stripe.SignatureVerificationError as e:
            raise SignatureInvalid(f"Invalid signature: {e}") from e
        except ValueError as e:
            raise SignatureInvalid(f"Invalid payload: {e}") from e

        if not isinstance(data, dict) or not data.get("type"):
            raise SignatureInvalid("Invalid payload: not a Stripe event")

        event_object = (data.get("data") or {}).get("object") or {}
        return WebhookEvent(id=data.get("id"), type=data["type"], payload=event_object)

    def retrieve_customer(self, customer_id: Optional[str]) -> dict:
        """
        Fetch a customer. Deleted or missing customers raise UnresolvableCustomer.
        Other Stripe errors propagate to the caller.
        """
        if not customer_id:
            raise UnresolvableCustomer("Event has no customer")

        try:
            customer = _to_dict(stripe.Customer.retrieve(customer_id, api_key=self.api_key))
        except stripe.InvalidRequestError as e:
            if e.code != "resource_missing":
                raise
            raise UnresolvableCustomer(f"No such customer: {customer_id}") from e

        if customer.get("deleted"):
            raise UnresolvableCustomer(f"Customer {customer_id} was deleted")

        return customer

    def retrieve_subscription(self, subscription_id: str) -> dict:
        """Fetch a subscription by id."""
        return _to_dict(stripe.Subscription.retrieve(subscription_id, api_key=self.api_key))

    def latest_subscription(self, customer_id: str) -> Optional[dict]:
        """Most recent subscription for a customer, any status. None if they never subscribed."""
        subscriptions = stripe.Subscription.list(
            customer=customer_id,
            limit=1,
            status="all",
            api_key=self.api_key,
        )
        if not subscriptions.data:
            return None
        return _to_dict(subscriptions.data[0])

    def cancel_at_period_end(self, subscription_id: str) -> dict:
        """
        Cancel at end of billing period.
        The customer keeps access until the paid period ends.
        """
        subscription = stripe.Subscription.modify(
            subscription_id,
            cancel_at_period_end=True,
            api_key=self.api_key,
        )
        logger.info("Subscription %s set to cancel at period end", subscription_id)
        return _to_dict(subscription)
