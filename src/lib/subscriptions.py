"""
Subscription sync service.
Applies Stripe webhook events to the users table.

Key design:
- Stripe is the source of truth - no local transition rules
- One mutation function per event kind, in a single lookup table
- A failed event is logged and dropped; Stripe still gets its 200
- Customers without a linked CRM user are skipped, not errors
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..models import EventKind, SubscriptionStatus, SyncResult, WebhookEvent
from .config import DEFAULT_PLAN
from .events import classify_event


logger = logging.getLogger(__name__)

# Stripe customer metadata keys that hold the CRM user id
USER_ID_METADATA_KEYS = ("userId", "user_id")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_to_datetime(value: Optional[int]) -> Optional[datetime]:
    """Stripe epoch seconds -> aware UTC datetime. None stays None."""
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def linked_user_id(customer: dict) -> Optional[str]:
    """CRM user id stored on the Stripe customer, if it was ever linked."""
    metadata = customer.get("metadata") or {}
    for key in USER_ID_METADATA_KEYS:
        if metadata.get(key):
            return metadata[key]
    return None


def _current_period_end(subscription: dict) -> Optional[int]:
    if subscription.get("current_period_end") is not None:
        return subscription["current_period_end"]

    # Newer API versions only carry the period on subscription items
    items = (subscription.get("items") or {}).get("data") or []
    if items:
        return items[0].get("current_period_end")
    return None


def subscription_state(subscription: dict) -> dict[str, Any]:
    """Status and billing window, mirrored from a Stripe subscription."""
    return {
        "subscription_status": subscription.get("status"),
        "trial_end": epoch_to_datetime(subscription.get("trial_end")),
        "current_period_end": epoch_to_datetime(_current_period_end(subscription)),
    }


# =============================================================================
# Mutations - one per event kind
# Each takes (sync, event object, resolved customer) and returns the fields
# to merge into the user row, or None to skip the event.
# =============================================================================

def _link_subscription(sync: "SubscriptionSync", subscription: dict, customer: dict) -> dict:
    return {
        "stripe_customer_id": customer.get("id"),
        "stripe_subscription_id": subscription.get("id"),
        "subscription_plan": sync.plan,
        **subscription_state(subscription),
    }


def _checkout_completed(sync, session, customer):
    subscription_id = session.get("subscription")
    if not subscription_id:
        # One-off payment, nothing to sync
        return None
    subscription = sync.gateway.retrieve_subscription(subscription_id)
    return _link_subscription(sync, subscription, customer)


def _subscription_created(sync, subscription, customer):
    return _link_subscription(sync, subscription, customer)


def _subscription_updated(sync, subscription, customer):
    return subscription_state(subscription)


def _subscription_deleted(sync, subscription, customer):
    return {"subscription_status": SubscriptionStatus.CANCELED.value}


def _invoice_payment_succeeded(sync, invoice, customer):
    return {"subscription_status": SubscriptionStatus.ACTIVE.value}


def _invoice_payment_failed(sync, invoice, customer):
    return {"subscription_status": SubscriptionStatus.PAST_DUE.value}


def _customer_updated(sync, _, customer):
    fields = {}
    if customer.get("email"):
        fields["email"] = customer["email"]
    if customer.get("name"):
        fields["display_name"] = customer["name"]
    return fields


Mutation = Callable[["SubscriptionSync", dict, dict], Optional[dict]]

MUTATIONS: dict[EventKind, Mutation] = {
    EventKind.CHECKOUT_COMPLETED: _checkout_completed,
    EventKind.SUBSCRIPTION_CREATED: _subscription_created,
    EventKind.SUBSCRIPTION_UPDATED: _subscription_updated,
    EventKind.SUBSCRIPTION_DELETED: _subscription_deleted,
    EventKind.INVOICE_PAYMENT_SUCCEEDED: _invoice_payment_succeeded,
    EventKind.INVOICE_PAYMENT_FAILED: _invoice_payment_failed,
    EventKind.CUSTOMER_UPDATED: _customer_updated,
}

_unmapped = set(EventKind) - set(MUTATIONS) - {EventKind.UNHANDLED}
if _unmapped:
    raise RuntimeError(f"No mutation for event kinds: {sorted(k.value for k in _unmapped)}")


class SubscriptionSync:
    """
    Applies verified Stripe events to user records.

    The store and the Stripe gateway are injected - nothing here reaches
    for a global client.
    """

    def __init__(
        self,
        store,
        gateway,
        plan: str = DEFAULT_PLAN,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.gateway = gateway
        self.plan = plan
        self.clock = clock

    def _resolve_customer(self, kind: EventKind, event_object: dict) -> dict:
        if kind is EventKind.CUSTOMER_UPDATED:
            return event_object
        return self.gateway.retrieve_customer(event_object.get("customer"))

    def _resolve_user_id(self, kind: EventKind, customer: dict) -> Optional[str]:
        user_id = linked_user_id(customer)
        if user_id or kind is not EventKind.CUSTOMER_UPDATED:
            return user_id

        # Profile changes also reach users linked only by stripe_customer_id
        user = self.store.find_user_by_customer_id(customer.get("id"))
        return user["id"] if user else None

    def apply(self, event: WebhookEvent) -> SyncResult:
        """
        Apply one event. Never raises.

        Returns IGNORED for unhandled types, SKIPPED when the customer has
        no linked user, FAILED when anything along the way blew up.
        """
        kind = classify_event(event.type)
        if kind is EventKind.UNHANDLED:
            logger.info("Unhandled event type: %s (%s)", event.type, event.id)
            return SyncResult.IGNORED

        mutation = MUTATIONS[kind]
        event_object = event.payload

        try:
            customer = self._resolve_customer(kind, event_object)
            user_id = self._resolve_user_id(kind, customer)

            if not user_id:
                logger.info(
                    "Customer %s has no linked user, skipping %s (%s)",
                    customer.get("id"), event.type, event.id,
                )
                return SyncResult.SKIPPED

            fields = mutation(self, event_object, customer)
            if fields is None:
                logger.info("Nothing to sync for %s (%s)", event.type, event.id)
                return SyncResult.SKIPPED

            fields["updated_at"] = self.clock()
            self.store.update_user(user_id, fields)
        except Exception:
            # Stripe must still get a 200, a lost mutation needs a manual resync
            logger.exception("Error handling %s (%s)", event.type, event.id)
            return SyncResult.FAILED

        logger.info(
            "Applied %s (%s) to user %s: status=%s",
            event.type, event.id, user_id, fields.get("subscription_status", "unchanged"),
        )
        return SyncResult.APPLIED

    def resync_customer(self, customer_id: str) -> SyncResult:
        """
        Replay a customer's latest subscription as a subscription update.
        Recovery path for mutations dropped by apply().
        """
        subscription = self.gateway.latest_subscription(customer_id)
        if subscription is None:
            logger.info("Customer %s has no subscriptions to resync", customer_id)
            return SyncResult.SKIPPED

        event = WebhookEvent(
            id=f"resync_{customer_id}",
            type=EventKind.SUBSCRIPTION_UPDATED.value,
            payload=subscription,
        )
        return self.apply(event)


class SubscriptionService:
    """Read/cancel operations for the subscription endpoints."""

    def __init__(self, store, gateway):
        self.store = store
        self.gateway = gateway

    def get_subscription_overview(self, customer_id: str) -> dict:
        """
        Stripe customer, their latest subscription, and the linked user row.
        Subscription is None if they never subscribed; user is None if unlinked.
        """
        customer = self.gateway.retrieve_customer(customer_id)
        subscription = self.gateway.latest_subscription(customer_id)
        user = self.store.find_user_by_customer_id(customer_id)

        return {
            "customer": customer,
            "subscription": subscription,
            "user": user,
            "message": None if subscription else "No subscriptions found",
        }

    def cancel_subscription(self, subscription_id: str) -> dict:
        """
        Cancel at end of billing period.
        The users row is updated by the customer.subscription.updated webhook that follows.
        """
        subscription = self.gateway.cancel_at_period_end(subscription_id)

        return {
            "success": True,
            "subscription": {
                "id": subscription.get("id"),
                "status": subscription.get("status"),
                "cancel_at_period_end": subscription.get("cancel_at_period_end"),
                "current_period_end": epoch_to_datetime(_current_period_end(subscription)),
            },
        }
