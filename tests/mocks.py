"""
In-memory stand-ins for Supabase and Stripe.

MockStripeGateway subclasses the real gateway, so webhook signature
verification is the real thing - only the network calls are faked.
"""

import hashlib
import hmac
import json
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.lib import StripeGateway, UnresolvableCustomer, UserNotFound


WEBHOOK_SECRET = "whsec_test_secret"
FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


class MockUserStore:
    """Simulates the Supabase users table."""

    def __init__(self):
        self.users = {}  # user_id -> user_record
        self.updates = []  # (user_id, fields) for every write attempt

    def create_user(self, user_id: str, **fields):
        self.users[user_id] = {
            "id": user_id,
            "email": f"{user_id}@example.com",
            "display_name": None,
            "stripe_customer_id": None,
            "stripe_subscription_id": None,
            "subscription_status": None,
            "subscription_plan": None,
            "trial_end": None,
            "current_period_end": None,
            "updated_at": None,
            **fields,
        }
        return self.users[user_id]

    def update_user(self, user_id: str, fields: dict) -> None:
        self.updates.append((user_id, dict(fields)))
        if user_id not in self.users:
            raise UserNotFound(user_id)
        self.users[user_id].update(fields)

    def get_user(self, user_id: str):
        return self.users.get(user_id)

    def find_user_by_customer_id(self, customer_id: str):
        for user in self.users.values():
            if user.get("stripe_customer_id") == customer_id:
                return user
        return None


class MockStripeGateway(StripeGateway):
    """Real signature checks, fake Stripe API."""

    def __init__(self, webhook_secret: str = WEBHOOK_SECRET):
        super().__init__(api_key="sk_test_mock", webhook_secret=webhook_secret)
        self.customers = {}
        self.subscriptions = {}
        self.errors = {}  # object id -> exception to raise on retrieve
        self.retrieved = []

    def add_customer(self, customer_id: str, user_id: str = None, **fields):
        metadata = {"userId": user_id} if user_id else {}
        self.customers[customer_id] = {
            "id": customer_id,
            "object": "customer",
            "metadata": metadata,
            **fields,
        }
        return self.customers[customer_id]

    def add_subscription(self, subscription_id: str, customer_id: str, **fields):
        self.subscriptions[subscription_id] = {
            "id": subscription_id,
            "object": "subscription",
            "customer": customer_id,
            "status": "active",
            "trial_end": None,
            "current_period_end": None,
            "cancel_at_period_end": False,
            **fields,
        }
        return self.subscriptions[subscription_id]

    def retrieve_customer(self, customer_id):
        self.retrieved.append(customer_id)
        if customer_id in self.errors:
            raise self.errors[customer_id]
        if customer_id not in self.customers:
            raise UnresolvableCustomer(f"No such customer: {customer_id}")
        return dict(self.customers[customer_id])

    def retrieve_subscription(self, subscription_id):
        self.retrieved.append(subscription_id)
        if subscription_id in self.errors:
            raise self.errors[subscription_id]
        return dict(self.subscriptions[subscription_id])

    def latest_subscription(self, customer_id):
        for subscription in reversed(list(self.subscriptions.values())):
            if subscription["customer"] == customer_id:
                return dict(subscription)
        return None

    def cancel_at_period_end(self, subscription_id):
        if subscription_id in self.errors:
            raise self.errors[subscription_id]
        self.subscriptions[subscription_id]["cancel_at_period_end"] = True
        return dict(self.subscriptions[subscription_id])


def make_event(event_type: str, obj: dict, event_id: str = "evt_test_1") -> dict:
    """Stripe event envelope."""
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": int(time.time()),
        "data": {"object": obj},
    }


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a Stripe-Signature header the way Stripe does (HMAC-SHA256 over 't.payload')."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def signed_request(event: dict, secret: str = WEBHOOK_SECRET, timestamp: int = None):
    """Serialized body plus headers for TestClient.post."""
    payload = json.dumps(event)
    headers = {
        "stripe-signature": sign_payload(payload, secret, timestamp),
        "content-type": "application/json",
    }
    return payload, headers
