#!/usr/bin/env python3
"""
Smoke Test F: Stripe Gateway

Validates the real StripeGateway against a patched Stripe SDK:
1. Customers come back as plain dicts, fetched with the per-call API key
2. Deleted and missing customers -> UnresolvableCustomer
3. Other Stripe errors propagate untouched
4. Latest subscription lookup and cancel-at-period-end hit the right calls
"""

import sys
from pathlib import Path
from types import SimpleNamespace

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
import stripe

from src.lib import StripeGateway, UnresolvableCustomer


API_KEY = "sk_test_123"


class SdkCalls:
    """Records calls made against the patched Stripe SDK."""

    def __init__(self):
        self.calls = []

    def returning(self, name, result):
        def call(*args, **params):
            self.calls.append((name, args, params))
            if isinstance(result, Exception):
                raise result
            return result
        return call


@pytest.fixture
def sdk():
    return SdkCalls()


@pytest.fixture
def gateway():
    return StripeGateway(api_key=API_KEY, webhook_secret="whsec_test_secret")


def test_retrieve_customer(monkeypatch, sdk, gateway):
    """Test: Customer fetched with the gateway's key."""
    customer = {"id": "cus_1", "object": "customer", "metadata": {"userId": "user-1"}}
    monkeypatch.setattr(stripe.Customer, "retrieve", sdk.returning("customer", customer))

    assert gateway.retrieve_customer("cus_1") == customer
    assert sdk.calls == [("customer", ("cus_1",), {"api_key": API_KEY})]


def test_deleted_customer_is_unresolvable(monkeypatch, sdk, gateway):
    """Test: Stripe's deleted-customer stub -> UnresolvableCustomer."""
    deleted = {"id": "cus_1", "object": "customer", "deleted": True}
    monkeypatch.setattr(stripe.Customer, "retrieve", sdk.returning("customer", deleted))

    with pytest.raises(UnresolvableCustomer):
        gateway.retrieve_customer("cus_1")


def test_missing_customer_is_unresolvable(monkeypatch, sdk, gateway):
    """Test: resource_missing -> UnresolvableCustomer."""
    error = stripe.InvalidRequestError("No such customer: 'cus_1'", "id", code="resource_missing")
    monkeypatch.setattr(stripe.Customer, "retrieve", sdk.returning("customer", error))

    with pytest.raises(UnresolvableCustomer):
        gateway.retrieve_customer("cus_1")


def test_event_without_customer_is_unresolvable(gateway):
    """Test: No customer id on the event."""
    with pytest.raises(UnresolvableCustomer):
        gateway.retrieve_customer(None)


@pytest.mark.parametrize("error", [
    stripe.APIConnectionError("network down"),
    stripe.AuthenticationError("Invalid API Key provided"),
    stripe.InvalidRequestError("Invalid string", "id", code="parameter_invalid_string"),
])
def test_other_stripe_errors_propagate(monkeypatch, sdk, gateway, error):
    """Test: Outages and bad requests are not mistaken for a missing customer."""
    monkeypatch.setattr(stripe.Customer, "retrieve", sdk.returning("customer", error))

    with pytest.raises(type(error)):
        gateway.retrieve_customer("cus_1")


def test_retrieve_subscription(monkeypatch, sdk, gateway):
    """Test: Subscription fetched by id."""
    subscription = {"id": "sub_1", "object": "subscription", "status": "active"}
    monkeypatch.setattr(stripe.Subscription, "retrieve", sdk.returning("subscription", subscription))

    assert gateway.retrieve_subscription("sub_1") == subscription
    assert sdk.calls == [("subscription", ("sub_1",), {"api_key": API_KEY})]


def test_latest_subscription(monkeypatch, sdk, gateway):
    """Test: Newest subscription of any status."""
    subscription = {"id": "sub_1", "object": "subscription", "status": "canceled"}
    monkeypatch.setattr(stripe.Subscription, "list", sdk.returning("list", SimpleNamespace(data=[subscription])))

    assert gateway.latest_subscription("cus_1") == subscription
    name, args, params = sdk.calls[0]
    assert params == {"customer": "cus_1", "limit": 1, "status": "all", "api_key": API_KEY}


def test_latest_subscription_none(monkeypatch, sdk, gateway):
    """Test: Customer that never subscribed -> None."""
    monkeypatch.setattr(stripe.Subscription, "list", sdk.returning("list", SimpleNamespace(data=[])))

    assert gateway.latest_subscription("cus_1") is None


def test_cancel_at_period_end(monkeypatch, sdk, gateway):
    """Test: Modify sets cancel_at_period_end, nothing else."""
    subscription = {"id": "sub_1", "object": "subscription", "cancel_at_period_end": True}
    monkeypatch.setattr(stripe.Subscription, "modify", sdk.returning("modify", subscription))

    assert gateway.cancel_at_period_end("sub_1") == subscription
    assert sdk.calls == [
        ("modify", ("sub_1",), {"cancel_at_period_end": True, "api_key": API_KEY}),
    ]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
