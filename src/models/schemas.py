"""
Data models for the Pebble CRM billing sync.
Stripe is the source of truth - these mirror its vocabulary.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class SubscriptionStatus(str, Enum):
    """Subscription states, mirrored from Stripe field-for-field."""
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    UNPAID = "unpaid"


class EventKind(str, Enum):
    """Webhook event kinds the sync acts on. Everything else is UNHANDLED."""
    CHECKOUT_COMPLETED = "checkout.session.completed"
    SUBSCRIPTION_CREATED = "customer.subscription.created"
    SUBSCRIPTION_UPDATED = "customer.subscription.updated"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"
    INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
    INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
    CUSTOMER_UPDATED = "customer.updated"
    UNHANDLED = "unhandled"


class SyncResult(str, Enum):
    """Outcome of applying one event."""
    APPLIED = "applied"
    SKIPPED = "skipped"
    IGNORED = "ignored"
    FAILED = "failed"


class WebhookEvent(BaseModel):
    """
    A verified Stripe event.
    Transient - handled once, never stored.
    """
    id: Optional[str] = None
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


class UserSubscription(BaseModel):
    """Billing columns of a user record."""
    id: str
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    subscription_status: Optional[str] = None
    subscription_plan: Optional[str] = None
    trial_end: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CancelSubscriptionRequest(BaseModel):
    """Cancel at period end."""
    subscription_id: str = Field(..., min_length=1)
