from .schemas import (
    SubscriptionStatus,
    EventKind,
    SyncResult,
    WebhookEvent,
    UserSubscription,
    CancelSubscriptionRequest,
)

__all__ = [
    "SubscriptionStatus",
    "EventKind",
    "SyncResult",
    "WebhookEvent",
    "UserSubscription",
    "CancelSubscriptionRequest",
]
