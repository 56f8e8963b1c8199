from .config import Settings
from .errors import (
    BillingSyncError,
    SignatureInvalid,
    UnresolvableCustomer,
    StoreWriteFailure,
    UserNotFound,
)
from .events import classify_event
from .stripe_gateway import StripeGateway
from .subscriptions import SubscriptionSync, SubscriptionService

__all__ = [
    "Settings",
    "BillingSyncError",
    "SignatureInvalid",
    "UnresolvableCustomer",
    "StoreWriteFailure",
    "UserNotFound",
    "classify_event",
    "StripeGateway",
    "SubscriptionSync",
    "SubscriptionService",
]
