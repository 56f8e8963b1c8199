"""
Billing sync errors.

Only SignatureInvalid fails a webhook request. Everything else is caught
per event and logged, so Stripe always gets its 200 once the payload is
authenticated.
"""


class BillingSyncError(Exception):
    """Base class for billing sync failures."""


class SignatureInvalid(BillingSyncError):
    """Webhook payload could not be verified as coming from Stripe."""


class UnresolvableCustomer(BillingSyncError):
    """The event's customer could not be found or fetched."""


class StoreWriteFailure(BillingSyncError):
    """Writing to the users table failed."""


class UserNotFound(StoreWriteFailure):
    """No user row matched the internal user id."""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id
