"""
User record store.
Billing columns on the users table, keyed by internal user id.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from supabase import Client, PostgrestAPIError

from ..lib.errors import StoreWriteFailure, UserNotFound


logger = logging.getLogger(__name__)

USERS_TABLE = "users"

BILLING_COLUMNS = (
    "id, email, display_name, stripe_customer_id, stripe_subscription_id, "
    "subscription_status, subscription_plan, trial_end, current_period_end, updated_at"
)


def _serialize(fields: dict[str, Any]) -> dict[str, Any]:
    """PostgREST takes JSON - timestamps go over the wire as ISO-8601."""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in fields.items()
    }


class SupabaseUserStore:
    """
    Point reads and partial updates on the users table.
    Needs a service-role client (webhooks bypass RLS).
    """

    def __init__(self, client: Client):
        self.client = client

    def update_user(self, user_id: str, fields: dict[str, Any]) -> None:
        """
        Merge fields into one user row.
        Raises UserNotFound if no row matched, StoreWriteFailure on API errors.
        """
        try:
            result = (
                self.client.table(USERS_TABLE)
                .update(_serialize(fields))
                .eq("id", user_id)
                .execute()
            )
        except PostgrestAPIError as e:
            raise StoreWriteFailure(f"Update failed for user {user_id}: {e}") from e

        if not result.data:
            raise UserNotFound(user_id)

    def get_user(self, user_id: str) -> Optional[dict]:
        """Billing columns for one user, or None."""
        result = (
            self.client.table(USERS_TABLE)
            .select(BILLING_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    def find_user_by_customer_id(self, customer_id: str) -> Optional[dict]:
        """Look up a user by Stripe customer id, or None if not linked yet."""
        result = (
            self.client.table(USERS_TABLE)
            .select(BILLING_COLUMNS)
            .eq("stripe_customer_id", customer_id)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None
