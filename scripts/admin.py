#!/usr/bin/env python3
"""
Admin utilities for the Pebble CRM billing sync.

Commands:
    python scripts/admin.py stats                 - Users per subscription status
    python scripts/admin.py users                 - Recently updated billing records
    python scripts/admin.py resync CUSTOMER_ID    - Re-apply a customer's latest Stripe subscription

resync is the recovery path when a webhook update was logged and dropped.
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from src.db import get_admin_client, SupabaseUserStore
from src.lib import Settings, StripeGateway, SubscriptionSync
from src.lib.logging_config import configure_logging
from src.models import SubscriptionStatus, SyncResult


def cmd_stats(client, settings, args):
    """Show user counts per subscription status."""
    print("\n📊 Subscription Statistics")
    print("=" * 40)

    users = client.table("users").select("id", count="exact").execute()
    print(f"Users: {users.count or 0}")

    linked = (
        client.table("users")
        .select("id", count="exact")
        .not_.is_("stripe_customer_id", "null")
        .execute()
    )
    print(f"Linked to Stripe: {linked.count or 0}")

    for status in SubscriptionStatus:
        result = (
            client.table("users")
            .select("id", count="exact")
            .eq("subscription_status", status.value)
            .execute()
        )
        print(f"  {status.value:20} {result.count or 0}")


def cmd_users(client, settings, args):
    """List recently updated billing records."""
    print("\n👤 Recent Billing Updates")
    print("=" * 70)

    result = (
        client.table("users")
        .select("id, email, subscription_status, stripe_customer_id, updated_at")
        .order("updated_at", desc=True)
        .limit(args.limit)
        .execute()
    )

    for user in result.data or []:
        status = user.get("subscription_status") or "none"
        email = (user.get("email") or "")[:30]
        customer = user.get("stripe_customer_id") or "-"
        updated = (user.get("updated_at") or "")[:10]
        print(f"  [{status:10}] {email:30} {customer:20} ({updated})")


def cmd_resync(client, settings, args):
    """Re-apply the latest Stripe subscription for a customer."""
    if not settings.stripe_secret_key:
        raise ValueError("STRIPE_SECRET_KEY must be set in .env")

    sync = SubscriptionSync(
        store=SupabaseUserStore(client),
        gateway=StripeGateway(api_key=settings.stripe_secret_key),
        plan=settings.subscription_plan,
    )

    result = sync.resync_customer(args.customer_id)

    if result is SyncResult.APPLIED:
        print(f"✓ Customer {args.customer_id} resynced")
    elif result is SyncResult.SKIPPED:
        print(f"⚠ Customer {args.customer_id} skipped (no subscription or no linked user)")
    else:
        print(f"✗ Resync failed for {args.customer_id} - see log")
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description="Billing admin utilities")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Stats command
    subparsers.add_parser("stats", help="Show subscription status counts")

    # Users command
    users_parser = subparsers.add_parser("users", help="List recent billing updates")
    users_parser.add_argument("--limit", type=int, default=20, help="Rows to show")

    # Resync command
    resync_parser = subparsers.add_parser("resync", help="Resync a customer from Stripe")
    resync_parser.add_argument("customer_id", help="Stripe customer ID (cus_...)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    client = get_admin_client()

    commands = {
        "stats": cmd_stats,
        "users": cmd_users,
        "resync": cmd_resync,
    }

    return commands[args.command](client, settings, args) or 0


if __name__ == "__main__":
    sys.exit(main())
