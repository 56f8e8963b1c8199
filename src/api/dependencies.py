"""
Request-scoped collaborators.
Routes get the store and Stripe gateway injected - tests swap them via
app.dependency_overrides.

The webhook route only gets a signature-checking gateway up front. The
store and sync are built after verification, so an unauthenticated
request never depends on database or API key configuration.
"""

from functools import lru_cache
from typing import Callable

from fastapi import Depends, HTTPException

from ..db import get_admin_client, SupabaseUserStore
from ..lib import Settings, StripeGateway, SubscriptionSync, SubscriptionService


SyncFactory = Callable[[StripeGateway], SubscriptionSync]


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


def _build_gateway(settings: Settings) -> StripeGateway:
    return StripeGateway(
        api_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        tolerance=settings.webhook_tolerance,
    )


def get_webhook_gateway(settings: Settings = Depends(get_settings)) -> StripeGateway:
    return _build_gateway(settings)


def get_stripe_gateway(settings: Settings = Depends(get_settings)) -> StripeGateway:
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=500, detail="Stripe not configured")

    return _build_gateway(settings)


def get_user_store() -> SupabaseUserStore:
    try:
        client = get_admin_client()
    except ValueError:
        raise HTTPException(status_code=500, detail="Database not configured")

    return SupabaseUserStore(client)


def get_sync_factory(settings: Settings = Depends(get_settings)) -> SyncFactory:
    """Returns a builder the webhook calls once the event is verified."""

    def build(gateway: StripeGateway) -> SubscriptionSync:
        if not gateway.api_key:
            raise HTTPException(status_code=500, detail="Stripe not configured")

        return SubscriptionSync(
            store=get_user_store(),
            gateway=gateway,
            plan=settings.subscription_plan,
        )

    return build


def get_subscription_service(
    store: SupabaseUserStore = Depends(get_user_store),
    gateway: StripeGateway = Depends(get_stripe_gateway),
) -> SubscriptionService:
    return SubscriptionService(store=store, gateway=gateway)
