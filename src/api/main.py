"""
Main FastAPI application.
Minimal API surface - Stripe in, Supabase out.

Endpoints:
- /webhooks/stripe - Stripe webhook handler (subscription sync)
- /subscription/* - Subscription lookup and cancel
- /health - Liveness probe
"""

from fastapi import FastAPI
from dotenv import load_dotenv

from ..lib import Settings
from ..lib.logging_config import configure_logging

# Load environment variables
load_dotenv()

settings = Settings.from_env()
configure_logging(settings.log_level)

# Create app
app = FastAPI(
    title="Pebble CRM Billing API",
    description="Stripe subscription sync for Pebble CRM",
    version="1.0.0",
    docs_url="/docs" if settings.app_env == "development" else None,
    redoc_url=None,
)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "1.0.0"}


# Import and include routers
from .routes import subscriptions, webhooks

app.include_router(subscriptions.router, prefix="/subscription", tags=["subscription"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
