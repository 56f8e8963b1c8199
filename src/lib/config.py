"""
Runtime configuration.
Everything comes from the environment (.env is loaded by the app).
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_PLAN = "professional"
DEFAULT_WEBHOOK_TOLERANCE = 300


@dataclass(frozen=True)
class Settings:
    """Secrets and knobs for the billing sync."""
    stripe_secret_key: Optional[str]
    stripe_webhook_secret: Optional[str]
    webhook_tolerance: int
    subscription_plan: str
    app_env: str
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables with defaults."""
        return cls(
            stripe_secret_key=os.environ.get("STRIPE_SECRET_KEY") or None,
            stripe_webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET") or None,
            webhook_tolerance=int(
                os.environ.get("STRIPE_WEBHOOK_TOLERANCE", str(DEFAULT_WEBHOOK_TOLERANCE))
            ),
            subscription_plan=os.environ.get("SUBSCRIPTION_PLAN") or DEFAULT_PLAN,
            app_env=os.environ.get("APP_ENV", "production"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
