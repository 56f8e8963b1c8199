import logging
from typing import Optional


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once per process. Operational logs are the only output of the sync."""
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # Stripe's own client logs every request at INFO
    logging.getLogger("stripe").setLevel(logging.WARNING)
