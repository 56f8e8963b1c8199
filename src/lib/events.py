"""
Stripe event classification.
Maps the event type string to the closed set of kinds the sync handles.
"""

from ..models import EventKind


HANDLED_EVENT_TYPES = {
    kind.value: kind for kind in EventKind if kind is not EventKind.UNHANDLED
}


def classify_event(event_type: str) -> EventKind:
    """
    Classify a Stripe event type.

    Unknown types are not an error - they map to UNHANDLED and get
    acknowledged so Stripe stops redelivering them.
    """
    return HANDLED_EVENT_TYPES.get(event_type, EventKind.UNHANDLED)
