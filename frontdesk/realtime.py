"""
Live fan-out of front desk events.

Core operations call ``emit()`` after their write has been persisted. Socket
gateways, webhooks or notification senders subscribe with::

    @receiver(realtime_event)
    def push(sender, event, payload, **kwargs):
        ...

Delivery is fire-and-forget: a failing receiver is logged and never reaches
the caller that emitted the event.
"""

import logging

from django.dispatch import Signal, receiver
from django.utils import timezone

logger = logging.getLogger(__name__)

VISITOR_CHECKIN = "visitor-checkin"
VISITOR_CHECKOUT = "visitor-checkout"
EMERGENCY_CREATED = "emergency-created"
EMERGENCY_UPDATED = "emergency-updated"

EVENTS = (VISITOR_CHECKIN, VISITOR_CHECKOUT, EMERGENCY_CREATED, EMERGENCY_UPDATED)

# Receivers get keyword arguments ``event`` and ``payload``.
realtime_event = Signal()


def emit(event, payload):
    if event not in EVENTS:
        raise ValueError(f"Unknown realtime event '{event}'")
    payload = {**payload, "timestamp": timezone.now().isoformat()}
    for handler, result in realtime_event.send_robust(sender=emit, event=event, payload=payload):
        if isinstance(result, Exception):
            logger.error(
                "Realtime receiver %s failed for %s: %s",
                getattr(handler, "__qualname__", handler), event, result,
                exc_info=(type(result), result, result.__traceback__),
            )
    return payload


@receiver(realtime_event)
def log_event(sender, event, payload, **kwargs):
    logger.debug("Broadcast %s %s", event, payload.get("id") or payload.get("type"))
