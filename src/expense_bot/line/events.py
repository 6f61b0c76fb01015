"""Webhook batch parsing into typed event variants."""

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from expense_bot.models.events import KNOWN_EVENT_TYPES, WebhookEvent

logger = logging.getLogger(__name__)

_event_adapter: TypeAdapter[WebhookEvent] = TypeAdapter(WebhookEvent)


def parse_event(raw: Any) -> WebhookEvent | None:
    """Parse one raw event. Unknown types and invalid shapes return None."""
    if not isinstance(raw, dict):
        logger.warning("Ignoring non-object event")
        return None
    event_type = raw.get("type")
    if event_type not in KNOWN_EVENT_TYPES:
        logger.info("Ignoring unsupported event type", extra={"event_type": str(event_type)})
        return None
    try:
        return _event_adapter.validate_python(raw)
    except ValidationError as exc:
        logger.warning(
            "Ignoring malformed %s event", event_type, extra={"errors": exc.error_count()}
        )
        return None


def get_raw_events(payload: dict) -> list[Any]:
    """Return the ``events`` array of a webhook body ([] when absent)."""
    events = payload.get("events") or []
    if not isinstance(events, list):
        raise ValueError("webhook 'events' must be a list")
    return events
