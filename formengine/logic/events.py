"""Domain event constants and publisher.

Defines event type constants and a simple publish() callable used by the
navigation and submission flows.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List
import logging

logger = logging.getLogger(__name__)

PAGE_COMMITTED = "form.page_committed"
NAVIGATION_BLOCKED = "form.navigation_blocked"
FORM_COMPLETED = "form.completed"
SUBMISSION_FAILED = "form.submission_failed"


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Publish a domain event.

    Events are logged for observability and buffered in-memory so callers
    and tests can inspect what happened during a session.
    """
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})


# Bounded so long-lived processes do not accumulate events
EVENT_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=1000)


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "PAGE_COMMITTED",
    "NAVIGATION_BLOCKED",
    "FORM_COMPLETED",
    "SUBMISSION_FAILED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
