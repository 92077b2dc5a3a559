"""Domain event constants and publisher.

Save and destroy flows publish an event after their transaction commits.
Publishing logs the event and appends it to an in-process buffer that tests
and diagnostics can drain.
"""

from __future__ import annotations

from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

APPLICANT_SAVED = "applicant.saved"
APPLICANT_DESTROYED = "applicant.destroyed"

EVENT_BUFFER: List[Dict[str, Any]] = []


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": dict(payload)})


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "APPLICANT_SAVED",
    "APPLICANT_DESTROYED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
