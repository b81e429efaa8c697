"""
Operator event logging for cvpress.

Appends render lifecycle events to a JSON Lines file (one JSON object per
line) so operators can inspect the lower-level causes that the pipeline
collapses into a single user-facing failure.

For detailed human-readable logging, use the per-context loguru wrappers instead.

Usage:
    from cvpress.utils.event_logging import log_render_event, get_recent_events

    log_render_event(
        events_file=Path("outs/logs/render_events.log"),
        event_type="render_attempt_failed",
        request_id="3f2a9c",
        attempt=1,
        kind="engine_launch",
        message="Browser closed unexpectedly",
    )

    failures = get_recent_events(events_file, 20, event_type="render_attempt_failed")
"""

import json
from pathlib import Path
from typing import List, Optional

from cvpress.utils.timestamp import now_exact

# Event types emitted by the rendering context
RENDER_EVENT_TYPES = {"render_attempt_failed", "render_succeeded", "render_exhausted"}


def log_render_event(
    events_file: Optional[Path], event_type: str, request_id: str, **extra_fields
) -> None:
    """
    Append an event to the operator event log.

    Does nothing when events_file is None (event logging disabled).

    Args:
        events_file: JSON Lines file to append to
        event_type: One of RENDER_EVENT_TYPES
        request_id: Identifier of the generation request
        **extra_fields: Additional event-specific fields (attempt, kind, message, ...)

    Raises:
        ValueError: If event_type is unknown
    """
    if event_type not in RENDER_EVENT_TYPES:
        raise ValueError(f"Unknown event type: {event_type}")

    if events_file is None:
        return

    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "request_id": request_id,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    events_file: Path,
    n: int = 10,
    request_id: Optional[str] = None,
    event_type: Optional[str] = None,
) -> List[dict]:
    """
    Get the last n events from the event log, optionally filtered.

    Args:
        events_file: JSON Lines file to read
        n: Number of recent events to return (default: 10)
        request_id: Filter to only events for this request (optional)
        event_type: Filter to only events of this type (optional)

    Returns:
        List of event dicts (most recent last)
    """
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if request_id:
        events = [e for e in events if e.get("request_id") == request_id]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
