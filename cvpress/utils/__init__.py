"""
Shared utilities for cvpress.

Common functionality used across contexts:
- Logger setup
- Operator event log
- Timestamps
"""

from cvpress.utils.event_logging import get_recent_events, log_render_event
from cvpress.utils.timestamp import now, now_exact

__all__ = ["get_recent_events", "log_render_event", "now", "now_exact"]
