"""
Check event logging utilities (Tier 2 logging).

Records one JSON Lines entry per inspection or drift check so that the history
of runs can be listed without parsing the detailed Tier 1 logs.

For detailed within-context logging (Tier 1), use moodle_image.utils.logger instead.

Usage:
    from moodle_image.utils.event_logging import log_check_event, get_recent_events

    log_check_event(
        event_type="drift_check",
        source="cli",
        has_drift=True,
        drifted=["php"],
    )

    events = get_recent_events(5, event_type="drift_check")
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from moodle_image.utils.timestamp import now_exact

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
CHECK_EVENTS_FILE = Path(os.getenv("CHECK_EVENTS_FILE", LOGS_PATH / "check_events.log"))


def log_check_event(
    event_type: str, source: str, events_file: Optional[Path] = None, **extra_fields
) -> dict:
    """
    Append an event to the check event log.

    Args:
        event_type: Type of event (e.g., "inspection", "drift_check", "issue_updated")
        source: Event source (e.g., "cli", "workflow", "manual")
        events_file: Override log location (defaults to CHECK_EVENTS_FILE)
        **extra_fields: Additional event-specific fields (must be JSON-serializable)

    Returns:
        The event dict as written
    """
    events_file = events_file or CHECK_EVENTS_FILE
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")

    return event


def get_recent_events(
    n: int = 10, event_type: Optional[str] = None, events_file: Optional[Path] = None
) -> List[dict]:
    """
    Get the last n events from the check event log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        event_type: Filter to only events of this type (optional)
        events_file: Override log location (defaults to CHECK_EVENTS_FILE)

    Returns:
        List of event dicts (most recent last)
    """
    if n <= 0:
        return []

    events_file = events_file or CHECK_EVENTS_FILE
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

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
