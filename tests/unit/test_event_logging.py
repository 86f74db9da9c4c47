"""Unit tests for the JSON Lines check event log and timestamp helpers."""

import re
from datetime import datetime, timedelta

import pytest

from moodle_image import utils
from moodle_image.utils.event_logging import get_recent_events, log_check_event
from moodle_image.utils.timestamp import _format_relative_time, format_timestamp


@pytest.mark.unit
def test_log_and_read_events(tmp_path):
    events_file = tmp_path / "logs" / "check_events.log"

    log_check_event("inspection", "cli", events_file=events_file, passed=True)
    log_check_event("drift_check", "cli", events_file=events_file, has_drift=False)
    log_check_event("drift_check", "workflow", events_file=events_file, has_drift=True)

    events = get_recent_events(10, events_file=events_file)
    assert [e["event_type"] for e in events] == ["inspection", "drift_check", "drift_check"]

    drift = get_recent_events(1, event_type="drift_check", events_file=events_file)
    assert len(drift) == 1
    assert drift[0]["source"] == "workflow"
    assert drift[0]["has_drift"] is True


@pytest.mark.unit
def test_malformed_lines_are_skipped(tmp_path):
    events_file = tmp_path / "check_events.log"
    log_check_event("inspection", "cli", events_file=events_file)
    with open(events_file, "a", encoding="utf-8") as f:
        f.write("{not json\n")

    assert len(get_recent_events(events_file=events_file)) == 1


@pytest.mark.unit
def test_missing_log_returns_no_events(tmp_path):
    assert get_recent_events(events_file=tmp_path / "absent.log") == []


@pytest.mark.unit
@pytest.mark.parametrize("n", [0, -1])
def test_non_positive_count_returns_no_events(tmp_path, n):
    events_file = tmp_path / "check_events.log"
    log_check_event("inspection", "cli", events_file=events_file)
    log_check_event("drift_check", "cli", events_file=events_file)

    assert get_recent_events(n, events_file=events_file) == []


@pytest.mark.unit
def test_format_timestamp_absolute():
    assert format_timestamp("2025-11-13T18:45:40.572549") == "2025-11-13 18:45:40"


@pytest.mark.unit
def test_format_timestamp_passes_through_garbage():
    assert format_timestamp("not a timestamp") == "not a timestamp"


@pytest.mark.unit
def test_relative_time_units():
    reference = datetime(2025, 11, 13, 12, 0, 0)

    assert _format_relative_time(reference - timedelta(seconds=30), reference) == "30s ago"
    assert _format_relative_time(reference - timedelta(hours=2), reference) == "2h ago"
    assert _format_relative_time(reference - timedelta(days=5), reference) == "5d ago"
    assert _format_relative_time(reference + timedelta(minutes=15), reference) == "15m from now"


@pytest.mark.unit
def test_package_timestamp_helpers():
    assert utils.__all__ == ["now", "now_exact"]
    assert re.fullmatch(r"\d{8}_\d{6}", utils.now())
    assert datetime.fromisoformat(utils.now_exact())
