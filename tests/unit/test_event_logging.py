"""Unit tests for the operator event log."""

import json

import pytest

from cvpress.utils.event_logging import get_recent_events, log_render_event


@pytest.mark.unit
def test_events_appended_as_json_lines(tmp_path):
    events_file = tmp_path / "logs" / "events.log"

    log_render_event(events_file, "render_attempt_failed", "req-1", attempt=1, kind="engine_launch")
    log_render_event(events_file, "render_succeeded", "req-1", attempts=2)

    lines = events_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2

    first = json.loads(lines[0])
    assert first["event_type"] == "render_attempt_failed"
    assert first["request_id"] == "req-1"
    assert first["kind"] == "engine_launch"
    assert "timestamp" in first


@pytest.mark.unit
def test_disabled_without_file():
    log_render_event(None, "render_succeeded", "req-1")


@pytest.mark.unit
def test_unknown_event_type_rejected(tmp_path):
    with pytest.raises(ValueError, match="Unknown event type"):
        log_render_event(tmp_path / "events.log", "render_started", "req-1")


@pytest.mark.unit
def test_recent_events_filtered(tmp_path):
    events_file = tmp_path / "events.log"
    for i in range(5):
        log_render_event(events_file, "render_attempt_failed", f"req-{i % 2}", attempt=i)
    log_render_event(events_file, "render_exhausted", "req-0", attempts=3)

    assert len(get_recent_events(events_file, n=3)) == 3
    assert [e["attempt"] for e in get_recent_events(events_file, request_id="req-1")] == [1, 3]
    assert [e["event_type"] for e in get_recent_events(events_file, event_type="render_exhausted")] == [
        "render_exhausted"
    ]


@pytest.mark.unit
def test_malformed_lines_skipped(tmp_path):
    events_file = tmp_path / "events.log"
    log_render_event(events_file, "render_succeeded", "req-1")
    with open(events_file, "a", encoding="utf-8") as f:
        f.write("{not json\n")

    assert len(get_recent_events(events_file)) == 1


@pytest.mark.unit
def test_missing_file_has_no_events(tmp_path):
    assert get_recent_events(tmp_path / "absent.log") == []
