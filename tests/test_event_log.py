import asyncio
import json
import os
import time
from datetime import datetime, timezone

import pytest

from pts_gateway.events import EventLogSink, EventType, LogEvent, LogStore


def _event(event_type: str, device_id: str = "PTS-1", **data) -> LogEvent:
    return LogEvent(
        timestamp=datetime.now(timezone.utc),
        device_id=device_id,
        event_type=event_type,
        data=data,
    )


def test_append_writes_one_json_line_per_event(tmp_path):
    store = LogStore(tmp_path)

    path = store.append(_event("UploadStatus", systemStatus="OK"))
    store.append(_event("UploadStatus", systemStatus="DEGRADED"))

    assert path.name.startswith("UploadStatus_")
    assert path.name.endswith(".log")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["ptsId"] == "PTS-1"
    assert first["messageType"] == "UploadStatus"
    assert first["data"] == {"systemStatus": "OK"}


def test_recent_returns_tail_and_tolerates_bad_lines(tmp_path):
    store = LogStore(tmp_path)
    for index in range(5):
        store.append(_event("Ping", index=index))
    with store.file_for("Ping").open("a", encoding="utf-8") as handle:
        handle.write("garbage\n")

    entries = store.recent("Ping", limit=3)

    assert [entry.get("data", {}).get("index") for entry in entries[:2]] == [3, 4]
    assert entries[-1] == {"raw": "garbage"}


def test_recent_for_missing_file_is_empty(tmp_path):
    assert LogStore(tmp_path).recent("Connection") == []


def test_event_type_must_be_a_plain_name(tmp_path):
    store = LogStore(tmp_path)

    with pytest.raises(ValueError):
        store.file_for("../etc")
    with pytest.raises(ValueError):
        store.recent("Bad-Type")


def test_search_and_summary(tmp_path):
    store = LogStore(tmp_path)
    store.append(_event("Connection", device_id="PTS-A"))
    store.append(_event("Connection", device_id="PTS-B"))
    store.append(_event("Disconnection", device_id="PTS-A"))

    matches = store.search("PTS-A")
    assert len(matches) == 2
    assert {entry["messageType"] for entry in matches} == {"Connection", "Disconnection"}
    assert len(store.search("PTS-A", event_type="Connection")) == 1

    summary = store.summary()
    assert summary["totalLogFiles"] == 2
    assert summary["totalEntries"] == 3
    assert summary["messageTypes"]["Connection"]["totalEntries"] == 2
    assert summary["messageTypes"]["Connection"]["fileCount"] == 1
    assert summary["lastUpdated"] is not None


def test_prune_removes_files_older_than_cutoff(tmp_path):
    store = LogStore(tmp_path)
    old = tmp_path / "Connection_2020-01-01.log"
    old.write_text("{}\n", encoding="utf-8")
    stale = time.time() - 40 * 24 * 60 * 60
    os.utime(old, (stale, stale))
    fresh = store.append(_event("Connection"))

    removed = store.prune(30)

    assert removed == ["Connection_2020-01-01.log"]
    assert not old.exists()
    assert fresh.exists()


@pytest.mark.asyncio
async def test_sink_flush_persists_recorded_events(tmp_path):
    sink = EventLogSink(LogStore(tmp_path))

    assert sink.record(EventType.CONNECTION, "PTS-1", {"when": datetime(2024, 1, 1, tzinfo=timezone.utc)})
    assert sink.pending == 1
    await sink.flush()

    entries = sink.store.recent("Connection")
    assert entries[0]["data"]["when"].startswith("2024-01-01")
    assert sink.pending == 0


@pytest.mark.asyncio
async def test_sink_drops_when_full(tmp_path):
    sink = EventLogSink(LogStore(tmp_path), queue_max=1)

    assert sink.record("Ping", "PTS-1") is True
    assert sink.record("Ping", "PTS-1") is False
    assert sink.dropped == 1


@pytest.mark.asyncio
async def test_background_writer_drains_and_stop_flushes(tmp_path):
    sink = EventLogSink(LogStore(tmp_path))
    sink.start()
    assert sink.running

    sink.record(EventType.PING, "PTS-1")
    for _ in range(50):
        if sink.store.recent("Ping"):
            break
        await asyncio.sleep(0.01)
    sink.record(EventType.PING, "PTS-2")
    await sink.stop()

    assert not sink.running
    assert len(sink.store.recent("Ping")) == 2


@pytest.mark.asyncio
async def test_writer_failure_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    sink = EventLogSink(LogStore(blocker))

    sink.record(EventType.PING, "PTS-1")
    await sink.flush()

    assert "Failed to persist Ping event" in caplog.text
