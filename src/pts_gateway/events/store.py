"""Append-only on-disk store for protocol events.

One file per event type per UTC day (``<EventType>_<YYYY-MM-DD>.log``), one
JSON object per line. Entries are never updated or deleted individually;
retention removes whole files.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

LOGGER = logging.getLogger(__name__)

LOG_SUFFIX = ".log"
_EVENT_TYPE_RE = re.compile(r"^[A-Za-z0-9]+$")


class LogEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime
    device_id: Optional[str] = Field(default=None, alias="ptsId")
    event_type: str = Field(alias="messageType")
    data: Dict[str, Any] = Field(default_factory=dict)


def _check_event_type(event_type: str) -> str:
    if not _EVENT_TYPE_RE.match(event_type or ""):
        raise ValueError(f"Invalid event type {event_type!r}")
    return event_type


class LogStore:
    """Reads and appends event log files under a single directory."""

    def __init__(self, log_dir: Path) -> None:
        self._log_dir = Path(log_dir)
        self._lock = threading.Lock()

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def file_for(self, event_type: str, day: Optional[date] = None) -> Path:
        day = day or datetime.now(timezone.utc).date()
        return self._log_dir / f"{_check_event_type(event_type)}_{day.isoformat()}{LOG_SUFFIX}"

    def append(self, event: LogEvent) -> Path:
        path = self.file_for(event.event_type, event.timestamp.astimezone(timezone.utc).date())
        line = event.model_dump_json(by_alias=True) + "\n"
        with self._lock:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as handle:
                handle.write(line)
        return path

    def list_files(self) -> List[str]:
        if not self._log_dir.is_dir():
            return []
        return sorted(path.name for path in self._log_dir.iterdir() if path.suffix == LOG_SUFFIX)

    def recent(self, event_type: str, limit: int = 50, day: Optional[date] = None) -> List[Dict[str, Any]]:
        path = self.file_for(event_type, day)
        if not path.is_file() or limit <= 0:
            return []
        return [self._parse_line(line) for line in self._read_lines(path)[-limit:]]

    def search(self, term: str, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if event_type is not None:
            _check_event_type(event_type)
        results: List[Dict[str, Any]] = []
        for name in self.list_files():
            if event_type and self._event_type_of(name) != event_type:
                continue
            for line in self._read_lines(self._log_dir / name):
                if term in line:
                    entry = self._parse_line(line)
                    entry.setdefault("file", name)
                    results.append(entry)
        return results

    def summary(self) -> Dict[str, Any]:
        files = self.list_files()
        summary: Dict[str, Any] = {
            "totalLogFiles": len(files),
            "totalEntries": 0,
            "lastUpdated": None,
            "messageTypes": {},
        }
        for name in files:
            event_type = self._event_type_of(name)
            lines = self._read_lines(self._log_dir / name)
            bucket = summary["messageTypes"].setdefault(
                event_type,
                {"fileCount": 0, "totalEntries": 0, "lastEntry": None},
            )
            bucket["fileCount"] += 1
            bucket["totalEntries"] += len(lines)
            summary["totalEntries"] += len(lines)
            if not lines:
                continue
            last = self._parse_timestamp(lines[-1])
            if last is None:
                continue
            if bucket["lastEntry"] is None or last > bucket["lastEntry"]:
                bucket["lastEntry"] = last
            if summary["lastUpdated"] is None or last > summary["lastUpdated"]:
                summary["lastUpdated"] = last
        return summary

    def prune(self, days_to_keep: int, *, now: Optional[datetime] = None) -> List[str]:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days_to_keep)
        removed: List[str] = []
        for name in self.list_files():
            path = self._log_dir / name
            try:
                mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
                if mtime < cutoff:
                    path.unlink()
                    removed.append(name)
            except OSError as exc:
                LOGGER.warning("Failed to prune log file %s: %s", name, exc)
        if removed:
            LOGGER.info("Pruned %d event log file(s) older than %d days", len(removed), days_to_keep)
        return removed

    @staticmethod
    def _event_type_of(name: str) -> str:
        stem = name[: -len(LOG_SUFFIX)] if name.endswith(LOG_SUFFIX) else name
        return stem.rsplit("_", 1)[0]

    @staticmethod
    def _read_lines(path: Path) -> List[str]:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            return [line.rstrip("\n") for line in handle if line.strip()]

    @staticmethod
    def _parse_line(line: str) -> Dict[str, Any]:
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            return {"raw": line}
        if not isinstance(entry, dict):
            return {"raw": line}
        return entry

    @staticmethod
    def _parse_timestamp(line: str) -> Optional[datetime]:
        try:
            return LogEvent.model_validate_json(line).timestamp
        except ValidationError:
            return None
