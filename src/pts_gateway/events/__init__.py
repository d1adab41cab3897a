from __future__ import annotations

from pts_gateway.config.settings import get_settings

from .sink import EventLogSink, EventRecorder
from .store import LogEvent, LogStore
from .types import EventType

__all__ = [
    "EventLogSink",
    "EventRecorder",
    "EventType",
    "LogEvent",
    "LogStore",
    "event_sink",
]


event_sink = EventLogSink(
    LogStore(get_settings().log_dir),
    queue_max=get_settings().event_queue_max,
)
