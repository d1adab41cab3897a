"""Fire-and-forget event log sink backed by a background writer task."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Mapping, Optional, Protocol

from fastapi.encoders import jsonable_encoder

from .store import LogEvent, LogStore
from .types import EventType

LOGGER = logging.getLogger(__name__)


class EventRecorder(Protocol):
    def record(
        self,
        event_type: EventType | str,
        device_id: Optional[str],
        payload: Optional[Mapping[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        ...


class EventLogSink:
    """Buffers protocol events and appends them to the store off the hot path.

    ``record`` never blocks and never raises on store failures; callers do not
    await persistence before answering a device. The writer task is bound to
    the loop that called ``start`` so the sink can be restarted under a new
    loop (test clients, reloads).
    """

    def __init__(self, store: LogStore, *, queue_max: int = 10000) -> None:
        self._store = store
        self._queue_max = queue_max
        self._pending: Deque[LogEvent] = deque()
        self._wakeup: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._dropped = 0
        self._stopping = False

    @property
    def store(self) -> LogStore:
        return self._store

    @property
    def dropped(self) -> int:
        return self._dropped

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def record(
        self,
        event_type: EventType | str,
        device_id: Optional[str],
        payload: Optional[Mapping[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        name = event_type.value if isinstance(event_type, EventType) else str(event_type)
        if len(self._pending) >= self._queue_max:
            self._dropped += 1
            LOGGER.warning(
                "Event queue full; dropping %s event for %s (dropped=%d)",
                name,
                device_id,
                self._dropped,
            )
            return False
        event = LogEvent(
            timestamp=timestamp or datetime.now(timezone.utc),
            device_id=device_id,
            event_type=name,
            data=jsonable_encoder(dict(payload or {})),
        )
        self._pending.append(event)
        if self._wakeup is not None:
            self._wakeup.set()
        return True

    def start(self) -> None:
        if self.running:
            return
        self._wakeup = asyncio.Event()
        if self._pending:
            self._wakeup.set()
        self._task = asyncio.create_task(self._run(), name="event-log-writer")

    async def stop(self) -> None:
        """Let the writer drain what is queued, then stop it."""

        task = self._task
        self._task = None
        if task is not None and self._wakeup is not None:
            self._stopping = True
            self._wakeup.set()
            try:
                await task
            finally:
                self._stopping = False
        self._wakeup = None
        await self.flush()

    async def flush(self) -> None:
        while self._pending:
            await self._write(self._pending.popleft())

    async def prune(self, days_to_keep: int) -> list[str]:
        return await asyncio.to_thread(self._store.prune, days_to_keep)

    async def _run(self) -> None:
        wakeup = self._wakeup
        assert wakeup is not None
        while True:
            await wakeup.wait()
            wakeup.clear()
            while self._pending:
                await self._write(self._pending.popleft())
            if self._stopping:
                return

    async def _write(self, event: LogEvent) -> None:
        try:
            await asyncio.to_thread(self._store.append, event)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to persist %s event for %s", event.event_type, event.device_id)
