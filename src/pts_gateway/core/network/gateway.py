"""Facade for controller session access and server-originated commands."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pts_gateway.events import EventRecorder, EventType, event_sink
from pts_gateway.models.api import SessionSnapshot
from pts_gateway.models.wire import Message

from .registry import SessionRegistry
from .session import DeviceSession

LOGGER = logging.getLogger(__name__)


class DeviceNotFound(KeyError):
    """No live session exists for the requested controller."""

    def __init__(self, device_id: str) -> None:
        super().__init__(device_id)
        self.device_id = device_id

    def __str__(self) -> str:
        return f"PTS controller {self.device_id} is not connected"


class DeviceGateway:
    """Single entrypoint for session lookup + outbound requests to controllers."""

    def __init__(self, registry: SessionRegistry, events: Optional[EventRecorder] = None) -> None:
        self._registry = registry
        self._events = events if events is not None else event_sink

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    def count(self) -> int:
        return len(self._registry)

    def list_sessions(self) -> List[SessionSnapshot]:
        return self._registry.list()

    def get_session(self, device_id: str) -> SessionSnapshot:
        session = self._live_session(device_id)
        return session.snapshot()

    async def send(self, device_id: str, message_type: str, payload: Optional[Dict[str, Any]] = None) -> Message:
        """Push a request to ``device_id`` with a freshly allocated packetId.

        Raises ``DeviceNotFound`` when the controller is absent, closed, or the
        write fails.
        """

        session = self._live_session(device_id)
        message, sent = await session.send_request(message_type, payload)
        if not sent:
            LOGGER.warning("Command %s to %s was not delivered", message_type, device_id)
            raise DeviceNotFound(device_id)
        LOGGER.info("Command %s sent to %s (packet %d)", message_type, device_id, message.packet_id)
        self._events.record(
            EventType.COMMAND,
            device_id,
            {
                "command": message_type,
                "packetId": message.packet_id,
                "data": message.data,
            },
        )
        return message

    def _live_session(self, device_id: str) -> DeviceSession:
        session = self._registry.lookup(device_id)
        if session is None or session.closed:
            raise DeviceNotFound(device_id)
        return session
