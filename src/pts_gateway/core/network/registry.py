"""Registry of active controller sessions keyed by device identity."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from pts_gateway.models.api import SessionSnapshot

from .session import CLOSE_NORMAL, REASON_REPLACED, DeviceSession

LOGGER = logging.getLogger(__name__)


class SessionRegistry:
    """Holds at most one active session per device identity.

    Mutations are serialized by a registry-wide lock; ``lookup`` and
    ``list`` read the mapping without taking it.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._sessions: Dict[str, DeviceSession] = {}

    async def register(self, device_id: str, session: DeviceSession) -> Optional[DeviceSession]:
        """Install ``session``, closing and returning any session it supersedes."""

        async with self._lock:
            previous = self._sessions.get(device_id)
            if previous is session:
                return None
            if previous is not None:
                LOGGER.info("PTS controller %s already connected, closing old connection", device_id)
                await previous.close(code=CLOSE_NORMAL, reason=REASON_REPLACED)
            session.registry = self
            self._sessions[device_id] = session
            return previous

    async def unregister(self, device_id: str, session: DeviceSession) -> bool:
        """Remove ``session`` only if it is still the registered one."""

        async with self._lock:
            if self._sessions.get(device_id) is not session:
                return False
            del self._sessions[device_id]
            return True

    def lookup(self, device_id: str) -> Optional[DeviceSession]:
        return self._sessions.get(device_id)

    def list(self) -> List[SessionSnapshot]:
        return [session.snapshot() for session in list(self._sessions.values())]

    def device_ids(self) -> List[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._sessions

    async def close_all(self, *, reason: str) -> None:
        for session in list(self._sessions.values()):
            await session.close(code=CLOSE_NORMAL, reason=reason)
            await session.finalize()
