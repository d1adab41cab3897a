"""Per-session heartbeat state machine."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

LOGGER = logging.getLogger(__name__)


class LivenessState(str, enum.Enum):
    ALIVE = "ALIVE"
    PENDING_PROBE = "PENDING_PROBE"
    DEAD = "DEAD"


@dataclass
class LivenessTracker:
    """ALIVE -> PENDING_PROBE on each tick, back to ALIVE on a reply.

    A tick that finds the tracker still PENDING_PROBE means a full interval
    passed without a reply; the tracker becomes DEAD, which is terminal.
    """

    interval: float
    state: LivenessState = LivenessState.ALIVE
    last_probe_at: Optional[datetime] = None
    last_reply_at: Optional[datetime] = None
    probes_sent: int = 0
    now: Callable[[], datetime] = field(default=lambda: datetime.now(timezone.utc), repr=False)

    @property
    def alive(self) -> bool:
        return self.state != LivenessState.DEAD

    def tick(self) -> LivenessState:
        if self.state == LivenessState.DEAD:
            return self.state
        if self.state == LivenessState.PENDING_PROBE:
            self.state = LivenessState.DEAD
            return self.state
        self.state = LivenessState.PENDING_PROBE
        self.last_probe_at = self.now()
        self.probes_sent += 1
        return self.state

    def observe_reply(self) -> None:
        if self.state == LivenessState.DEAD:
            return
        self.state = LivenessState.ALIVE
        self.last_reply_at = self.now()

    async def run(
        self,
        *,
        probe: Callable[[], None],
        on_dead: Callable[[], Awaitable[None]],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Drive ``tick`` every interval until the tracker dies or is cancelled.

        ``probe`` must not block; ``on_dead`` is awaited once.
        """

        while True:
            await sleep(self.interval)
            state = self.tick()
            if state == LivenessState.PENDING_PROBE:
                try:
                    probe()
                except Exception:  # noqa: BLE001
                    LOGGER.exception("Liveness probe failed")
            elif state == LivenessState.DEAD:
                await on_dead()
                return
