import asyncio
import os
import tempfile
from typing import Any, Mapping, Optional

# Keep event logs written through the module-level sink out of the checkout.
os.environ.setdefault("PTS_GATEWAY_LOG_DIR", tempfile.mkdtemp(prefix="pts-gateway-logs-"))

import pytest  # noqa: E402
from starlette.datastructures import Address  # noqa: E402

from pts_gateway.core.network.session import DeviceSession  # noqa: E402
from pts_gateway.core.network.transport import BaseTransport, TransportClosed  # noqa: E402
from pts_gateway.protocol import FrameCodec  # noqa: E402


class FakeTransport(BaseTransport):
    """In-memory transport; frames pushed with ``feed`` are returned by ``receive``."""

    def __init__(self, headers: Optional[Mapping[str, str]] = None, *, fail_sends: bool = False) -> None:
        self._headers = dict(headers or {})
        self._inbound: asyncio.Queue = asyncio.Queue()
        self.sent: list[str] = []
        self.accepted = False
        self.closed_with: Optional[tuple[int, str]] = None
        self.fail_sends = fail_sends

    @property
    def client(self) -> Any:
        return Address("127.0.0.1", 50000)

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    def feed(self, frame: Any) -> None:
        self._inbound.put_nowait(frame)

    def disconnect(self, code: int = 1000, reason: str = "") -> None:
        self._inbound.put_nowait(TransportClosed(code, reason))

    async def accept(self) -> None:
        self.accepted = True

    async def receive(self) -> Any:
        if self.closed_with is not None:
            raise TransportClosed(reason="closed locally")
        item = await self._inbound.get()
        if isinstance(item, TransportClosed):
            raise item
        return item

    async def send_text(self, text: str) -> None:
        if self.fail_sends or self.closed_with is not None:
            raise RuntimeError("Cannot call send once a close message has been sent.")
        self.sent.append(text)

    async def close(self, *, code: int = 1000, reason: str = "") -> None:
        if self.closed_with is None:
            self.closed_with = (code, reason)
            self._inbound.put_nowait(TransportClosed(code, reason))


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, Optional[str], dict[str, Any]]] = []

    def record(self, event_type, device_id, payload=None, timestamp=None) -> bool:
        name = getattr(event_type, "value", event_type)
        self.events.append((name, device_id, dict(payload or {})))
        return True

    def of_type(self, name: str) -> list[dict[str, Any]]:
        return [payload for event, _, payload in self.events if event == name]


def make_session(
    device_id: str = "PTS-0001",
    *,
    transport: Optional[FakeTransport] = None,
    events: Optional[RecordingSink] = None,
    **kwargs: Any,
) -> DeviceSession:
    return DeviceSession(
        device_id=device_id,
        transport=transport or FakeTransport(),
        codec=FrameCodec(),
        events=events or RecordingSink(),
        **kwargs,
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
