"""Transport abstractions for controller connections."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from pts_gateway.protocol import RawFrame


class TransportClosed(Exception):
    """Raised by ``receive`` once the peer has closed the channel."""

    def __init__(self, code: Optional[int] = None, reason: str = "") -> None:
        super().__init__(f"transport closed (code={code}, reason={reason or 'none'})")
        self.code = code
        self.reason = reason


class BaseTransport(ABC):
    """Abstract WebSocket-like duplex channel owned by one device session."""

    @property
    @abstractmethod
    def client(self) -> Any:
        ...

    @property
    @abstractmethod
    def headers(self) -> Mapping[str, str]:
        ...

    @abstractmethod
    async def accept(self) -> None:
        ...

    @abstractmethod
    async def receive(self) -> Optional[RawFrame]:
        """Return the next text/binary frame, ``None`` for an empty frame."""

    @abstractmethod
    async def send_text(self, text: str) -> None:
        ...

    @abstractmethod
    async def close(self, *, code: int = 1000, reason: str = "") -> None:
        ...
