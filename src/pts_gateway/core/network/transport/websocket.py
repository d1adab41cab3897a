"""WebSocket transport wrapper for controller I/O."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from pts_gateway.protocol import RawFrame

from .base import BaseTransport, TransportClosed

LOGGER = logging.getLogger(__name__)


class WebSocketTransport(BaseTransport):
    """Thin wrapper around FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._closed = False

    @property
    def websocket(self) -> WebSocket:
        return self._websocket

    @property
    def client(self) -> Any:
        return self._websocket.client

    @property
    def headers(self) -> Mapping[str, str]:
        return self._websocket.headers

    async def accept(self) -> None:
        await self._websocket.accept()

    async def receive(self) -> Optional[RawFrame]:
        if self._websocket.application_state == WebSocketState.DISCONNECTED:
            raise TransportClosed(reason="closed locally")
        try:
            message = await self._websocket.receive()
        except RuntimeError as exc:
            raise TransportClosed(reason=str(exc)) from exc
        if message["type"] == "websocket.disconnect":
            self._closed = True
            raise TransportClosed(message.get("code"), message.get("reason") or "")
        text = message.get("text")
        if text is not None:
            return text
        return message.get("bytes")

    async def send_text(self, text: str) -> None:
        await self._websocket.send_text(text)

    async def close(self, *, code: int = 1000, reason: str = "") -> None:
        if self._closed:
            return
        self._closed = True
        if self._websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self._websocket.close(code=code, reason=reason)
        except RuntimeError as exc:
            LOGGER.debug("WebSocket close skipped: %s", exc)
