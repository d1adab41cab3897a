"""WebSocket entrypoint for PTS controllers."""

from __future__ import annotations

from fastapi import APIRouter, WebSocket

from pts_gateway.config.settings import get_settings
from pts_gateway.core.network import device_registry
from pts_gateway.core.network.server import GatewayServer

router = APIRouter()
_server = GatewayServer(registry=device_registry)


@router.websocket(get_settings().ws_path)
async def pts_controller_endpoint(websocket: WebSocket) -> None:
    await _server.handle_websocket(websocket)
