"""Transport implementations for controller connections."""

from .base import BaseTransport, TransportClosed
from .websocket import WebSocketTransport

__all__ = ["BaseTransport", "TransportClosed", "WebSocketTransport"]
