"""PTS controller session gateway: connection layer and protocol dispatch."""

from .network import (
    DeviceGateway,
    DeviceNotFound,
    DeviceSession,
    SessionRegistry,
    device_gateway,
    device_registry,
)
from .ws import router

__all__ = [
    "router",
    "DeviceGateway",
    "DeviceNotFound",
    "DeviceSession",
    "SessionRegistry",
    "device_gateway",
    "device_registry",
]
