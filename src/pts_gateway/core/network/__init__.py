"""Controller connection layer: transports, sessions and the registry."""

from .gateway import DeviceGateway, DeviceNotFound
from .liveness import LivenessState, LivenessTracker
from .registry import SessionRegistry
from .session import DeviceSession

__all__ = [
    "DeviceGateway",
    "DeviceNotFound",
    "DeviceSession",
    "LivenessState",
    "LivenessTracker",
    "SessionRegistry",
    "device_gateway",
    "device_registry",
]


device_registry = SessionRegistry()
device_gateway = DeviceGateway(device_registry)
