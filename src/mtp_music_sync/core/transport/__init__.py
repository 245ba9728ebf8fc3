"""Device transport gateways and session handling."""

from .base import TransportGateway
from .mounted import MountedDeviceTransport
from .session import DEFAULT_TIMEOUT, DeviceSession

__all__ = [
    "DEFAULT_TIMEOUT",
    "DeviceSession",
    "MountedDeviceTransport",
    "TransportGateway",
]
