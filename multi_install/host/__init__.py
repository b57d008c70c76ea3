"""Host library manager interfaces and transports."""

from .base import HostAddon, HostApi, InstalledCallback
from .http_bridge import HttpHostAddon, HttpHostBridge, HostApiError

__all__ = [
    'HostAddon',
    'HostApi',
    'InstalledCallback',
    'HttpHostAddon',
    'HttpHostBridge',
    'HostApiError',
]
