"""
Aqman Gateway API endpoints.
"""

from .devices import router as devices_router
from .health import router as health_router
from .proxy import DeviceClient, DeviceQueryResult

__all__ = ["devices_router", "health_router", "DeviceClient", "DeviceQueryResult"]
