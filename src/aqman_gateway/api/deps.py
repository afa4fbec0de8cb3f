"""
Request dependencies - resolve the store and device client owned by the app.
"""

from fastapi import Request

from ..registry import RegistryStore
from .proxy import DeviceClient


def get_registry_store(request: Request) -> RegistryStore:
    return request.app.state.store


def get_device_client(request: Request) -> DeviceClient:
    return request.app.state.device_client
