"""
Health API endpoints for the Aqman Gateway.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from .. import __version__
from ..registry import RegistryStore
from .deps import get_registry_store

router = APIRouter()


@router.get("/health")
async def health(store: RegistryStore = Depends(get_registry_store)):
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "aqman-gateway",
        "version": __version__,
        "devices": {"registered": await run_in_threadpool(store.count)},
    }


@router.get("/")
async def root(request: Request, store: RegistryStore = Depends(get_registry_store)):
    """Root endpoint with service information."""
    config = request.app.state.config

    return {
        "service": "Aqman Gateway",
        "version": __version__,
        "description": "Device registry and state proxy for Aqman units",
        "port": config.port,
        "device_timeout": config.device_timeout,
        "devices": {"registered": await run_in_threadpool(store.count)},
        "endpoints": {
            "devices": "/api/devices",
            "device_state": "/api/device/{sn}",
            "device_report": "/api/device/{sn} (POST)",
            "health": "/health",
        },
    }
