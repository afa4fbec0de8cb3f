"""
Device proxy - queries Aqman units for their current readings.

Devices expose their snapshot at the root of their own HTTP server
(``http://{ip}:{port}``). A device that cannot be reached is not an API
error: callers get a typed unreachable result and answer with sentinel data.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import ValidationError

from ..models import DeviceState

logger = logging.getLogger(__name__)


@dataclass
class DeviceQueryResult:
    """Outcome of a single device query."""
    state: DeviceState
    reachable: bool
    error: Optional[str] = None


class DeviceClient:
    """Issues state queries to Aqman units."""

    def __init__(self, timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def device_url(ip: str, port: str) -> str:
        return f"http://{ip}:{port}"

    async def _get_json(self, url: str):
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(url)
            return response.json()

    async def fetch_state(self, serial: str, ip: str, port: str) -> DeviceQueryResult:
        """
        Query a device and normalize its answer.

        Args:
            serial: Serial the device is registered under
            ip: Last-known device address
            port: Last-known device port

        Returns:
            DeviceQueryResult whose state always carries ``dt`` = now
        """
        url = self.device_url(ip, port)

        # httpx timeouts are per phase; the deadline bounds the whole exchange
        try:
            payload = await asyncio.wait_for(self._get_json(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            return self._unreachable(serial, url, f"timeout after {self.timeout}s ({e.__class__.__name__})")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._unreachable(serial, url, f"{e.__class__.__name__}: {e}")
        except ValueError as e:
            return self._unreachable(serial, url, f"invalid JSON from device: {e}")

        if not isinstance(payload, dict):
            return self._unreachable(serial, url, "device response is not a JSON object")

        # Fields the device sent as null fall back to their defaults
        payload = {key: value for key, value in payload.items() if value is not None}
        payload.setdefault("sn", serial)
        payload.setdefault("dsm101_sn", serial)
        # The device clock is replaced by the query time below
        payload.pop("dt", None)

        try:
            state = DeviceState.model_validate(payload)
        except ValidationError as e:
            return self._unreachable(serial, url, f"unexpected device payload: {e.error_count()} invalid field(s)")

        state.dt = datetime.now(timezone.utc)
        logger.debug(f"Device {serial} answered from {url}")
        return DeviceQueryResult(state=state, reachable=True)

    @staticmethod
    def _unreachable(serial: str, url: str, reason: str) -> DeviceQueryResult:
        logger.warning(f"Device {serial} unreachable at {url}: {reason}")
        return DeviceQueryResult(
            state=DeviceState.unreachable(serial),
            reachable=False,
            error=reason,
        )
