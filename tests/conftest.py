"""Common fixtures for Aqman Gateway tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from aqman_gateway.api.proxy import DeviceClient
from aqman_gateway.config import GatewayConfig
from aqman_gateway.main import create_app
from aqman_gateway.registry import RegistryStore

TEST_SERIAL = "ABC123"
TEST_IP = "10.0.0.5"
TEST_PORT = "8080"

TEST_READING = {
    "sn": TEST_SERIAL,
    "dsm101_sn": "DSM-0042",
    "dt": "2020-01-01T00:00:00Z",
    "temp": 21.5,
    "humi": 40.2,
    "co2": 400,
    "pm1": 3,
    "pm2d5": 5,
    "pm10": 8,
    "radon": 12,
    "tvoc": 110,
}

# What a stub device answers with: a JSON payload, a raw httpx.Response,
# or a callable raising a transport error.
StubAnswer = Union[Dict[str, Any], httpx.Response, Callable[[httpx.Request], httpx.Response]]


class StubDevices:
    """In-process stand-in for the Aqman units on the network."""

    def __init__(self) -> None:
        self.answers: Dict[str, StubAnswer] = {}
        self.requests: list[httpx.Request] = []

    def add(self, ip: str, port: str, answer: StubAnswer) -> None:
        self.answers[f"{ip}:{port}"] = answer

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.answers.get(f"{request.url.host}:{request.url.port}")
        if answer is None:
            raise httpx.ConnectError("Connection refused", request=request)
        if isinstance(answer, httpx.Response):
            return answer
        if callable(answer):
            return answer(request)
        return httpx.Response(200, json=answer)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def gateway_config(tmp_path) -> GatewayConfig:
    """Return a configuration pointing at a temporary database."""
    return GatewayConfig(
        port=8000,
        db_path=str(tmp_path / "aqmandb" / "aqman.db"),
        device_timeout=1.0,
    )


@pytest.fixture
def store(gateway_config) -> RegistryStore:
    """Return an empty registry store."""
    return RegistryStore(gateway_config.db_path)


@pytest.fixture
def stub_devices() -> StubDevices:
    return StubDevices()


@pytest.fixture
def device_client(stub_devices) -> DeviceClient:
    return DeviceClient(timeout=1.0, transport=stub_devices.transport)


@pytest.fixture
def client(gateway_config, store, device_client) -> TestClient:
    """Return a test client wired to the temporary store and stub devices."""
    app = create_app(gateway_config, store=store, device_client=device_client)
    return TestClient(app)
