"""
Wire models for the Aqman Gateway API.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Reading reported for every sensor that could not be obtained
SENTINEL = -1


class DeviceState(BaseModel):
    """Sensor snapshot returned by an Aqman unit."""
    model_config = ConfigDict(extra="ignore")

    sn: str = ""
    dsm101_sn: str = ""
    dt: Optional[datetime] = None
    temp: float = SENTINEL
    humi: float = SENTINEL
    co2: int = SENTINEL
    pm1: int = SENTINEL
    pm2d5: int = SENTINEL
    pm10: int = SENTINEL
    radon: int = SENTINEL
    tvoc: int = SENTINEL

    @classmethod
    def unreachable(cls, serial: str) -> "DeviceState":
        """Sentinel snapshot used when the device cannot be queried."""
        return cls(sn=serial, dsm101_sn=serial, dt=datetime.now(timezone.utc))


class NetworkReport(BaseModel):
    """Network settings a device posts when it comes up."""
    model_config = ConfigDict(extra="ignore")

    sn: str = Field(..., min_length=1)
    ip: str = Field(..., min_length=1)
    port: str = Field(..., min_length=1)
    netmask: str = ""
    gateway: str = ""
    nameserver: str = ""
    dt: Optional[datetime] = None

    @field_validator("port", mode="before")
    @classmethod
    def _port_as_string(cls, value):
        # Some firmware sends the port as a JSON number
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class DeviceList(BaseModel):
    devices: List[str]


class RegistrationResult(BaseModel):
    """Body returned after a device report has been processed."""
    sn: str
    ip: str
    port: str
    updated_at: datetime
    created: bool
    stored: bool


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: str = ""


class ErrorResponse(BaseModel):
    error: ErrorDetail
