"""
Device API endpoints.

- GET  /api/devices       list registered serials
- GET  /api/device/{sn}   proxy a state query to the device
- POST /api/device/{sn}   device reports its network address
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from ..errors import DeviceNotFoundError, SerialMismatchError
from ..models import DeviceList, DeviceState, ErrorResponse, NetworkReport, RegistrationResult
from ..registry import RegistryStore
from .deps import get_device_client, get_registry_store
from .proxy import DeviceClient

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/devices", response_model=DeviceList)
async def list_devices(store: RegistryStore = Depends(get_registry_store)):
    """List the serials of every device that has reported in."""
    return DeviceList(devices=await run_in_threadpool(store.list_serials))


@router.get(
    "/device/{sn}",
    response_model=DeviceState,
    responses={400: {"model": ErrorResponse}},
)
async def get_device_state(
    sn: str,
    store: RegistryStore = Depends(get_registry_store),
    client: DeviceClient = Depends(get_device_client),
):
    """
    Get the current readings of a device.

    Unknown serials are a client error. A registered device that does not
    answer yields sentinel readings (-1) with HTTP 200.
    """
    address = await run_in_threadpool(store.lookup, sn)
    if address is None:
        raise DeviceNotFoundError(sn)

    ip, port = address
    result = await client.fetch_state(sn, ip, port)
    if not result.reachable:
        logger.info(f"Returning sentinel readings for {sn}: {result.error}")
    return result.state


@router.post(
    "/device/{sn}",
    response_model=RegistrationResult,
    responses={400: {"model": ErrorResponse}},
)
async def report_device_state(
    sn: str,
    report: NetworkReport,
    store: RegistryStore = Depends(get_registry_store),
):
    """Record the network address a device reports for itself."""
    logger.info(
        f"Network report from {report.sn}: ip={report.ip} port={report.port} "
        f"netmask={report.netmask} gateway={report.gateway} nameserver={report.nameserver}"
    )

    if report.sn != sn:
        logger.warning(f"Device report for {report.sn} posted to /api/device/{sn}")
        raise SerialMismatchError(sn, report.sn)

    now = datetime.now(timezone.utc)
    created = await run_in_threadpool(store.upsert, report.sn, report.ip, report.port, now)

    return RegistrationResult(
        sn=report.sn,
        ip=report.ip,
        port=report.port,
        updated_at=now,
        created=bool(created),
        stored=created is not None,
    )
