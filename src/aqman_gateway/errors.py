"""
Gateway errors and their HTTP rendering.

Every client-visible error is returned as::

    {"error": {"code": "...", "message": "...", "details": "..."}}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .models import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

MALFORMED_MESSAGE = "The request is malformed."


class GatewayError(Exception):
    """Base class for errors reported to API clients."""

    def __init__(self, code: str, message: str = MALFORMED_MESSAGE,
                 details: str = "", status_code: int = 400):
        super().__init__(f"{code}: {details or message}")
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(code=self.code, message=self.message, details=self.details)
        )


class DeviceNotFoundError(GatewayError):
    """Serial is not present in the registry."""

    def __init__(self, serial: str):
        super().__init__(
            "NoDeviceFound",
            details=f"The requested Aqman {serial} is not yet installed. Not present in DB",
        )
        self.serial = serial


class SerialMismatchError(GatewayError):
    """Serial in the URL path differs from the one in the report body."""

    def __init__(self, path_serial: str, body_serial: str):
        super().__init__(
            "SerialMismatch",
            details=f"Path serial {path_serial!r} does not match reported serial {body_serial!r}",
        )
        self.path_serial = path_serial
        self.body_serial = body_serial


def _describe_validation_errors(exc: RequestValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location or 'body'}: {err.get('msg', 'invalid')}")
    return "; ".join(problems)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _describe_validation_errors(exc)
    logger.warning(f"Malformed request to {request.url.path}: {details}")
    error = GatewayError("MalformedInput", details=details)
    return JSONResponse(status_code=400, content=error.to_response().model_dump())


def register_error_handlers(app: FastAPI) -> None:
    """Attach the structured error handlers to ``app``."""
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
