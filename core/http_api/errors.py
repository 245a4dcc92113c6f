"""
Innkeep HTTP API - Error Mapping
==================================
Stable transport error mapping for engine failures.
"""

from __future__ import annotations

from typing import Any, Optional

from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse
from core.time.errors import InvalidIntervalError
from engines.hotel_rates.errors import BulkWorkflowStateError, UnknownStayTypeError

HTTP_STATUS_BY_CODE = {
    "INVALID_REQUEST": 400,
    "INVALID_INTERVAL": 400,
    "UNKNOWN_STAY_TYPE": 404,
    "WORKFLOW_STATE": 409,
    "METHOD_NOT_ALLOWED": 405,
}


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(data: Any) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data).to_dict()


def map_exception(exc: Exception) -> HttpApiErrorBody:
    """
    Translate an engine exception into a transport error body.

    Order matters: InvalidIntervalError is a ValueError.
    """
    if isinstance(exc, InvalidIntervalError):
        return HttpApiErrorBody(
            code="INVALID_INTERVAL",
            message=str(exc),
            details={"start": str(exc.start), "end": str(exc.end)},
        )
    if isinstance(exc, BulkWorkflowStateError):
        return HttpApiErrorBody(
            code="WORKFLOW_STATE",
            message=str(exc),
            details={"operation": exc.operation, "state": exc.state},
        )
    if isinstance(exc, UnknownStayTypeError):
        return HttpApiErrorBody(
            code="UNKNOWN_STAY_TYPE",
            message=str(exc),
            details={"stay_type": exc.stay_type},
        )
    if isinstance(exc, KeyError):
        return HttpApiErrorBody(
            code="INVALID_REQUEST", message=f"Missing field: {exc.args[0]}.")
    return HttpApiErrorBody(code="INVALID_REQUEST", message=str(exc))


def exception_response(exc: Exception) -> dict[str, Any]:
    body = map_exception(exc)
    return error_response(code=body.code, message=body.message, details=body.details)


def http_status_for(payload: dict[str, Any]) -> int:
    if payload.get("ok"):
        return 200
    return HTTP_STATUS_BY_CODE.get(payload["error"]["code"], 400)
