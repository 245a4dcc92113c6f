"""
Innkeep HTTP API - Public API
===============================
"""

from core.http_api.contracts import (
    AuditQueryHttpRequest,
    AvailabilityCheckHttpRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    RateGridHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    error_response,
    exception_response,
    http_status_for,
    map_exception,
    success_response,
)

__all__ = [
    "AuditQueryHttpRequest",
    "AvailabilityCheckHttpRequest",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "RateGridHttpRequest",
    "HttpApiDependencies",
    "error_response",
    "exception_response",
    "http_status_for",
    "map_exception",
    "success_response",
]
