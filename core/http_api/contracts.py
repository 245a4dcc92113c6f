"""
Innkeep HTTP API - Contracts
==============================
Framework-agnostic request/response DTOs for the pricing endpoints.

Rate quotes and bulk updates reuse the engine request dataclasses
(QuoteRateRequest, PreviewBulkUpdateRequest, CommitBulkUpdateRequest);
the contracts below cover the read-side endpoints that have no engine
request of their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Tuple

from core.time.temporal import StayInterval


@dataclass(frozen=True)
class AvailabilityCheckHttpRequest:
    """
    Either room_id with check_in/check_out dates, or hall_ids with
    start/end datetimes.
    """

    room_id: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    hall_ids: Tuple[str, ...] = ()
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    exclude_booking_id: Optional[str] = None

    def __post_init__(self) -> None:
        if bool(self.room_id) == bool(self.hall_ids):
            raise ValueError("Provide exactly one of room_id or hall_ids.")
        if self.room_id:
            if self.check_in is None or self.check_out is None:
                raise ValueError("check_in and check_out are required for a room.")
            StayInterval(self.check_in, self.check_out)
        else:
            if self.start is None or self.end is None:
                raise ValueError("start and end are required for halls.")
            StayInterval(self.start, self.end)

    @property
    def is_hall_check(self) -> bool:
        return bool(self.hall_ids)


@dataclass(frozen=True)
class RateGridHttpRequest:
    year: int
    month: int
    main_channel_id: Optional[str] = None
    sub_channel_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}.")


@dataclass(frozen=True)
class AuditQueryHttpRequest:
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    actor_id: Optional[str] = None
    limit: int = 100

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError("limit must be >= 1.")


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}
