"""
Innkeep Availability Engine — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Tuple

from core.time.temporal import StayInterval

# ── Command type strings ──────────────────────────────────────

RESERVATION_CREATE_REQUEST     = "availability.reservation.create.request"
RESERVATION_CHECK_IN_REQUEST   = "availability.reservation.check_in.request"
RESERVATION_CHECK_OUT_REQUEST  = "availability.reservation.check_out.request"
RESERVATION_CANCEL_REQUEST     = "availability.reservation.cancel.request"
RESERVATION_EXTEND_REQUEST     = "availability.reservation.extend.request"
HALL_EVENT_SCHEDULE_REQUEST    = "availability.hall_event.schedule.request"
HALL_EVENT_START_REQUEST       = "availability.hall_event.start.request"
HALL_EVENT_COMPLETE_REQUEST    = "availability.hall_event.complete.request"
HALL_EVENT_CANCEL_REQUEST      = "availability.hall_event.cancel.request"

AVAILABILITY_COMMAND_TYPES = frozenset({
    RESERVATION_CREATE_REQUEST,
    RESERVATION_CHECK_IN_REQUEST,
    RESERVATION_CHECK_OUT_REQUEST,
    RESERVATION_CANCEL_REQUEST,
    RESERVATION_EXTEND_REQUEST,
    HALL_EVENT_SCHEDULE_REQUEST,
    HALL_EVENT_START_REQUEST,
    HALL_EVENT_COMPLETE_REQUEST,
    HALL_EVENT_CANCEL_REQUEST,
})


# ── Shared command namespace ──────────────────────────────────

class _Cmd:
    """Minimal command namespace consumed by the payload builders."""
    __slots__ = ("command_type", "payload", "actor_id", "issued_at")

    def __init__(self, command_type, payload, *, actor_id, issued_at):
        self.command_type = command_type
        self.payload      = payload
        self.actor_id     = actor_id
        self.issued_at    = issued_at


def _require_actor(actor_id: str, issued_at: datetime) -> None:
    if not actor_id:
        raise ValueError("actor_id must be non-empty.")
    if not isinstance(issued_at, datetime) or issued_at.tzinfo is None:
        raise ValueError("issued_at must be a timezone-aware datetime.")


# ── Reservations ──────────────────────────────────────────────

@dataclass(frozen=True)
class CreateReservationRequest:
    reservation_id: str
    room_id:        str
    check_in:       date
    check_out:      date
    actor_id:       str
    issued_at:      datetime
    guest_name:     str = ""
    guests:         int = 1
    status:         str = "CONFIRMED"

    def __post_init__(self):
        if not self.reservation_id:
            raise ValueError("reservation_id must be non-empty.")
        if not self.room_id:
            raise ValueError("room_id must be non-empty.")
        if isinstance(self.check_in, datetime) or isinstance(self.check_out, datetime):
            raise ValueError("check_in and check_out must be dates.")
        StayInterval(self.check_in, self.check_out)
        if not isinstance(self.guests, int) or self.guests < 1:
            raise ValueError("guests must be >= 1.")
        if self.status not in ("PENDING", "CONFIRMED"):
            raise ValueError("status must be PENDING or CONFIRMED.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(RESERVATION_CREATE_REQUEST, {
            "reservation_id": self.reservation_id,
            "room_id": self.room_id,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "guest_name": self.guest_name,
            "guests": self.guests,
            "status": self.status,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class _ReservationStatusRequest:
    reservation_id: str
    actor_id:       str
    issued_at:      datetime
    reason:         str = ""

    COMMAND_TYPE = ""

    def __post_init__(self):
        if not self.reservation_id:
            raise ValueError("reservation_id must be non-empty.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(self.COMMAND_TYPE, {
            "reservation_id": self.reservation_id,
            "reason": self.reason,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


class CheckInReservationRequest(_ReservationStatusRequest):
    COMMAND_TYPE = RESERVATION_CHECK_IN_REQUEST


class CheckOutReservationRequest(_ReservationStatusRequest):
    COMMAND_TYPE = RESERVATION_CHECK_OUT_REQUEST


class CancelReservationRequest(_ReservationStatusRequest):
    COMMAND_TYPE = RESERVATION_CANCEL_REQUEST


@dataclass(frozen=True)
class ExtendStayRequest:
    reservation_id: str
    new_check_out:  date
    actor_id:       str
    issued_at:      datetime

    def __post_init__(self):
        if not self.reservation_id:
            raise ValueError("reservation_id must be non-empty.")
        if not isinstance(self.new_check_out, date) or isinstance(self.new_check_out, datetime):
            raise ValueError("new_check_out must be a date.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(RESERVATION_EXTEND_REQUEST, {
            "reservation_id": self.reservation_id,
            "new_check_out": self.new_check_out,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


# ── Hall events ───────────────────────────────────────────────

@dataclass(frozen=True)
class ScheduleHallEventRequest:
    event_id:  str
    name:      str
    hall_ids:  Tuple[str, ...]
    start:     datetime
    end:       datetime
    actor_id:  str
    issued_at: datetime

    def __post_init__(self):
        if not self.event_id:
            raise ValueError("event_id must be non-empty.")
        if not self.name:
            raise ValueError("name must be non-empty.")
        if not self.hall_ids:
            raise ValueError("At least one hall is required.")
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise ValueError("start and end must be datetimes.")
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("start and end must be timezone-aware.")
        StayInterval(self.start, self.end)
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(HALL_EVENT_SCHEDULE_REQUEST, {
            "event_id": self.event_id,
            "name": self.name,
            "hall_ids": tuple(self.hall_ids),
            "start": self.start,
            "end": self.end,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class _HallEventStatusRequest:
    event_id:  str
    actor_id:  str
    issued_at: datetime
    reason:    str = ""

    COMMAND_TYPE = ""

    def __post_init__(self):
        if not self.event_id:
            raise ValueError("event_id must be non-empty.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(self.COMMAND_TYPE, {
            "event_id": self.event_id,
            "reason": self.reason,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


class StartHallEventRequest(_HallEventStatusRequest):
    COMMAND_TYPE = HALL_EVENT_START_REQUEST


class CompleteHallEventRequest(_HallEventStatusRequest):
    COMMAND_TYPE = HALL_EVENT_COMPLETE_REQUEST


class CancelHallEventRequest(_HallEventStatusRequest):
    COMMAND_TYPE = HALL_EVENT_CANCEL_REQUEST
