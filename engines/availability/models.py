"""
Innkeep Availability Engine — Bookings
========================================
Room reservations and hall events. Both occupy one or more resources
over a half-open interval [start, end).

Reservations use dates (check-in / check-out day); hall events use
timezone-aware datetimes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Tuple

from core.time.temporal import StayInterval

RESERVATION_STATUSES = frozenset({
    "PENDING", "CONFIRMED", "CHECKED_IN", "CHECKED_OUT", "CANCELLED",
})
HALL_EVENT_STATUSES = frozenset({
    "SCHEDULED", "IN_PROGRESS", "COMPLETED", "CANCELLED",
})

# No longer hold their resource; the record is kept.
NON_BLOCKING_RESERVATION_STATUSES = frozenset({"CANCELLED", "CHECKED_OUT"})
NON_BLOCKING_EVENT_STATUSES = frozenset({"CANCELLED", "COMPLETED"})


@dataclass(frozen=True)
class Reservation:
    reservation_id: str
    room_id: str
    check_in: date
    check_out: date
    status: str = "CONFIRMED"
    guest_name: str = ""
    guests: int = 1

    def __post_init__(self):
        if not self.reservation_id: raise ValueError("reservation_id must be non-empty.")
        if not self.room_id:        raise ValueError("room_id must be non-empty.")
        if self.status not in RESERVATION_STATUSES:
            raise ValueError(f"status must be one of {sorted(RESERVATION_STATUSES)}.")
        StayInterval(self.check_in, self.check_out)

    @property
    def booking_id(self) -> str:
        return self.reservation_id

    @property
    def resource_ids(self) -> Tuple[str, ...]:
        return (self.room_id,)

    @property
    def interval(self) -> StayInterval:
        return StayInterval(self.check_in, self.check_out)

    @property
    def is_blocking(self) -> bool:
        return self.status not in NON_BLOCKING_RESERVATION_STATUSES


@dataclass(frozen=True)
class HallEvent:
    event_id: str
    name: str
    hall_ids: Tuple[str, ...]
    start: datetime
    end: datetime
    status: str = "SCHEDULED"

    def __post_init__(self):
        if not self.event_id: raise ValueError("event_id must be non-empty.")
        if not self.hall_ids: raise ValueError("hall_ids must be non-empty.")
        if self.status not in HALL_EVENT_STATUSES:
            raise ValueError(f"status must be one of {sorted(HALL_EVENT_STATUSES)}.")
        object.__setattr__(self, "hall_ids", tuple(self.hall_ids))
        StayInterval(self.start, self.end)

    @property
    def booking_id(self) -> str:
        return self.event_id

    @property
    def resource_ids(self) -> Tuple[str, ...]:
        return self.hall_ids

    @property
    def interval(self) -> StayInterval:
        return StayInterval(self.start, self.end)

    @property
    def is_blocking(self) -> bool:
        return self.status not in NON_BLOCKING_EVENT_STATUSES
