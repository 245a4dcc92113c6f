"""
Innkeep Availability Engine — Conflict Resolver
=================================================
One overlap rule for every bookable resource (rooms, halls):

    existing.start < requested.end  and  requested.start < existing.end

over blocking bookings of the same resource. Touching intervals do
not conflict, so a checkout and a check-in on the same day coexist.

A conflict is an answer, not an error. Only a malformed interval
raises (InvalidIntervalError), and it does so before any booking
is looked at.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from core.time.temporal import Moment, StayInterval


class Booking(Protocol):
    @property
    def booking_id(self) -> str: ...

    @property
    def resource_ids(self) -> Tuple[str, ...]: ...

    @property
    def interval(self) -> StayInterval: ...

    @property
    def is_blocking(self) -> bool: ...


@dataclass(frozen=True)
class AvailabilityResult:
    ok: bool
    reason: str = ""
    conflicting_ids: Tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.ok


AVAILABLE = AvailabilityResult(ok=True)


def find_conflicts(
    bookings: Iterable[Booking],
    resource_ids: Sequence[str],
    start: Moment,
    end: Moment,
    exclude_booking_id: Optional[str] = None,
) -> List[str]:
    """Ids of blocking bookings that hold any of the resources during [start, end)."""
    requested = StayInterval(start, end)
    wanted = set(resource_ids)
    return [
        b.booking_id for b in bookings
        if b.booking_id != exclude_booking_id
        and b.is_blocking
        and wanted.intersection(b.resource_ids)
        and b.interval.overlaps(requested)
    ]


def has_conflict(
    bookings: Iterable[Booking],
    resource_id: str,
    start: Moment,
    end: Moment,
    exclude_booking_id: Optional[str] = None,
) -> bool:
    return bool(find_conflicts(bookings, (resource_id,), start, end, exclude_booking_id))
