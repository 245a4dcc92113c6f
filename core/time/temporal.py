"""
Innkeep Core Time — Temporal Helpers
======================================
Pure functions for date interval logic.
All functions take explicit date arguments — no hidden clock access.

Two interval shapes are used across the engines:
    StayInterval — half-open [start, end): bookings, stays, hall events
    DateRange    — closed   [start, end]:  seasons, rule validity windows
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterator, List, Optional, Union

from core.time.errors import InvalidIntervalError

Moment = Union[date, datetime]


# ══════════════════════════════════════════════════════════════
# STAY INTERVAL — Half-open [start, end)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StayInterval:
    """
    A half-open interval [start, end).

    Invariant: start < end (enforced at construction).
    Touching intervals do not overlap, so a checkout and a new
    check-in on the same day never collide.
    """

    start: Moment
    end: Moment

    def __post_init__(self) -> None:
        if type(self.start) is not type(self.end):
            raise ValueError("StayInterval start and end must be the same type.")
        if self.start >= self.end:
            raise InvalidIntervalError(self.start, self.end)

    def overlaps(self, other: StayInterval) -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, moment: Moment) -> bool:
        return self.start <= moment < self.end

    @property
    def nights(self) -> int:
        """Number of nights for a date interval (calendar days for datetimes)."""
        return (_as_date(self.end) - _as_date(self.start)).days

    def each_night(self) -> Iterator[date]:
        """Yield the date of every night in the stay."""
        first = _as_date(self.start)
        for offset in range(self.nights):
            yield date.fromordinal(first.toordinal() + offset)


# ══════════════════════════════════════════════════════════════
# DATE RANGE — Closed [start, end], either bound may be open
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DateRange:
    """
    A closed date range [start, end].

    A None bound is unbounded on that side.
    """

    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidIntervalError(
                self.start, self.end, "range start must be on or before its end."
            )

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    def overlaps(self, other: DateRange) -> bool:
        starts_before_other_ends = (
            self.start is None or other.end is None or self.start <= other.end
        )
        other_starts_before_end = (
            other.start is None or self.end is None or other.start <= self.end
        )
        return starts_before_other_ends and other_starts_before_end


# ══════════════════════════════════════════════════════════════
# PURE TEMPORAL FUNCTIONS
# ══════════════════════════════════════════════════════════════

def _as_date(moment: Moment) -> date:
    if isinstance(moment, datetime):
        return moment.date()
    return moment


def parse_iso_date(value: Union[str, date]) -> date:
    """Accept a date or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise ValueError(f"'{value}' is not an ISO date (YYYY-MM-DD).") from exc


def nights_between(check_in: date, check_out: date) -> int:
    """
    Nights for a stay. Raises InvalidIntervalError when check-out
    is not after check-in.
    """
    return StayInterval(check_in, check_out).nights


def month_days(year: int, month: int) -> List[date]:
    """Every calendar date of the given month, in order."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}.")
    _, count = calendar.monthrange(year, month)
    return [date(year, month, day) for day in range(1, count + 1)]
