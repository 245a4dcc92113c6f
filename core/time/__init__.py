"""
Innkeep Core Time — Public API
================================
Explicit clock protocol and date interval helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
)
from core.time.errors import InvalidIntervalError
from core.time.temporal import (
    DateRange,
    StayInterval,
    month_days,
    nights_between,
    parse_iso_date,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "InvalidIntervalError",
    "DateRange",
    "StayInterval",
    "month_days",
    "nights_between",
    "parse_iso_date",
]
