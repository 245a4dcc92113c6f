"""
Innkeep Availability Engine
=============================
Half-open interval conflict checks for rooms and event halls.
"""

from engines.availability.conflicts import AvailabilityResult, find_conflicts, has_conflict
from engines.availability.models import HallEvent, Reservation
from engines.availability.services import AvailabilityService, BookingProjectionStore

__all__ = [
    "AvailabilityResult",
    "find_conflicts",
    "has_conflict",
    "HallEvent",
    "Reservation",
    "AvailabilityService",
    "BookingProjectionStore",
]
