"""
Innkeep Availability Engine — Policies
"""
from __future__ import annotations

from typing import Optional

from engines.availability.conflicts import find_conflicts


def reservation_must_exist_policy(reservation_id: str, store) -> Optional[str]:
    if store.get_reservation(reservation_id) is None:
        return f"reservation '{reservation_id}' not found."
    return None


def reservation_must_not_exist_policy(reservation_id: str, store) -> Optional[str]:
    if store.get_reservation(reservation_id) is not None:
        return f"reservation '{reservation_id}' already exists."
    return None


def reservation_must_be_status_policy(
    reservation_id: str, allowed: frozenset, store,
) -> Optional[str]:
    res = store.get_reservation(reservation_id)
    if res and res.status not in allowed:
        return (f"reservation '{reservation_id}' is {res.status}; "
                f"expected one of {sorted(allowed)}.")
    return None


def room_must_be_free_policy(
    room_id: str, start, end, store, exclude_booking_id: Optional[str] = None,
) -> Optional[str]:
    conflicts = find_conflicts(
        store.list_reservations(), (room_id,), start, end, exclude_booking_id)
    if conflicts:
        return (f"room '{room_id}' is already booked for {start} – {end} "
                f"({', '.join(conflicts)}).")
    return None


def hall_event_must_exist_policy(event_id: str, store) -> Optional[str]:
    if store.get_hall_event(event_id) is None:
        return f"hall event '{event_id}' not found."
    return None


def hall_event_must_not_exist_policy(event_id: str, store) -> Optional[str]:
    if store.get_hall_event(event_id) is not None:
        return f"hall event '{event_id}' already exists."
    return None


def hall_event_must_be_status_policy(
    event_id: str, allowed: frozenset, store,
) -> Optional[str]:
    event = store.get_hall_event(event_id)
    if event and event.status not in allowed:
        return (f"hall event '{event_id}' is {event.status}; "
                f"expected one of {sorted(allowed)}.")
    return None


def halls_must_be_free_policy(
    hall_ids, start, end, store, exclude_booking_id: Optional[str] = None,
) -> Optional[str]:
    if find_conflicts(store.list_hall_events(), hall_ids, start, end, exclude_booking_id):
        return "Selected hall(s) overlap with existing bookings."
    return None
