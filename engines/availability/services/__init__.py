"""
Innkeep Availability Engine — Projection Store + Service
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from core.time.temporal import Moment
from engines.availability.commands import (
    RESERVATION_CREATE_REQUEST, RESERVATION_CHECK_IN_REQUEST,
    RESERVATION_CHECK_OUT_REQUEST, RESERVATION_CANCEL_REQUEST,
    RESERVATION_EXTEND_REQUEST, HALL_EVENT_SCHEDULE_REQUEST,
    HALL_EVENT_START_REQUEST, HALL_EVENT_COMPLETE_REQUEST,
    HALL_EVENT_CANCEL_REQUEST,
)
from engines.availability.conflicts import (
    AVAILABLE, AvailabilityResult, find_conflicts,
)
from engines.availability.events import (
    COMMAND_TO_EVENT_TYPE, PAYLOAD_BUILDERS,
    RESERVATION_CREATED_V1, RESERVATION_CHECKED_IN_V1,
    RESERVATION_CHECKED_OUT_V1, RESERVATION_CANCELLED_V1,
    RESERVATION_EXTENDED_V1, HALL_EVENT_SCHEDULED_V1,
    HALL_EVENT_STARTED_V1, HALL_EVENT_COMPLETED_V1, HALL_EVENT_CANCELLED_V1,
)
from engines.availability.models import HallEvent, Reservation
from engines.availability.policies import (
    hall_event_must_be_status_policy, hall_event_must_exist_policy,
    hall_event_must_not_exist_policy, halls_must_be_free_policy,
    reservation_must_be_status_policy, reservation_must_exist_policy,
    reservation_must_not_exist_policy, room_must_be_free_policy,
)
from engines.rate_policy.models import Room

logger = logging.getLogger("innkeep.availability")

_OPEN_RESERVATION = frozenset({"PENDING", "CONFIRMED"})
_STAYING = frozenset({"PENDING", "CONFIRMED", "CHECKED_IN"})
_OPEN_EVENT = frozenset({"SCHEDULED", "IN_PROGRESS"})


class RoomCatalog(Protocol):
    def list_rooms(self, room_type: Optional[str] = None) -> List[Room]: ...


# ── Projection Store ──────────────────────────────────────────

class BookingProjectionStore:
    """
    In-memory read model of resource occupancy.
    Tracks: room reservations and hall events. Records are never
    deleted; cancelled or finished bookings simply stop blocking.
    """

    def __init__(self):
        self._events:       List[dict]             = []
        self._reservations: Dict[str, Reservation] = {}
        self._hall_events:  Dict[str, HallEvent]   = {}

    # ── apply ─────────────────────────────────────────────────

    def apply(self, event_type: str, payload: dict) -> None:
        self._events.append({"event_type": event_type, "payload": payload})

        if event_type == RESERVATION_CREATED_V1:
            self._reservations[payload["reservation_id"]] = Reservation(
                reservation_id=payload["reservation_id"],
                room_id=payload["room_id"],
                check_in=payload["check_in"],
                check_out=payload["check_out"],
                status=payload["status"],
                guest_name=payload["guest_name"],
                guests=payload["guests"],
            )

        elif event_type in (RESERVATION_CHECKED_IN_V1, RESERVATION_CHECKED_OUT_V1,
                            RESERVATION_CANCELLED_V1):
            res = self._reservations.get(payload["reservation_id"])
            if res:
                self._reservations[res.reservation_id] = replace(res, status=payload["status"])

        elif event_type == RESERVATION_EXTENDED_V1:
            res = self._reservations.get(payload["reservation_id"])
            if res:
                self._reservations[res.reservation_id] = replace(
                    res, check_out=payload["new_check_out"])

        elif event_type == HALL_EVENT_SCHEDULED_V1:
            self._hall_events[payload["event_id"]] = HallEvent(
                event_id=payload["event_id"],
                name=payload["name"],
                hall_ids=payload["hall_ids"],
                start=payload["start"],
                end=payload["end"],
                status=payload["status"],
            )

        elif event_type in (HALL_EVENT_STARTED_V1, HALL_EVENT_COMPLETED_V1,
                            HALL_EVENT_CANCELLED_V1):
            event = self._hall_events.get(payload["event_id"])
            if event:
                self._hall_events[event.event_id] = replace(event, status=payload["status"])

    # ── queries ───────────────────────────────────────────────

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self._reservations.get(reservation_id)

    def list_reservations(self, room_id: Optional[str] = None) -> List[Reservation]:
        if room_id is None:
            return list(self._reservations.values())
        return [r for r in self._reservations.values() if r.room_id == room_id]

    def get_hall_event(self, event_id: str) -> Optional[HallEvent]:
        return self._hall_events.get(event_id)

    def list_hall_events(self, hall_id: Optional[str] = None) -> List[HallEvent]:
        if hall_id is None:
            return list(self._hall_events.values())
        return [e for e in self._hall_events.values() if hall_id in e.hall_ids]

    @property
    def event_count(self) -> int:
        return len(self._events)

    def truncate(self):
        self._events.clear()
        self._reservations.clear()
        self._hall_events.clear()


# ── Service ───────────────────────────────────────────────────

class AvailabilityService:
    """
    Availability engine service.
    Answers conflict questions for rooms and halls and records
    bookings once they pass those checks.
    """

    def __init__(
        self, *,
        projection_store: BookingProjectionStore,
        room_catalog: Optional[RoomCatalog] = None,
        persist_event: Optional[Callable[[dict], None]] = None,
    ):
        self._projection    = projection_store
        self._rooms         = room_catalog
        self._persist_event = persist_event

    # ── questions ─────────────────────────────────────────────

    def has_conflict(
        self, resource_id: str, start: Moment, end: Moment,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """
        True when a blocking reservation or hall event holds the resource.

        Rooms take dates and halls take datetimes; a known resource
        checked with the other kind of interval raises ValueError.
        """
        is_hall_interval = isinstance(start, datetime)
        kind = self._resource_kind(resource_id)
        if kind == "room" and is_hall_interval:
            raise ValueError(f"Room {resource_id} is checked with dates, not datetimes.")
        if kind == "hall" and not is_hall_interval:
            raise ValueError(f"Hall {resource_id} is checked with datetimes, not dates.")
        if is_hall_interval:
            bookings = self._projection.list_hall_events(resource_id)
        else:
            bookings = self._projection.list_reservations(resource_id)
        return bool(find_conflicts(bookings, (resource_id,), start, end, exclude_booking_id))

    def _resource_kind(self, resource_id: str) -> Optional[str]:
        if self._rooms is not None and any(
                r.room_id == resource_id for r in self._rooms.list_rooms()):
            return "room"
        if self._projection.list_reservations(resource_id):
            return "room"
        if self._projection.list_hall_events(resource_id):
            return "hall"
        return None

    def check_room_availability(
        self, room_id: str, check_in: date, check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> AvailabilityResult:
        conflicts = find_conflicts(
            self._projection.list_reservations(room_id), (room_id,),
            check_in, check_out, exclude_booking_id)
        if conflicts:
            return AvailabilityResult(
                ok=False,
                reason=f"Room {room_id} is already booked for the selected dates.",
                conflicting_ids=tuple(conflicts),
            )
        return AVAILABLE

    def check_hall_availability(
        self, hall_ids: Sequence[str], start: datetime, end: datetime,
        exclude_event_id: Optional[str] = None,
    ) -> AvailabilityResult:
        """A conflict on any one hall blocks the whole request."""
        if not hall_ids:
            raise ValueError("At least one hall is required.")
        conflicts = find_conflicts(
            self._projection.list_hall_events(), hall_ids, start, end, exclude_event_id)
        if conflicts:
            return AvailabilityResult(
                ok=False,
                reason="Selected hall(s) overlap with existing bookings.",
                conflicting_ids=tuple(conflicts),
            )
        return AVAILABLE

    def find_available_rooms(
        self, check_in: date, check_out: date, guests: int = 1,
        room_type: Optional[str] = None,
    ) -> List[Room]:
        """Active, AVAILABLE rooms with enough capacity and no overlapping booking."""
        if self._rooms is None:
            raise ValueError("AvailabilityService has no room catalog.")
        candidates = [
            room for room in self._rooms.list_rooms(room_type)
            if room.active and room.status == "AVAILABLE" and room.capacity >= guests
        ]
        return [
            room for room in candidates
            if not find_conflicts(self._projection.list_reservations(room.room_id),
                                  (room.room_id,), check_in, check_out)
        ]

    def check_stay_extension(
        self, reservation_id: str, new_check_out: date,
    ) -> AvailabilityResult:
        """Can the reservation keep its room until new_check_out?"""
        res = self._projection.get_reservation(reservation_id)
        if res is None:
            raise ValueError(f"reservation '{reservation_id}' not found.")
        if new_check_out <= res.check_out:
            return AvailabilityResult(
                ok=False, reason="New check-out must be after the current check-out.")
        return self.check_room_availability(
            res.room_id, res.check_in, new_check_out, exclude_booking_id=reservation_id)

    def booked_hall_ids(self, as_of: datetime) -> List[str]:
        """Halls held by a blocking event that has not ended before as_of."""
        held: Dict[str, None] = {}
        for event in self._projection.list_hall_events():
            if event.is_blocking and event.end >= as_of:
                for hall_id in event.hall_ids:
                    held.setdefault(hall_id, None)
        return list(held)

    def halls_released_by_cancellation(self, event_id: str, as_of: datetime) -> List[str]:
        """
        Halls of an event that no other blocking, unfinished event
        holds. These flip back to available once the event is
        cancelled.
        """
        event = self._projection.get_hall_event(event_id)
        if event is None:
            raise ValueError(f"hall event '{event_id}' not found.")
        still_held = set()
        for other in self._projection.list_hall_events():
            if other.event_id != event_id and other.is_blocking and other.end >= as_of:
                still_held.update(other.hall_ids)
        return [h for h in event.hall_ids if h not in still_held]

    # ── writes ────────────────────────────────────────────────

    def execute(self, request) -> dict:
        command = request.to_command()
        rejection = self._check(command)
        if rejection:
            logger.info("Rejected %s: %s", command.command_type, rejection)
            raise ValueError(rejection)
        return self._execute_command(command)

    def _check(self, command) -> Optional[str]:
        p = command.payload
        store = self._projection
        ct = command.command_type

        if ct == RESERVATION_CREATE_REQUEST:
            return (reservation_must_not_exist_policy(p["reservation_id"], store)
                    or room_must_be_free_policy(p["room_id"], p["check_in"],
                                                p["check_out"], store))
        if ct == RESERVATION_CHECK_IN_REQUEST:
            return (reservation_must_exist_policy(p["reservation_id"], store)
                    or reservation_must_be_status_policy(
                        p["reservation_id"], _OPEN_RESERVATION, store))
        if ct == RESERVATION_CHECK_OUT_REQUEST:
            return (reservation_must_exist_policy(p["reservation_id"], store)
                    or reservation_must_be_status_policy(
                        p["reservation_id"], frozenset({"CHECKED_IN"}), store))
        if ct == RESERVATION_CANCEL_REQUEST:
            return (reservation_must_exist_policy(p["reservation_id"], store)
                    or reservation_must_be_status_policy(
                        p["reservation_id"], _OPEN_RESERVATION, store))
        if ct == RESERVATION_EXTEND_REQUEST:
            rejection = (reservation_must_exist_policy(p["reservation_id"], store)
                         or reservation_must_be_status_policy(
                             p["reservation_id"], _STAYING, store))
            if rejection:
                return rejection
            p["previous_check_out"] = store.get_reservation(p["reservation_id"]).check_out
            result = self.check_stay_extension(p["reservation_id"], p["new_check_out"])
            return None if result.ok else result.reason
        if ct == HALL_EVENT_SCHEDULE_REQUEST:
            return (hall_event_must_not_exist_policy(p["event_id"], store)
                    or halls_must_be_free_policy(p["hall_ids"], p["start"], p["end"], store))
        if ct == HALL_EVENT_START_REQUEST:
            return (hall_event_must_exist_policy(p["event_id"], store)
                    or hall_event_must_be_status_policy(
                        p["event_id"], frozenset({"SCHEDULED"}), store))
        if ct in (HALL_EVENT_COMPLETE_REQUEST, HALL_EVENT_CANCEL_REQUEST):
            return (hall_event_must_exist_policy(p["event_id"], store)
                    or hall_event_must_be_status_policy(p["event_id"], _OPEN_EVENT, store))
        return None

    def _execute_command(self, command) -> dict:
        event_type = COMMAND_TO_EVENT_TYPE.get(command.command_type)
        if event_type is None:
            raise ValueError(f"Unknown command: {command.command_type}")

        builder = PAYLOAD_BUILDERS.get(event_type)
        if builder is None:
            raise ValueError(f"No payload builder for: {event_type}")

        payload = builder(command)
        self._projection.apply(event_type, payload)
        if self._persist_event is not None:
            self._persist_event({
                "event_type":  event_type,
                "payload":     payload,
                "actor_id":    command.actor_id,
                "occurred_at": command.issued_at,
            })
        return {"event_type": event_type, "payload": payload}

    @property
    def _store(self) -> BookingProjectionStore:
        return self._projection
