"""
Innkeep Availability Engine — Event Types and Payload Builders
================================================================
Engine: availability
Scope:  Room reservations and hall events, as far as they occupy
        a resource. Guest, folio and invoice data live elsewhere.
"""

from __future__ import annotations

# ── Event Type Constants ──────────────────────────────────────

RESERVATION_CREATED_V1      = "availability.reservation.created.v1"
RESERVATION_CHECKED_IN_V1   = "availability.reservation.checked_in.v1"
RESERVATION_CHECKED_OUT_V1  = "availability.reservation.checked_out.v1"
RESERVATION_CANCELLED_V1    = "availability.reservation.cancelled.v1"
RESERVATION_EXTENDED_V1     = "availability.reservation.extended.v1"
HALL_EVENT_SCHEDULED_V1     = "availability.hall_event.scheduled.v1"
HALL_EVENT_STARTED_V1       = "availability.hall_event.started.v1"
HALL_EVENT_COMPLETED_V1     = "availability.hall_event.completed.v1"
HALL_EVENT_CANCELLED_V1     = "availability.hall_event.cancelled.v1"

AVAILABILITY_EVENT_TYPES = (
    RESERVATION_CREATED_V1,
    RESERVATION_CHECKED_IN_V1,
    RESERVATION_CHECKED_OUT_V1,
    RESERVATION_CANCELLED_V1,
    RESERVATION_EXTENDED_V1,
    HALL_EVENT_SCHEDULED_V1,
    HALL_EVENT_STARTED_V1,
    HALL_EVENT_COMPLETED_V1,
    HALL_EVENT_CANCELLED_V1,
)

COMMAND_TO_EVENT_TYPE = {
    "availability.reservation.create.request":    RESERVATION_CREATED_V1,
    "availability.reservation.check_in.request":  RESERVATION_CHECKED_IN_V1,
    "availability.reservation.check_out.request": RESERVATION_CHECKED_OUT_V1,
    "availability.reservation.cancel.request":    RESERVATION_CANCELLED_V1,
    "availability.reservation.extend.request":    RESERVATION_EXTENDED_V1,
    "availability.hall_event.schedule.request":   HALL_EVENT_SCHEDULED_V1,
    "availability.hall_event.start.request":      HALL_EVENT_STARTED_V1,
    "availability.hall_event.complete.request":   HALL_EVENT_COMPLETED_V1,
    "availability.hall_event.cancel.request":     HALL_EVENT_CANCELLED_V1,
}

# ── Payload Builders ──────────────────────────────────────────

def build_reservation_created_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "reservation_id": p["reservation_id"],
        "room_id":        p["room_id"],
        "check_in":       p["check_in"],
        "check_out":      p["check_out"],
        "status":         p.get("status", "CONFIRMED"),
        "guest_name":     p.get("guest_name", ""),
        "guests":         p.get("guests", 1),
        "created_by":     cmd.actor_id,
        "created_at":     cmd.issued_at,
    }


def _build_status_payload(id_field, status):
    def builder(cmd) -> dict:
        p = cmd.payload
        return {
            id_field:     p[id_field],
            "status":     status,
            "reason":     p.get("reason", ""),
            "changed_by": cmd.actor_id,
            "changed_at": cmd.issued_at,
        }
    return builder


def build_reservation_extended_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "reservation_id":    p["reservation_id"],
        "new_check_out":     p["new_check_out"],
        "previous_check_out": p["previous_check_out"],
        "extended_by":       cmd.actor_id,
        "extended_at":       cmd.issued_at,
    }


def build_hall_event_scheduled_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "event_id":     p["event_id"],
        "name":         p["name"],
        "hall_ids":     tuple(p["hall_ids"]),
        "start":        p["start"],
        "end":          p["end"],
        "status":       "SCHEDULED",
        "scheduled_by": cmd.actor_id,
        "scheduled_at": cmd.issued_at,
    }


PAYLOAD_BUILDERS = {
    RESERVATION_CREATED_V1:     build_reservation_created_payload,
    RESERVATION_CHECKED_IN_V1:  _build_status_payload("reservation_id", "CHECKED_IN"),
    RESERVATION_CHECKED_OUT_V1: _build_status_payload("reservation_id", "CHECKED_OUT"),
    RESERVATION_CANCELLED_V1:   _build_status_payload("reservation_id", "CANCELLED"),
    RESERVATION_EXTENDED_V1:    build_reservation_extended_payload,
    HALL_EVENT_SCHEDULED_V1:    build_hall_event_scheduled_payload,
    HALL_EVENT_STARTED_V1:      _build_status_payload("event_id", "IN_PROGRESS"),
    HALL_EVENT_COMPLETED_V1:    _build_status_payload("event_id", "COMPLETED"),
    HALL_EVENT_CANCELLED_V1:    _build_status_payload("event_id", "CANCELLED"),
}
