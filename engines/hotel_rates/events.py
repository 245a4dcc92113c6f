"""
Innkeep Hotel Rates — Event Types and Payload Builders
========================================================
Engine: hotel_rates
Scope:  Pinned nightly rates. Single-cell edits and committed bulk
        updates are the only writes; quotes and grids are reads.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

# ── Event Type Constants ──────────────────────────────────────

RATE_OVERRIDE_SET_V1      = "hotel_rates.override.set.v1"
RATE_OVERRIDE_CLEARED_V1  = "hotel_rates.override.cleared.v1"
BULK_RATE_COMMITTED_V1    = "hotel_rates.bulk_update.committed.v1"

HOTEL_RATES_EVENT_TYPES = (
    RATE_OVERRIDE_SET_V1,
    RATE_OVERRIDE_CLEARED_V1,
    BULK_RATE_COMMITTED_V1,
)

COMMAND_TO_EVENT_TYPE = {
    "hotel_rates.override.set.request":      RATE_OVERRIDE_SET_V1,
    "hotel_rates.override.clear.request":    RATE_OVERRIDE_CLEARED_V1,
    "hotel_rates.bulk_update.commit.request": BULK_RATE_COMMITTED_V1,
}

# ── Payload Builders ──────────────────────────────────────────

def build_override_set_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "stay_type": p["stay_type"],
        "stay_date": p["stay_date"],
        "amount":    Decimal(p["amount"]),
        "set_by":    cmd.actor_id,
        "set_at":    cmd.issued_at,
    }


def build_override_cleared_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "stay_type":  p["stay_type"],
        "stay_date":  p["stay_date"],
        "cleared_by": cmd.actor_id,
        "cleared_at": cmd.issued_at,
    }


def build_bulk_committed_payload(cmd) -> dict:
    p = cmd.payload
    year, month = p["year"], p["month"]
    return {
        "stay_type":        p["stay_type"],
        "adjustment_type":  p["adjustment_type"],
        "adjustment_value": Decimal(p["adjustment_value"]),
        "year":             year,
        "month":            month,
        "cells":            {date(year, month, day): Decimal(amount)
                             for day, amount in sorted(p["cells"].items())},
        "committed_by":     cmd.actor_id,
        "committed_at":     cmd.issued_at,
    }


PAYLOAD_BUILDERS = {
    RATE_OVERRIDE_SET_V1:     build_override_set_payload,
    RATE_OVERRIDE_CLEARED_V1: build_override_cleared_payload,
    BULK_RATE_COMMITTED_V1:   build_bulk_committed_payload,
}
