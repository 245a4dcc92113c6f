"""
Innkeep Hotel Rates — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from core.time.temporal import StayInterval
from engines.hotel_rates.composition import ManualOverride
from engines.rate_policy.events import VALID_ADJUSTMENT_TYPES
from engines.rate_policy.models import AdjustmentType

# ── Command type strings ──────────────────────────────────────

RATE_OVERRIDE_SET_REQUEST    = "hotel_rates.override.set.request"
RATE_OVERRIDE_CLEAR_REQUEST  = "hotel_rates.override.clear.request"
BULK_UPDATE_COMMIT_REQUEST   = "hotel_rates.bulk_update.commit.request"

HOTEL_RATES_COMMAND_TYPES = frozenset({
    RATE_OVERRIDE_SET_REQUEST,
    RATE_OVERRIDE_CLEAR_REQUEST,
    BULK_UPDATE_COMMIT_REQUEST,
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


def _to_decimal(value, field_name: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, str)):
        raise ValueError(f"{field_name} must be Decimal, int or numeric string.")
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"{field_name} is not a number: {value!r}.") from exc


# ── Queries ───────────────────────────────────────────────────

@dataclass(frozen=True)
class QuoteRateRequest:
    """
    Rate quote for one room and stay.

    The interval is checked here, before any resolver runs.
    """
    room_id:          str
    check_in:         date
    check_out:        date
    meal_plan_code:   Optional[str] = None
    main_channel_id:  Optional[str] = None
    sub_channel_id:   Optional[str] = None
    manual_override_type:  Optional[str] = None
    manual_override_value: Optional[Decimal] = None
    display_currency: Optional[str] = None
    tax_percent:      Optional[Decimal] = None

    def __post_init__(self):
        if not self.room_id:
            raise ValueError("room_id must be non-empty.")
        StayInterval(self.check_in, self.check_out)
        if (self.manual_override_type is None) != (self.manual_override_value is None):
            raise ValueError(
                "manual_override_type and manual_override_value go together.")
        if (self.manual_override_type is not None
                and self.manual_override_type not in VALID_ADJUSTMENT_TYPES):
            raise ValueError(
                f"manual_override_type must be one of {sorted(VALID_ADJUSTMENT_TYPES)}.")
        if self.manual_override_value is not None:
            object.__setattr__(self, "manual_override_value",
                               _to_decimal(self.manual_override_value, "manual_override_value"))
        if self.tax_percent is not None:
            object.__setattr__(self, "tax_percent",
                               _to_decimal(self.tax_percent, "tax_percent"))

    def manual_override(self) -> Optional[ManualOverride]:
        if self.manual_override_type is None:
            return None
        return ManualOverride(AdjustmentType(self.manual_override_type),
                              self.manual_override_value)


@dataclass(frozen=True)
class PreviewBulkUpdateRequest:
    year:            int
    month:           int
    stay_type:       str
    adjustment_type: str
    value:           Decimal
    main_channel_id: Optional[str] = None
    sub_channel_id:  Optional[str] = None

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}.")
        if not self.stay_type:
            raise ValueError("stay_type must be non-empty.")
        if self.adjustment_type not in VALID_ADJUSTMENT_TYPES:
            raise ValueError(
                f"adjustment_type must be one of {sorted(VALID_ADJUSTMENT_TYPES)}.")
        object.__setattr__(self, "value", _to_decimal(self.value, "value"))


# ── Writes ────────────────────────────────────────────────────

@dataclass(frozen=True)
class SetRateOverrideRequest:
    stay_type: str
    stay_date: date
    amount:    Decimal
    actor_id:  str

    def __post_init__(self):
        if not self.stay_type:
            raise ValueError("stay_type must be non-empty.")
        if not isinstance(self.stay_date, date):
            raise ValueError("stay_date must be a date.")
        if not self.actor_id:
            raise ValueError("actor_id must be non-empty.")
        amount = _to_decimal(self.amount, "amount")
        if amount < 0:
            raise ValueError("amount must be >= 0.")
        object.__setattr__(self, "amount", amount)

    def to_command(self, *, issued_at: datetime) -> _Cmd:
        return _Cmd(RATE_OVERRIDE_SET_REQUEST, {
            "stay_type": self.stay_type,
            "stay_date": self.stay_date,
            "amount": self.amount,
        }, actor_id=self.actor_id, issued_at=issued_at)


@dataclass(frozen=True)
class ClearRateOverrideRequest:
    stay_type: str
    stay_date: date
    actor_id:  str

    def __post_init__(self):
        if not self.stay_type:
            raise ValueError("stay_type must be non-empty.")
        if not self.actor_id:
            raise ValueError("actor_id must be non-empty.")

    def to_command(self, *, issued_at: datetime) -> _Cmd:
        return _Cmd(RATE_OVERRIDE_CLEAR_REQUEST, {
            "stay_type": self.stay_type,
            "stay_date": self.stay_date,
        }, actor_id=self.actor_id, issued_at=issued_at)


@dataclass(frozen=True)
class CommitBulkUpdateRequest:
    """previewed: day of month -> nightly amount, as returned by the preview."""
    previewed: Dict[int, Decimal]
    actor_id:  str

    def __post_init__(self):
        if not self.actor_id:
            raise ValueError("actor_id must be non-empty.")
        if not isinstance(self.previewed, dict) or not self.previewed:
            raise ValueError("previewed must be a non-empty mapping of day to amount.")
        cells = {}
        for day, amount in self.previewed.items():
            try:
                day_number = int(day)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"'{day}' is not a day of month.") from exc
            cells[day_number] = _to_decimal(amount, f"previewed[{day}]")
            if cells[day_number] < 0:
                raise ValueError(f"previewed[{day}] must be >= 0.")
        object.__setattr__(self, "previewed", cells)

    def to_command(self, staged, *, issued_at: datetime) -> _Cmd:
        return _Cmd(BULK_UPDATE_COMMIT_REQUEST, {
            "stay_type": staged.stay_type,
            "adjustment_type": staged.adjustment_type.value,
            "adjustment_value": staged.value,
            "year": staged.year,
            "month": staged.month,
            "cells": dict(staged.preview),
        }, actor_id=self.actor_id, issued_at=issued_at)
