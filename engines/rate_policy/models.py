"""
Innkeep Rate Policy Engine — Policy Entities
==============================================
The configurable inputs of rate composition: rooms, meal plans,
seasons, the two-level channel hierarchy and ad-hoc channel pricing
rules. Pure data — no derived computation lives here.

Money and percentages are Decimal. Percentages are in percent
units: Decimal("10") means +10%.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple

from core.time.temporal import DateRange


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class MarkupType(Enum):
    FLAT = "FLAT"              # amount per night, independent of rate
    PERCENTAGE = "PERCENTAGE"  # percent of the stay subtotal


class AdjustmentType(Enum):
    AMOUNT = "AMOUNT"
    PERCENTAGE = "PERCENTAGE"


ROOM_STATUSES = frozenset({
    "AVAILABLE", "RESERVED", "OCCUPIED", "CLEANING", "DIRTY", "MAINTENANCE",
})
POLICY_STATUSES = frozenset({"ACTIVE", "INACTIVE"})

STAY_TYPE_SEPARATOR = " – "


def stay_type_label(room_type: str, meal_plan_code: str) -> str:
    """Composite stay-type key, e.g. 'Deluxe – BB'."""
    return f"{room_type}{STAY_TYPE_SEPARATOR}{meal_plan_code}"


def split_stay_type(label: str) -> Tuple[str, str]:
    """Inverse of stay_type_label. Raises ValueError for a malformed label."""
    room_type, sep, code = label.rpartition(STAY_TYPE_SEPARATOR)
    if not sep or not room_type or not code:
        raise ValueError(f"'{label}' is not a stay type label (room type – meal plan).")
    return room_type, code


def _as_decimal(value, field_name: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str)):
        return Decimal(value)
    raise ValueError(f"{field_name} must be Decimal, int or numeric string.")


# ══════════════════════════════════════════════════════════════
# ROOM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Room:
    room_id: str
    number: str
    room_type: str
    capacity: int
    price: Decimal
    meal_plan_code: Optional[str] = None
    view_type_id: Optional[str] = None
    status: str = "AVAILABLE"
    active: bool = True

    def __post_init__(self):
        if not self.room_id:   raise ValueError("room_id must be non-empty.")
        if not self.room_type: raise ValueError("room_type must be non-empty.")
        if not isinstance(self.capacity, int) or self.capacity < 1:
            raise ValueError("capacity must be >= 1.")
        object.__setattr__(self, "price", _as_decimal(self.price, "price"))
        if self.price <= 0:
            raise ValueError("price must be positive.")
        if self.status not in ROOM_STATUSES:
            raise ValueError(f"status must be one of {sorted(ROOM_STATUSES)}.")


# ══════════════════════════════════════════════════════════════
# MEAL PLAN
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MealPlan:
    """Board arrangement with exactly one markup rule."""
    meal_plan_id: str
    code: str
    name: str
    markup_type: MarkupType
    markup_value: Decimal
    active: bool = True
    default_for_room_types: Tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self):
        if not self.meal_plan_id: raise ValueError("meal_plan_id must be non-empty.")
        if not self.code:         raise ValueError("Meal plan code is required.")
        if not isinstance(self.markup_type, MarkupType):
            raise ValueError("markup_type must be MarkupType enum.")
        object.__setattr__(self, "markup_value", _as_decimal(self.markup_value, "markup_value"))
        if self.markup_value < 0:
            raise ValueError("markup_value must be >= 0.")


# ══════════════════════════════════════════════════════════════
# SEASON
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Season:
    """
    Date-ranged adjustment, inclusive on both ends.

    The three override maps are percentages added on top of the
    global value; every matching bucket stacks.
    """
    season_id: str
    name: str
    start_date: date
    end_date: date
    adjustment_type: AdjustmentType
    adjustment_value: Decimal
    status: str = "ACTIVE"
    room_type_adjustments: Dict[str, Decimal] = field(default_factory=dict)
    meal_plan_adjustments: Dict[str, Decimal] = field(default_factory=dict)
    stay_type_adjustments: Dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self):
        if not self.season_id: raise ValueError("season_id must be non-empty.")
        if not isinstance(self.adjustment_type, AdjustmentType):
            raise ValueError("adjustment_type must be AdjustmentType enum.")
        if self.status not in POLICY_STATUSES:
            raise ValueError(f"status must be one of {sorted(POLICY_STATUSES)}.")
        DateRange(self.start_date, self.end_date)
        object.__setattr__(
            self, "adjustment_value", _as_decimal(self.adjustment_value, "adjustment_value"))
        for name in ("room_type_adjustments", "meal_plan_adjustments", "stay_type_adjustments"):
            coerced = {k: _as_decimal(v, name) for k, v in dict(getattr(self, name)).items()}
            object.__setattr__(self, name, coerced)

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"


# ══════════════════════════════════════════════════════════════
# CHANNEL HIERARCHY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MainChannel:
    channel_id: str
    name: str
    adjustment_percentage: Decimal
    status: str = "ACTIVE"

    def __post_init__(self):
        if not self.channel_id: raise ValueError("channel_id must be non-empty.")
        if not self.name:       raise ValueError("name must be non-empty.")
        if self.status not in POLICY_STATUSES:
            raise ValueError(f"status must be one of {sorted(POLICY_STATUSES)}.")
        object.__setattr__(self, "adjustment_percentage",
                           _as_decimal(self.adjustment_percentage, "adjustment_percentage"))


@dataclass(frozen=True)
class SubChannel:
    channel_id: str
    name: str
    main_channel_id: str
    additional_adjustment_percentage: Decimal
    status: str = "ACTIVE"

    def __post_init__(self):
        if not self.channel_id:      raise ValueError("channel_id must be non-empty.")
        if not self.name:            raise ValueError("name must be non-empty.")
        if not self.main_channel_id: raise ValueError("main_channel_id must be non-empty.")
        if self.status not in POLICY_STATUSES:
            raise ValueError(f"status must be one of {sorted(POLICY_STATUSES)}.")
        object.__setattr__(
            self, "additional_adjustment_percentage",
            _as_decimal(self.additional_adjustment_percentage, "additional_adjustment_percentage"))


# ══════════════════════════════════════════════════════════════
# CHANNEL PRICING RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ChannelPricingRule:
    rule_id: str
    room_type: str
    channel: str
    adjustment_type: AdjustmentType
    adjustment_value: Decimal
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    commission_type: Optional[str] = None   # FIXED | PERCENTAGE
    commission_value: Optional[Decimal] = None
    season_id: Optional[str] = None
    promo_code: Optional[str] = None
    active: bool = True

    def __post_init__(self):
        if not self.rule_id:   raise ValueError("rule_id must be non-empty.")
        if not self.room_type: raise ValueError("room_type must be non-empty.")
        if not self.channel:   raise ValueError("channel must be non-empty.")
        if not isinstance(self.adjustment_type, AdjustmentType):
            raise ValueError("adjustment_type must be AdjustmentType enum.")
        if self.commission_type not in (None, "FIXED", "PERCENTAGE"):
            raise ValueError("commission_type must be FIXED or PERCENTAGE.")
        object.__setattr__(
            self, "adjustment_value", _as_decimal(self.adjustment_value, "adjustment_value"))
        DateRange(self.valid_from, self.valid_to)

    @property
    def validity(self) -> DateRange:
        return DateRange(self.valid_from, self.valid_to)
