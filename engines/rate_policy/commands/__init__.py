"""
Innkeep Rate Policy Engine — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from engines.rate_policy.events import (
    VALID_MARKUP_TYPES, VALID_ADJUSTMENT_TYPES, VALID_COMMISSION_TYPES,
    ROOM_UPDATABLE_FIELDS, MEAL_PLAN_UPDATABLE_FIELDS, SEASON_UPDATABLE_FIELDS,
    MAIN_CHANNEL_UPDATABLE_FIELDS, SUB_CHANNEL_UPDATABLE_FIELDS,
)

# ── Command type strings ──────────────────────────────────────

ROOM_REGISTER_REQUEST           = "rate_policy.room.register.request"
ROOM_UPDATE_REQUEST             = "rate_policy.room.update.request"
MEAL_PLAN_CREATE_REQUEST        = "rate_policy.meal_plan.create.request"
MEAL_PLAN_UPDATE_REQUEST        = "rate_policy.meal_plan.update.request"
MEAL_PLAN_REMOVE_REQUEST        = "rate_policy.meal_plan.remove.request"
SEASON_CREATE_REQUEST           = "rate_policy.season.create.request"
SEASON_UPDATE_REQUEST           = "rate_policy.season.update.request"
SEASON_REMOVE_REQUEST           = "rate_policy.season.remove.request"
MAIN_CHANNEL_CREATE_REQUEST     = "rate_policy.main_channel.create.request"
MAIN_CHANNEL_UPDATE_REQUEST     = "rate_policy.main_channel.update.request"
MAIN_CHANNEL_REMOVE_REQUEST     = "rate_policy.main_channel.remove.request"
SUB_CHANNEL_CREATE_REQUEST      = "rate_policy.sub_channel.create.request"
SUB_CHANNEL_UPDATE_REQUEST      = "rate_policy.sub_channel.update.request"
SUB_CHANNEL_REMOVE_REQUEST      = "rate_policy.sub_channel.remove.request"
CHANNEL_RULE_CREATE_REQUEST     = "rate_policy.channel_rule.create.request"
CHANNEL_RULE_REMOVE_REQUEST     = "rate_policy.channel_rule.remove.request"

RATE_POLICY_COMMAND_TYPES = frozenset({
    ROOM_REGISTER_REQUEST,
    ROOM_UPDATE_REQUEST,
    MEAL_PLAN_CREATE_REQUEST,
    MEAL_PLAN_UPDATE_REQUEST,
    MEAL_PLAN_REMOVE_REQUEST,
    SEASON_CREATE_REQUEST,
    SEASON_UPDATE_REQUEST,
    SEASON_REMOVE_REQUEST,
    MAIN_CHANNEL_CREATE_REQUEST,
    MAIN_CHANNEL_UPDATE_REQUEST,
    MAIN_CHANNEL_REMOVE_REQUEST,
    SUB_CHANNEL_CREATE_REQUEST,
    SUB_CHANNEL_UPDATE_REQUEST,
    SUB_CHANNEL_REMOVE_REQUEST,
    CHANNEL_RULE_CREATE_REQUEST,
    CHANNEL_RULE_REMOVE_REQUEST,
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


def _require_actor(actor_id: str, issued_at: datetime) -> None:
    if not actor_id:
        raise ValueError("actor_id must be non-empty.")
    if not isinstance(issued_at, datetime) or issued_at.tzinfo is None:
        raise ValueError("issued_at must be a timezone-aware datetime.")


def _require_number(value, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, str)):
        raise ValueError(f"{field_name} must be Decimal, int or numeric string.")


def _check_updates(updates: Dict[str, Any], allowed: frozenset) -> None:
    if not updates:
        raise ValueError("updates must be non-empty.")
    unknown = set(updates) - allowed
    if unknown:
        raise ValueError(f"Cannot update field(s): {sorted(unknown)}.")


# ── Rooms ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class RegisterRoomRequest:
    room_id:        str
    number:         str
    room_type:      str
    capacity:       int
    price:          Decimal
    actor_id:       str
    issued_at:      datetime
    meal_plan_code: Optional[str] = None
    view_type_id:   Optional[str] = None
    status:         str = "AVAILABLE"

    def __post_init__(self):
        if not self.room_id:
            raise ValueError("room_id must be non-empty.")
        if not self.room_type:
            raise ValueError("room_type must be non-empty.")
        _require_number(self.price, "price")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(ROOM_REGISTER_REQUEST, {
            "room_id": self.room_id,
            "number": self.number,
            "room_type": self.room_type,
            "capacity": self.capacity,
            "price": self.price,
            "meal_plan_code": self.meal_plan_code,
            "view_type_id": self.view_type_id,
            "status": self.status,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class UpdateRoomRequest:
    room_id:   str
    updates:   Dict[str, Any]
    actor_id:  str
    issued_at: datetime

    def __post_init__(self):
        if not self.room_id:
            raise ValueError("room_id must be non-empty.")
        _check_updates(self.updates, ROOM_UPDATABLE_FIELDS)
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(ROOM_UPDATE_REQUEST, {
            "room_id": self.room_id,
            "updates": dict(self.updates),
        }, actor_id=self.actor_id, issued_at=self.issued_at)


# ── Meal plans ────────────────────────────────────────────────

@dataclass(frozen=True)
class CreateMealPlanRequest:
    meal_plan_id: str
    code:         str
    name:         str
    markup_type:  str
    markup_value: Decimal
    actor_id:     str
    issued_at:    datetime
    active:       bool = True
    default_for_room_types: Tuple[str, ...] = ()
    description:  str = ""

    def __post_init__(self):
        if not self.meal_plan_id:
            raise ValueError("meal_plan_id must be non-empty.")
        if not self.code:
            raise ValueError("Meal plan code is required.")
        if self.markup_type not in VALID_MARKUP_TYPES:
            raise ValueError(f"markup_type must be one of {sorted(VALID_MARKUP_TYPES)}.")
        _require_number(self.markup_value, "markup_value")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(MEAL_PLAN_CREATE_REQUEST, {
            "meal_plan_id": self.meal_plan_id,
            "code": self.code,
            "name": self.name,
            "markup_type": self.markup_type,
            "markup_value": self.markup_value,
            "active": self.active,
            "default_for_room_types": tuple(self.default_for_room_types),
            "description": self.description,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class UpdateMealPlanRequest:
    meal_plan_id: str
    updates:      Dict[str, Any]
    actor_id:     str
    issued_at:    datetime

    def __post_init__(self):
        if not self.meal_plan_id:
            raise ValueError("meal_plan_id must be non-empty.")
        _check_updates(self.updates, MEAL_PLAN_UPDATABLE_FIELDS)
        if "markup_type" in self.updates and self.updates["markup_type"] not in VALID_MARKUP_TYPES:
            raise ValueError(f"markup_type must be one of {sorted(VALID_MARKUP_TYPES)}.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(MEAL_PLAN_UPDATE_REQUEST, {
            "meal_plan_id": self.meal_plan_id,
            "updates": dict(self.updates),
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class RemoveMealPlanRequest:
    meal_plan_id: str
    actor_id:     str
    issued_at:    datetime

    def __post_init__(self):
        if not self.meal_plan_id:
            raise ValueError("meal_plan_id must be non-empty.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(MEAL_PLAN_REMOVE_REQUEST, {"meal_plan_id": self.meal_plan_id},
                    actor_id=self.actor_id, issued_at=self.issued_at)


# ── Seasons ───────────────────────────────────────────────────

@dataclass(frozen=True)
class CreateSeasonRequest:
    season_id:        str
    name:             str
    start_date:       date
    end_date:         date
    adjustment_type:  str
    adjustment_value: Decimal
    actor_id:         str
    issued_at:        datetime
    status:           str = "ACTIVE"
    room_type_adjustments: Dict[str, Decimal] = field(default_factory=dict)
    meal_plan_adjustments: Dict[str, Decimal] = field(default_factory=dict)
    stay_type_adjustments: Dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self):
        if not self.season_id:
            raise ValueError("season_id must be non-empty.")
        if not self.name:
            raise ValueError("name must be non-empty.")
        if self.adjustment_type not in VALID_ADJUSTMENT_TYPES:
            raise ValueError(
                f"adjustment_type must be one of {sorted(VALID_ADJUSTMENT_TYPES)}.")
        _require_number(self.adjustment_value, "adjustment_value")
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(SEASON_CREATE_REQUEST, {
            "season_id": self.season_id,
            "name": self.name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "adjustment_type": self.adjustment_type,
            "adjustment_value": self.adjustment_value,
            "status": self.status,
            "room_type_adjustments": dict(self.room_type_adjustments),
            "meal_plan_adjustments": dict(self.meal_plan_adjustments),
            "stay_type_adjustments": dict(self.stay_type_adjustments),
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class UpdateSeasonRequest:
    season_id: str
    updates:   Dict[str, Any]
    actor_id:  str
    issued_at: datetime

    def __post_init__(self):
        if not self.season_id:
            raise ValueError("season_id must be non-empty.")
        _check_updates(self.updates, SEASON_UPDATABLE_FIELDS)
        if ("adjustment_type" in self.updates
                and self.updates["adjustment_type"] not in VALID_ADJUSTMENT_TYPES):
            raise ValueError(
                f"adjustment_type must be one of {sorted(VALID_ADJUSTMENT_TYPES)}.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(SEASON_UPDATE_REQUEST, {
            "season_id": self.season_id,
            "updates": dict(self.updates),
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class RemoveSeasonRequest:
    season_id: str
    actor_id:  str
    issued_at: datetime

    def __post_init__(self):
        if not self.season_id:
            raise ValueError("season_id must be non-empty.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(SEASON_REMOVE_REQUEST, {"season_id": self.season_id},
                    actor_id=self.actor_id, issued_at=self.issued_at)


# ── Channel hierarchy ─────────────────────────────────────────

@dataclass(frozen=True)
class CreateMainChannelRequest:
    channel_id:            str
    name:                  str
    adjustment_percentage: Decimal
    actor_id:              str
    issued_at:             datetime
    status:                str = "ACTIVE"

    def __post_init__(self):
        if not self.channel_id:
            raise ValueError("channel_id must be non-empty.")
        if not self.name:
            raise ValueError("name must be non-empty.")
        _require_number(self.adjustment_percentage, "adjustment_percentage")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(MAIN_CHANNEL_CREATE_REQUEST, {
            "channel_id": self.channel_id,
            "name": self.name,
            "adjustment_percentage": self.adjustment_percentage,
            "status": self.status,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class UpdateMainChannelRequest:
    channel_id: str
    updates:    Dict[str, Any]
    actor_id:   str
    issued_at:  datetime

    def __post_init__(self):
        if not self.channel_id:
            raise ValueError("channel_id must be non-empty.")
        _check_updates(self.updates, MAIN_CHANNEL_UPDATABLE_FIELDS)
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(MAIN_CHANNEL_UPDATE_REQUEST, {
            "channel_id": self.channel_id,
            "updates": dict(self.updates),
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class RemoveMainChannelRequest:
    """Removing a main channel also removes every sub-channel under it."""
    channel_id: str
    actor_id:   str
    issued_at:  datetime

    def __post_init__(self):
        if not self.channel_id:
            raise ValueError("channel_id must be non-empty.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(MAIN_CHANNEL_REMOVE_REQUEST, {"channel_id": self.channel_id},
                    actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class CreateSubChannelRequest:
    channel_id:      str
    name:            str
    main_channel_id: str
    additional_adjustment_percentage: Decimal
    actor_id:        str
    issued_at:       datetime
    status:          str = "ACTIVE"

    def __post_init__(self):
        if not self.channel_id:
            raise ValueError("channel_id must be non-empty.")
        if not self.name:
            raise ValueError("name must be non-empty.")
        if not self.main_channel_id:
            raise ValueError("main_channel_id must be non-empty.")
        _require_number(self.additional_adjustment_percentage,
                        "additional_adjustment_percentage")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(SUB_CHANNEL_CREATE_REQUEST, {
            "channel_id": self.channel_id,
            "name": self.name,
            "main_channel_id": self.main_channel_id,
            "additional_adjustment_percentage": self.additional_adjustment_percentage,
            "status": self.status,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class UpdateSubChannelRequest:
    channel_id: str
    updates:    Dict[str, Any]
    actor_id:   str
    issued_at:  datetime

    def __post_init__(self):
        if not self.channel_id:
            raise ValueError("channel_id must be non-empty.")
        _check_updates(self.updates, SUB_CHANNEL_UPDATABLE_FIELDS)
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(SUB_CHANNEL_UPDATE_REQUEST, {
            "channel_id": self.channel_id,
            "updates": dict(self.updates),
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class RemoveSubChannelRequest:
    channel_id: str
    actor_id:   str
    issued_at:  datetime

    def __post_init__(self):
        if not self.channel_id:
            raise ValueError("channel_id must be non-empty.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(SUB_CHANNEL_REMOVE_REQUEST, {"channel_id": self.channel_id},
                    actor_id=self.actor_id, issued_at=self.issued_at)


# ── Channel pricing rules ─────────────────────────────────────

@dataclass(frozen=True)
class CreateChannelPricingRuleRequest:
    """
    Active rules for the same room type and channel whose validity
    windows overlap this one are removed when it is created.
    """
    rule_id:          str
    room_type:        str
    channel:          str
    adjustment_type:  str
    adjustment_value: Decimal
    actor_id:         str
    issued_at:        datetime
    valid_from:       Optional[date] = None
    valid_to:         Optional[date] = None
    commission_type:  Optional[str] = None
    commission_value: Optional[Decimal] = None
    season_id:        Optional[str] = None
    promo_code:       Optional[str] = None
    active:           bool = True

    def __post_init__(self):
        if not self.rule_id:
            raise ValueError("rule_id must be non-empty.")
        if not self.room_type:
            raise ValueError("room_type must be non-empty.")
        if not self.channel:
            raise ValueError("channel must be non-empty.")
        if self.adjustment_type not in VALID_ADJUSTMENT_TYPES:
            raise ValueError(
                f"adjustment_type must be one of {sorted(VALID_ADJUSTMENT_TYPES)}.")
        _require_number(self.adjustment_value, "adjustment_value")
        if self.commission_type is not None and self.commission_type not in VALID_COMMISSION_TYPES:
            raise ValueError(
                f"commission_type must be one of {sorted(VALID_COMMISSION_TYPES)}.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(CHANNEL_RULE_CREATE_REQUEST, {
            "rule_id": self.rule_id,
            "room_type": self.room_type,
            "channel": self.channel,
            "adjustment_type": self.adjustment_type,
            "adjustment_value": self.adjustment_value,
            "valid_from": self.valid_from,
            "valid_to": self.valid_to,
            "commission_type": self.commission_type,
            "commission_value": self.commission_value,
            "season_id": self.season_id,
            "promo_code": self.promo_code,
            "active": self.active,
        }, actor_id=self.actor_id, issued_at=self.issued_at)


@dataclass(frozen=True)
class RemoveChannelPricingRuleRequest:
    rule_id:   str
    actor_id:  str
    issued_at: datetime

    def __post_init__(self):
        if not self.rule_id:
            raise ValueError("rule_id must be non-empty.")
        _require_actor(self.actor_id, self.issued_at)

    def to_command(self) -> _Cmd:
        return _Cmd(CHANNEL_RULE_REMOVE_REQUEST, {"rule_id": self.rule_id},
                    actor_id=self.actor_id, issued_at=self.issued_at)
