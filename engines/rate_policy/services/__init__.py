"""
Innkeep Rate Policy Engine — Projection Store + Service
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Dict, List, Optional

from core.audit import InMemoryAuditLog, create_audit_entry
from engines.rate_policy.commands import (
    CreateMainChannelRequest, CreateSubChannelRequest,
    ROOM_REGISTER_REQUEST, ROOM_UPDATE_REQUEST,
    MEAL_PLAN_CREATE_REQUEST, MEAL_PLAN_UPDATE_REQUEST, MEAL_PLAN_REMOVE_REQUEST,
    SEASON_CREATE_REQUEST, SEASON_UPDATE_REQUEST, SEASON_REMOVE_REQUEST,
    MAIN_CHANNEL_CREATE_REQUEST, MAIN_CHANNEL_UPDATE_REQUEST, MAIN_CHANNEL_REMOVE_REQUEST,
    SUB_CHANNEL_CREATE_REQUEST, SUB_CHANNEL_UPDATE_REQUEST, SUB_CHANNEL_REMOVE_REQUEST,
    CHANNEL_RULE_CREATE_REQUEST, CHANNEL_RULE_REMOVE_REQUEST,
)
from engines.rate_policy.events import (
    COMMAND_TO_EVENT_TYPE, PAYLOAD_BUILDERS,
    ROOM_REGISTERED_V1, ROOM_UPDATED_V1,
    MEAL_PLAN_CREATED_V1, MEAL_PLAN_UPDATED_V1, MEAL_PLAN_REMOVED_V1,
    SEASON_CREATED_V1, SEASON_UPDATED_V1, SEASON_REMOVED_V1,
    MAIN_CHANNEL_CREATED_V1, MAIN_CHANNEL_UPDATED_V1, MAIN_CHANNEL_REMOVED_V1,
    SUB_CHANNEL_CREATED_V1, SUB_CHANNEL_UPDATED_V1, SUB_CHANNEL_REMOVED_V1,
    CHANNEL_RULE_CREATED_V1, CHANNEL_RULE_REMOVED_V1,
)
from engines.rate_policy.models import (
    AdjustmentType, ChannelPricingRule, MainChannel, MarkupType, MealPlan,
    Room, Season, SubChannel,
)
from engines.rate_policy.policies import (
    channel_id_must_be_free_policy, channel_rule_must_exist_policy,
    channel_rule_must_not_exist_policy, main_channel_must_exist_policy,
    meal_plan_code_must_be_unique_policy, meal_plan_must_exist_policy,
    meal_plan_must_not_exist_policy, overlapping_active_seasons,
    room_must_exist_policy, room_must_not_exist_policy,
    season_must_exist_policy, season_must_not_exist_policy,
    sub_channel_must_exist_policy,
)

logger = logging.getLogger("innkeep.rate_policy")

_BOOKKEEPING_KEYS = frozenset({
    "created_by", "created_at", "registered_by", "registered_at",
})


def _fields(payload: dict) -> dict:
    return {k: v for k, v in payload.items() if k not in _BOOKKEEPING_KEYS}


def _with_enums(values: dict) -> dict:
    values = dict(values)
    if "markup_type" in values and not isinstance(values["markup_type"], MarkupType):
        values["markup_type"] = MarkupType(values["markup_type"])
    if "adjustment_type" in values and not isinstance(values["adjustment_type"], AdjustmentType):
        values["adjustment_type"] = AdjustmentType(values["adjustment_type"])
    if "default_for_room_types" in values:
        values["default_for_room_types"] = tuple(values["default_for_room_types"])
    return values


# ── Projection Store ──────────────────────────────────────────

class RatePolicyProjectionStore:
    """
    In-memory read model for pricing policy.
    Tracks: rooms, meal plans, seasons, main/sub channels,
    channel pricing rules.

    Insertion order is preserved everywhere; season lookup depends
    on it.
    """

    def __init__(self):
        self._events:        List[dict]                    = []
        self._rooms:         Dict[str, Room]               = {}
        self._meal_plans:    Dict[str, MealPlan]           = {}
        self._seasons:       Dict[str, Season]             = {}
        self._main_channels: Dict[str, MainChannel]        = {}
        self._sub_channels:  Dict[str, SubChannel]         = {}
        self._channel_rules: Dict[str, ChannelPricingRule] = {}

    # ── apply ─────────────────────────────────────────────────

    def apply(self, event_type: str, payload: dict) -> None:
        self._events.append({"event_type": event_type, "payload": payload})

        if event_type == ROOM_REGISTERED_V1:
            self._rooms[payload["room_id"]] = Room(**_fields(payload))

        elif event_type == ROOM_UPDATED_V1:
            room = self._rooms.get(payload["room_id"])
            if room:
                self._rooms[room.room_id] = replace(room, **payload["updates"])

        elif event_type == MEAL_PLAN_CREATED_V1:
            plan = MealPlan(**_with_enums(_fields(payload)))
            self._meal_plans[plan.meal_plan_id] = plan

        elif event_type == MEAL_PLAN_UPDATED_V1:
            plan = self._meal_plans.get(payload["meal_plan_id"])
            if plan:
                self._meal_plans[plan.meal_plan_id] = replace(
                    plan, **_with_enums(payload["updates"]))

        elif event_type == MEAL_PLAN_REMOVED_V1:
            self._meal_plans.pop(payload["meal_plan_id"], None)

        elif event_type == SEASON_CREATED_V1:
            season = Season(**_with_enums(_fields(payload)))
            self._seasons[season.season_id] = season

        elif event_type == SEASON_UPDATED_V1:
            season = self._seasons.get(payload["season_id"])
            if season:
                self._seasons[season.season_id] = replace(
                    season, **_with_enums(payload["updates"]))

        elif event_type == SEASON_REMOVED_V1:
            self._seasons.pop(payload["season_id"], None)

        elif event_type == MAIN_CHANNEL_CREATED_V1:
            self._main_channels[payload["channel_id"]] = MainChannel(**_fields(payload))

        elif event_type == MAIN_CHANNEL_UPDATED_V1:
            main = self._main_channels.get(payload["channel_id"])
            if main:
                self._main_channels[main.channel_id] = replace(main, **payload["updates"])

        elif event_type == MAIN_CHANNEL_REMOVED_V1:
            channel_id = payload["channel_id"]
            self._main_channels.pop(channel_id, None)
            for sub_id in [s.channel_id for s in self._sub_channels.values()
                           if s.main_channel_id == channel_id]:
                del self._sub_channels[sub_id]

        elif event_type == SUB_CHANNEL_CREATED_V1:
            self._sub_channels[payload["channel_id"]] = SubChannel(**_fields(payload))

        elif event_type == SUB_CHANNEL_UPDATED_V1:
            sub = self._sub_channels.get(payload["channel_id"])
            if sub:
                self._sub_channels[sub.channel_id] = replace(sub, **payload["updates"])

        elif event_type == SUB_CHANNEL_REMOVED_V1:
            self._sub_channels.pop(payload["channel_id"], None)

        elif event_type == CHANNEL_RULE_CREATED_V1:
            rule = ChannelPricingRule(**_with_enums(_fields(payload)))
            if rule.active:
                for colliding in self.colliding_channel_rules(rule):
                    del self._channel_rules[colliding.rule_id]
            self._channel_rules[rule.rule_id] = rule

        elif event_type == CHANNEL_RULE_REMOVED_V1:
            self._channel_rules.pop(payload["rule_id"], None)

    # ── queries ───────────────────────────────────────────────

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def list_rooms(self, room_type: Optional[str] = None) -> List[Room]:
        if room_type is None:
            return list(self._rooms.values())
        return [r for r in self._rooms.values() if r.room_type == room_type]

    def get_meal_plan(self, meal_plan_id: str) -> Optional[MealPlan]:
        return self._meal_plans.get(meal_plan_id)

    def get_meal_plan_by_code(self, code: str) -> Optional[MealPlan]:
        for plan in self._meal_plans.values():
            if plan.code == code:
                return plan
        return None

    def list_meal_plans(self, active_only: bool = False) -> List[MealPlan]:
        if not active_only:
            return list(self._meal_plans.values())
        return [p for p in self._meal_plans.values() if p.active]

    def get_season(self, season_id: str) -> Optional[Season]:
        return self._seasons.get(season_id)

    def list_seasons(self) -> List[Season]:
        return list(self._seasons.values())

    def get_main_channel(self, channel_id: str) -> Optional[MainChannel]:
        return self._main_channels.get(channel_id)

    def list_main_channels(self) -> List[MainChannel]:
        return list(self._main_channels.values())

    def get_sub_channel(self, channel_id: str) -> Optional[SubChannel]:
        return self._sub_channels.get(channel_id)

    def list_sub_channels(self, main_channel_id: Optional[str] = None) -> List[SubChannel]:
        if main_channel_id is None:
            return list(self._sub_channels.values())
        return [s for s in self._sub_channels.values()
                if s.main_channel_id == main_channel_id]

    def get_channel_rule(self, rule_id: str) -> Optional[ChannelPricingRule]:
        return self._channel_rules.get(rule_id)

    def list_channel_rules(
        self, room_type: Optional[str] = None, channel: Optional[str] = None,
    ) -> List[ChannelPricingRule]:
        return [
            r for r in self._channel_rules.values()
            if (room_type is None or r.room_type == room_type)
            and (channel is None or r.channel == channel)
        ]

    def find_channel_rule(
        self, room_type: str, channel: str, on: date,
    ) -> Optional[ChannelPricingRule]:
        """The active rule for (room type, channel) valid on a date, if any."""
        for rule in self._channel_rules.values():
            if (rule.active and rule.room_type == room_type
                    and rule.channel == channel and rule.validity.contains(on)):
                return rule
        return None

    def colliding_channel_rules(self, rule: ChannelPricingRule) -> List[ChannelPricingRule]:
        return [
            r for r in self._channel_rules.values()
            if r.rule_id != rule.rule_id and r.active
            and r.room_type == rule.room_type and r.channel == rule.channel
            and r.validity.overlaps(rule.validity)
        ]

    @property
    def event_count(self) -> int:
        return len(self._events)

    def truncate(self):
        self._events.clear()
        self._rooms.clear()
        self._meal_plans.clear()
        self._seasons.clear()
        self._main_channels.clear()
        self._sub_channels.clear()
        self._channel_rules.clear()


# ── Write-time checks ─────────────────────────────────────────

def _check_sub_channel_create(p, store) -> Optional[str]:
    return (channel_id_must_be_free_policy(p["channel_id"], store)
            or main_channel_must_exist_policy(p["main_channel_id"], store))


def _check_meal_plan_create(p, store) -> Optional[str]:
    return (meal_plan_must_not_exist_policy(p["meal_plan_id"], store)
            or meal_plan_code_must_be_unique_policy(p["code"], store))


_REJECTION_CHECKS: Dict[str, Callable[[dict, RatePolicyProjectionStore], Optional[str]]] = {
    ROOM_REGISTER_REQUEST:       lambda p, s: room_must_not_exist_policy(p["room_id"], s),
    ROOM_UPDATE_REQUEST:         lambda p, s: room_must_exist_policy(p["room_id"], s),
    MEAL_PLAN_CREATE_REQUEST:    _check_meal_plan_create,
    MEAL_PLAN_UPDATE_REQUEST:    lambda p, s: meal_plan_must_exist_policy(p["meal_plan_id"], s),
    MEAL_PLAN_REMOVE_REQUEST:    lambda p, s: meal_plan_must_exist_policy(p["meal_plan_id"], s),
    SEASON_CREATE_REQUEST:       lambda p, s: season_must_not_exist_policy(p["season_id"], s),
    SEASON_UPDATE_REQUEST:       lambda p, s: season_must_exist_policy(p["season_id"], s),
    SEASON_REMOVE_REQUEST:       lambda p, s: season_must_exist_policy(p["season_id"], s),
    MAIN_CHANNEL_CREATE_REQUEST: lambda p, s: channel_id_must_be_free_policy(p["channel_id"], s),
    MAIN_CHANNEL_UPDATE_REQUEST: lambda p, s: main_channel_must_exist_policy(p["channel_id"], s),
    MAIN_CHANNEL_REMOVE_REQUEST: lambda p, s: main_channel_must_exist_policy(p["channel_id"], s),
    SUB_CHANNEL_CREATE_REQUEST:  _check_sub_channel_create,
    SUB_CHANNEL_UPDATE_REQUEST:  lambda p, s: sub_channel_must_exist_policy(p["channel_id"], s),
    SUB_CHANNEL_REMOVE_REQUEST:  lambda p, s: sub_channel_must_exist_policy(p["channel_id"], s),
    CHANNEL_RULE_CREATE_REQUEST: lambda p, s: channel_rule_must_not_exist_policy(p["rule_id"], s),
    CHANNEL_RULE_REMOVE_REQUEST: lambda p, s: channel_rule_must_exist_policy(p["rule_id"], s),
}

# event type -> (audit entity type, action, id field)
_AUDITED_EVENTS = {
    MEAL_PLAN_CREATED_V1:    ("MEAL_PLAN", "CREATE", "meal_plan_id"),
    MEAL_PLAN_UPDATED_V1:    ("MEAL_PLAN", "UPDATE", "meal_plan_id"),
    MEAL_PLAN_REMOVED_V1:    ("MEAL_PLAN", "DELETE", "meal_plan_id"),
    SEASON_CREATED_V1:       ("SEASON", "CREATE", "season_id"),
    SEASON_UPDATED_V1:       ("SEASON", "UPDATE", "season_id"),
    SEASON_REMOVED_V1:       ("SEASON", "DELETE", "season_id"),
    MAIN_CHANNEL_CREATED_V1: ("CHANNEL", "CREATE", "channel_id"),
    MAIN_CHANNEL_UPDATED_V1: ("CHANNEL", "UPDATE", "channel_id"),
    MAIN_CHANNEL_REMOVED_V1: ("CHANNEL", "DELETE", "channel_id"),
    SUB_CHANNEL_CREATED_V1:  ("CHANNEL", "CREATE", "channel_id"),
    SUB_CHANNEL_UPDATED_V1:  ("CHANNEL", "UPDATE", "channel_id"),
    SUB_CHANNEL_REMOVED_V1:  ("CHANNEL", "DELETE", "channel_id"),
    CHANNEL_RULE_CREATED_V1: ("CHANNEL_PRICING_RULE", "CREATE", "rule_id"),
    CHANNEL_RULE_REMOVED_V1: ("CHANNEL_PRICING_RULE", "DELETE", "rule_id"),
}

DEFAULT_MAIN_CHANNELS = (
    ("main-ota", "OTA", "10"),
    ("main-website", "Website", "0"),
    ("main-travel-agent", "Travel Agent", "5"),
    ("main-direct", "Direct", "0"),
)
DEFAULT_SUB_CHANNELS = (
    ("sub-booking-com", "Booking.com", "main-ota", "5"),
    ("sub-expedia", "Expedia", "main-ota", "3"),
    ("sub-agoda", "Agoda", "main-ota", "4"),
)


# ── Service ───────────────────────────────────────────────────

class RatePolicyService:
    """
    Rate policy engine service.
    Validates write requests against the current store, applies them,
    reports configuration hazards and records audit entries.
    """

    def __init__(
        self, *,
        projection_store: RatePolicyProjectionStore,
        persist_event: Optional[Callable[[dict], None]] = None,
        audit_log: Optional[InMemoryAuditLog] = None,
    ):
        self._projection    = projection_store
        self._persist_event = persist_event
        self._audit_log     = audit_log

    def execute(self, request) -> dict:
        command = request.to_command()
        check = _REJECTION_CHECKS.get(command.command_type)
        rejection = check(command.payload, self._projection) if check else None
        if rejection:
            logger.info("Rejected %s: %s", command.command_type, rejection)
            raise ValueError(rejection)

        result = self._execute_command(command)
        event_type, payload = result["event_type"], result["payload"]

        if event_type in (SEASON_CREATED_V1, SEASON_UPDATED_V1):
            self._warn_overlapping_seasons(payload["season_id"])
        self._record_audit(event_type, payload, command)
        return result

    def seed_default_channels(self, *, actor_id: str, issued_at) -> None:
        """Create the stock channel hierarchy when no channel exists yet."""
        if self._projection.list_main_channels():
            return
        for channel_id, name, pct in DEFAULT_MAIN_CHANNELS:
            self.execute(CreateMainChannelRequest(
                channel_id=channel_id, name=name, adjustment_percentage=pct,
                actor_id=actor_id, issued_at=issued_at))
        for channel_id, name, main_id, pct in DEFAULT_SUB_CHANNELS:
            self.execute(CreateSubChannelRequest(
                channel_id=channel_id, name=name, main_channel_id=main_id,
                additional_adjustment_percentage=pct,
                actor_id=actor_id, issued_at=issued_at))

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

    def _warn_overlapping_seasons(self, season_id: str) -> None:
        season = self._projection.get_season(season_id)
        if season is None:
            return
        overlapping = overlapping_active_seasons(
            season.season_id, season.start_date, season.end_date,
            self._projection, status=season.status,
        )
        if overlapping:
            logger.warning(
                "Season %s overlaps active season(s) %s; the earliest created wins.",
                season_id, ", ".join(overlapping),
            )

    def _record_audit(self, event_type: str, payload: dict, command) -> None:
        if self._audit_log is None or event_type not in _AUDITED_EVENTS:
            return
        entity_type, action, id_field = _AUDITED_EVENTS[event_type]
        changes = payload.get("updates") or {
            k: v for k, v in payload.items()
            if k not in _BOOKKEEPING_KEYS and k not in ("removed_by", "removed_at")
        }
        self._audit_log.append(create_audit_entry(
            entity_type=entity_type,
            entity_id=payload[id_field],
            action=action,
            actor_id=command.actor_id,
            occurred_at=command.issued_at,
            changes=changes,
        ))

    @property
    def _store(self) -> RatePolicyProjectionStore:
        return self._projection
