"""
Innkeep Rate Policy Engine — Event Types and Payload Builders
===============================================================
Engine: rate_policy
Scope:  Rooms, meal plans, seasons, channel hierarchy and channel
        pricing rules. Every pricing engine reads the entities
        defined here; none of them writes back.
"""

from __future__ import annotations

from decimal import Decimal

# ── Event Type Constants ──────────────────────────────────────

ROOM_REGISTERED_V1           = "rate_policy.room.registered.v1"
ROOM_UPDATED_V1              = "rate_policy.room.updated.v1"
MEAL_PLAN_CREATED_V1         = "rate_policy.meal_plan.created.v1"
MEAL_PLAN_UPDATED_V1         = "rate_policy.meal_plan.updated.v1"
MEAL_PLAN_REMOVED_V1         = "rate_policy.meal_plan.removed.v1"
SEASON_CREATED_V1            = "rate_policy.season.created.v1"
SEASON_UPDATED_V1            = "rate_policy.season.updated.v1"
SEASON_REMOVED_V1            = "rate_policy.season.removed.v1"
MAIN_CHANNEL_CREATED_V1      = "rate_policy.main_channel.created.v1"
MAIN_CHANNEL_UPDATED_V1      = "rate_policy.main_channel.updated.v1"
MAIN_CHANNEL_REMOVED_V1      = "rate_policy.main_channel.removed.v1"
SUB_CHANNEL_CREATED_V1       = "rate_policy.sub_channel.created.v1"
SUB_CHANNEL_UPDATED_V1       = "rate_policy.sub_channel.updated.v1"
SUB_CHANNEL_REMOVED_V1       = "rate_policy.sub_channel.removed.v1"
CHANNEL_RULE_CREATED_V1      = "rate_policy.channel_rule.created.v1"
CHANNEL_RULE_REMOVED_V1      = "rate_policy.channel_rule.removed.v1"

RATE_POLICY_EVENT_TYPES = (
    ROOM_REGISTERED_V1,
    ROOM_UPDATED_V1,
    MEAL_PLAN_CREATED_V1,
    MEAL_PLAN_UPDATED_V1,
    MEAL_PLAN_REMOVED_V1,
    SEASON_CREATED_V1,
    SEASON_UPDATED_V1,
    SEASON_REMOVED_V1,
    MAIN_CHANNEL_CREATED_V1,
    MAIN_CHANNEL_UPDATED_V1,
    MAIN_CHANNEL_REMOVED_V1,
    SUB_CHANNEL_CREATED_V1,
    SUB_CHANNEL_UPDATED_V1,
    SUB_CHANNEL_REMOVED_V1,
    CHANNEL_RULE_CREATED_V1,
    CHANNEL_RULE_REMOVED_V1,
)

COMMAND_TO_EVENT_TYPE = {
    "rate_policy.room.register.request":         ROOM_REGISTERED_V1,
    "rate_policy.room.update.request":           ROOM_UPDATED_V1,
    "rate_policy.meal_plan.create.request":      MEAL_PLAN_CREATED_V1,
    "rate_policy.meal_plan.update.request":      MEAL_PLAN_UPDATED_V1,
    "rate_policy.meal_plan.remove.request":      MEAL_PLAN_REMOVED_V1,
    "rate_policy.season.create.request":         SEASON_CREATED_V1,
    "rate_policy.season.update.request":         SEASON_UPDATED_V1,
    "rate_policy.season.remove.request":         SEASON_REMOVED_V1,
    "rate_policy.main_channel.create.request":   MAIN_CHANNEL_CREATED_V1,
    "rate_policy.main_channel.update.request":   MAIN_CHANNEL_UPDATED_V1,
    "rate_policy.main_channel.remove.request":   MAIN_CHANNEL_REMOVED_V1,
    "rate_policy.sub_channel.create.request":    SUB_CHANNEL_CREATED_V1,
    "rate_policy.sub_channel.update.request":    SUB_CHANNEL_UPDATED_V1,
    "rate_policy.sub_channel.remove.request":    SUB_CHANNEL_REMOVED_V1,
    "rate_policy.channel_rule.create.request":   CHANNEL_RULE_CREATED_V1,
    "rate_policy.channel_rule.remove.request":   CHANNEL_RULE_REMOVED_V1,
}

# ── Valid Vocabulary ──────────────────────────────────────────

VALID_MARKUP_TYPES      = frozenset({"FLAT", "PERCENTAGE"})
VALID_ADJUSTMENT_TYPES  = frozenset({"AMOUNT", "PERCENTAGE"})
VALID_COMMISSION_TYPES  = frozenset({"FIXED", "PERCENTAGE"})

ROOM_UPDATABLE_FIELDS = frozenset({
    "number", "room_type", "capacity", "price", "meal_plan_code",
    "view_type_id", "status", "active",
})
MEAL_PLAN_UPDATABLE_FIELDS = frozenset({
    "name", "markup_type", "markup_value", "active",
    "default_for_room_types", "description",
})
SEASON_UPDATABLE_FIELDS = frozenset({
    "name", "start_date", "end_date", "adjustment_type", "adjustment_value",
    "status", "room_type_adjustments", "meal_plan_adjustments",
    "stay_type_adjustments",
})
MAIN_CHANNEL_UPDATABLE_FIELDS = frozenset({"name", "adjustment_percentage", "status"})
SUB_CHANNEL_UPDATABLE_FIELDS  = frozenset({
    "name", "additional_adjustment_percentage", "status",
})

# ── Payload Builders ──────────────────────────────────────────

def build_room_registered_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "room_id":        p["room_id"],
        "number":         p["number"],
        "room_type":      p["room_type"],
        "capacity":       p["capacity"],
        "price":          Decimal(p["price"]),
        "meal_plan_code": p.get("meal_plan_code"),
        "view_type_id":   p.get("view_type_id"),
        "status":         p.get("status", "AVAILABLE"),
        "active":         p.get("active", True),
        "registered_by":  cmd.actor_id,
        "registered_at":  cmd.issued_at,
    }


def _build_updated_payload(id_field):
    def builder(cmd) -> dict:
        p = cmd.payload
        return {
            id_field:     p[id_field],
            "updates":    dict(p["updates"]),
            "updated_by": cmd.actor_id,
            "updated_at": cmd.issued_at,
        }
    return builder


def _build_removed_payload(id_field):
    def builder(cmd) -> dict:
        return {
            id_field:     cmd.payload[id_field],
            "removed_by": cmd.actor_id,
            "removed_at": cmd.issued_at,
        }
    return builder


def build_meal_plan_created_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "meal_plan_id":           p["meal_plan_id"],
        "code":                   p["code"],
        "name":                   p["name"],
        "markup_type":            p["markup_type"],
        "markup_value":           Decimal(p["markup_value"]),
        "active":                 p.get("active", True),
        "default_for_room_types": tuple(p.get("default_for_room_types", ())),
        "description":            p.get("description", ""),
        "created_by":             cmd.actor_id,
        "created_at":             cmd.issued_at,
    }


def build_season_created_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "season_id":             p["season_id"],
        "name":                  p["name"],
        "start_date":            p["start_date"],
        "end_date":              p["end_date"],
        "adjustment_type":       p["adjustment_type"],
        "adjustment_value":      Decimal(p["adjustment_value"]),
        "status":                p.get("status", "ACTIVE"),
        "room_type_adjustments": dict(p.get("room_type_adjustments", {})),
        "meal_plan_adjustments": dict(p.get("meal_plan_adjustments", {})),
        "stay_type_adjustments": dict(p.get("stay_type_adjustments", {})),
        "created_by":            cmd.actor_id,
        "created_at":            cmd.issued_at,
    }


def build_main_channel_created_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "channel_id":            p["channel_id"],
        "name":                  p["name"],
        "adjustment_percentage": Decimal(p["adjustment_percentage"]),
        "status":                p.get("status", "ACTIVE"),
        "created_by":            cmd.actor_id,
        "created_at":            cmd.issued_at,
    }


def build_sub_channel_created_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "channel_id":                       p["channel_id"],
        "name":                             p["name"],
        "main_channel_id":                  p["main_channel_id"],
        "additional_adjustment_percentage": Decimal(p["additional_adjustment_percentage"]),
        "status":                           p.get("status", "ACTIVE"),
        "created_by":                       cmd.actor_id,
        "created_at":                       cmd.issued_at,
    }


def build_channel_rule_created_payload(cmd) -> dict:
    p = cmd.payload
    return {
        "rule_id":          p["rule_id"],
        "room_type":        p["room_type"],
        "channel":          p["channel"],
        "adjustment_type":  p["adjustment_type"],
        "adjustment_value": Decimal(p["adjustment_value"]),
        "valid_from":       p.get("valid_from"),
        "valid_to":         p.get("valid_to"),
        "commission_type":  p.get("commission_type"),
        "commission_value": p.get("commission_value"),
        "season_id":        p.get("season_id"),
        "promo_code":       p.get("promo_code"),
        "active":           p.get("active", True),
        "created_by":       cmd.actor_id,
        "created_at":       cmd.issued_at,
    }


PAYLOAD_BUILDERS = {
    ROOM_REGISTERED_V1:      build_room_registered_payload,
    ROOM_UPDATED_V1:         _build_updated_payload("room_id"),
    MEAL_PLAN_CREATED_V1:    build_meal_plan_created_payload,
    MEAL_PLAN_UPDATED_V1:    _build_updated_payload("meal_plan_id"),
    MEAL_PLAN_REMOVED_V1:    _build_removed_payload("meal_plan_id"),
    SEASON_CREATED_V1:       build_season_created_payload,
    SEASON_UPDATED_V1:       _build_updated_payload("season_id"),
    SEASON_REMOVED_V1:       _build_removed_payload("season_id"),
    MAIN_CHANNEL_CREATED_V1: build_main_channel_created_payload,
    MAIN_CHANNEL_UPDATED_V1: _build_updated_payload("channel_id"),
    MAIN_CHANNEL_REMOVED_V1: _build_removed_payload("channel_id"),
    SUB_CHANNEL_CREATED_V1:  build_sub_channel_created_payload,
    SUB_CHANNEL_UPDATED_V1:  _build_updated_payload("channel_id"),
    SUB_CHANNEL_REMOVED_V1:  _build_removed_payload("channel_id"),
    CHANNEL_RULE_CREATED_V1: build_channel_rule_created_payload,
    CHANNEL_RULE_REMOVED_V1: _build_removed_payload("rule_id"),
}
