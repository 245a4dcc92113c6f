"""
Innkeep Rate Policy Engine — Policies
"""
from __future__ import annotations

from typing import List, Optional

from core.time.temporal import DateRange


def room_must_not_exist_policy(room_id: str, store) -> Optional[str]:
    if store.get_room(room_id) is not None:
        return f"room '{room_id}' already exists."
    return None


def room_must_exist_policy(room_id: str, store) -> Optional[str]:
    if store.get_room(room_id) is None:
        return f"room '{room_id}' not found."
    return None


def meal_plan_code_must_be_unique_policy(code: str, store) -> Optional[str]:
    if store.get_meal_plan_by_code(code) is not None:
        return f"A meal plan with code '{code}' already exists."
    return None


def meal_plan_must_not_exist_policy(meal_plan_id: str, store) -> Optional[str]:
    if store.get_meal_plan(meal_plan_id) is not None:
        return f"meal plan '{meal_plan_id}' already exists."
    return None


def meal_plan_must_exist_policy(meal_plan_id: str, store) -> Optional[str]:
    if store.get_meal_plan(meal_plan_id) is None:
        return f"meal plan '{meal_plan_id}' not found."
    return None


def season_must_not_exist_policy(season_id: str, store) -> Optional[str]:
    if store.get_season(season_id) is not None:
        return f"season '{season_id}' already exists."
    return None


def season_must_exist_policy(season_id: str, store) -> Optional[str]:
    if store.get_season(season_id) is None:
        return f"season '{season_id}' not found."
    return None


def main_channel_must_exist_policy(channel_id: str, store) -> Optional[str]:
    if store.get_main_channel(channel_id) is None:
        return f"main channel '{channel_id}' not found."
    return None


def sub_channel_must_exist_policy(channel_id: str, store) -> Optional[str]:
    if store.get_sub_channel(channel_id) is None:
        return f"sub-channel '{channel_id}' not found."
    return None


def channel_id_must_be_free_policy(channel_id: str, store) -> Optional[str]:
    if (store.get_main_channel(channel_id) is not None
            or store.get_sub_channel(channel_id) is not None):
        return f"channel '{channel_id}' already exists."
    return None


def channel_rule_must_not_exist_policy(rule_id: str, store) -> Optional[str]:
    if store.get_channel_rule(rule_id) is not None:
        return f"channel pricing rule '{rule_id}' already exists."
    return None


def channel_rule_must_exist_policy(rule_id: str, store) -> Optional[str]:
    if store.get_channel_rule(rule_id) is None:
        return f"channel pricing rule '{rule_id}' not found."
    return None


def overlapping_active_seasons(
    season_id: str, start, end, store, status: str = "ACTIVE",
) -> List[str]:
    """
    Ids of other active seasons whose range overlaps [start, end].

    Not a rejection: lookups resolve the first match in insertion
    order, the caller reports the hazard.
    """
    if status != "ACTIVE":
        return []
    candidate = DateRange(start, end)
    return [
        s.season_id for s in store.list_seasons()
        if s.season_id != season_id and s.is_active
        and s.date_range.overlaps(candidate)
    ]
