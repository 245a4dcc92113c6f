"""
Innkeep Rate Policy Engine — Adjustment Resolvers
===================================================
Pure lookups that turn policy entities into numbers.

Every resolver degrades to a zero adjustment when the policy it is
asked about does not exist: a quote must always produce a total.
Repositories are passed in explicitly; nothing here holds state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol

from engines.rate_policy.models import (
    AdjustmentType, MainChannel, MarkupType, MealPlan, Season, SubChannel,
    stay_type_label,
)

logger = logging.getLogger("innkeep.rate_policy")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


# ══════════════════════════════════════════════════════════════
# REPOSITORY PROTOCOLS
# ══════════════════════════════════════════════════════════════

class MealPlanRepository(Protocol):
    def get_meal_plan_by_code(self, code: str) -> Optional[MealPlan]: ...


class SeasonRepository(Protocol):
    def list_seasons(self) -> List[Season]: ...


class ChannelRepository(Protocol):
    def get_main_channel(self, channel_id: str) -> Optional[MainChannel]: ...

    def get_sub_channel(self, channel_id: str) -> Optional[SubChannel]: ...


# ══════════════════════════════════════════════════════════════
# MEAL PLAN MARKUP
# ══════════════════════════════════════════════════════════════

def resolve_meal_plan_markup(
    base_rate: Decimal, nights: int, meal_plan: Optional[MealPlan],
) -> Decimal:
    """
    Per-stay uplift for a meal plan.

    FLAT is charged per night and ignores the rate; PERCENTAGE is a
    share of base_rate (the whole stay's room subtotal).
    """
    if meal_plan is None:
        return ZERO
    if meal_plan.markup_type is MarkupType.FLAT:
        return meal_plan.markup_value * nights
    return base_rate * meal_plan.markup_value / HUNDRED


# ══════════════════════════════════════════════════════════════
# SEASONAL ADJUSTMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SeasonalAdjustment:
    """
    Resolved seasonal contribution.

    percent multiplies the subtotal; flat_per_night is the global
    value of an AMOUNT season, added once per night.
    """

    season_id: Optional[str]
    percent: Decimal = ZERO
    flat_per_night: Decimal = ZERO

    @property
    def is_neutral(self) -> bool:
        return self.percent == 0 and self.flat_per_night == 0


NO_SEASON = SeasonalAdjustment(season_id=None)


def find_season(seasons: SeasonRepository, on: date) -> Optional[Season]:
    """First active season containing the date, in repository order."""
    for season in seasons.list_seasons():
        if season.is_active and season.date_range.contains(on):
            return season
    return None


def resolve_seasonal_adjustment(
    seasons: SeasonRepository,
    on: date,
    room_type: Optional[str] = None,
    meal_plan_code: Optional[str] = None,
    stay_type: Optional[str] = None,
) -> SeasonalAdjustment:
    season = find_season(seasons, on)
    if season is None:
        return NO_SEASON

    if stay_type is None and room_type and meal_plan_code:
        stay_type = stay_type_label(room_type, meal_plan_code)

    percent = ZERO
    flat = ZERO
    if season.adjustment_type is AdjustmentType.PERCENTAGE:
        percent += season.adjustment_value
    else:
        flat = season.adjustment_value

    if room_type is not None:
        percent += season.room_type_adjustments.get(room_type, ZERO)
    if meal_plan_code is not None:
        percent += season.meal_plan_adjustments.get(meal_plan_code, ZERO)
    if stay_type is not None:
        percent += season.stay_type_adjustments.get(stay_type, ZERO)

    logger.debug("Season %s on %s: %s%% + %s/night", season.season_id, on, percent, flat)
    return SeasonalAdjustment(season_id=season.season_id, percent=percent, flat_per_night=flat)


def resolve_seasonal_adjustment_percent(
    seasons: SeasonRepository,
    on: date,
    room_type: Optional[str] = None,
    meal_plan_code: Optional[str] = None,
    stay_type: Optional[str] = None,
) -> Decimal:
    """
    Percentage part of the seasonal adjustment; 0 outside any season.

    An AMOUNT season contributes its global value as a flat per-night
    amount, which is not included here; use resolve_seasonal_adjustment
    for the full adjustment.
    """
    return resolve_seasonal_adjustment(
        seasons, on, room_type, meal_plan_code, stay_type).percent


# ══════════════════════════════════════════════════════════════
# CHANNEL ADJUSTMENT
# ══════════════════════════════════════════════════════════════

def resolve_channel_adjustment_percent(
    channels: ChannelRepository,
    main_channel_id: Optional[str],
    sub_channel_id: Optional[str] = None,
) -> Decimal:
    """
    Main channel percentage plus the sub-channel's additional
    percentage when the sub-channel belongs to that main channel.
    """
    if not main_channel_id:
        return ZERO
    main = channels.get_main_channel(main_channel_id)
    if main is None:
        logger.debug("Unknown main channel %s; no channel adjustment.", main_channel_id)
        return ZERO

    percent = main.adjustment_percentage
    if sub_channel_id:
        sub = channels.get_sub_channel(sub_channel_id)
        if sub is not None and sub.main_channel_id == main.channel_id:
            percent += sub.additional_adjustment_percentage
        else:
            logger.debug("Sub-channel %s not under %s; ignored.", sub_channel_id, main_channel_id)
    return percent
