"""
Innkeep Rate Policy Engine
============================
Policy repositories (rooms, meal plans, seasons, channels, channel
pricing rules) and the adjustment resolvers built on them.
"""

from engines.rate_policy.models import (
    AdjustmentType,
    ChannelPricingRule,
    MainChannel,
    MarkupType,
    MealPlan,
    Room,
    Season,
    SubChannel,
    split_stay_type,
    stay_type_label,
)
from engines.rate_policy.resolvers import (
    SeasonalAdjustment,
    find_season,
    resolve_channel_adjustment_percent,
    resolve_meal_plan_markup,
    resolve_seasonal_adjustment,
    resolve_seasonal_adjustment_percent,
)
from engines.rate_policy.services import RatePolicyProjectionStore, RatePolicyService

__all__ = [
    "AdjustmentType",
    "ChannelPricingRule",
    "MainChannel",
    "MarkupType",
    "MealPlan",
    "Room",
    "Season",
    "SubChannel",
    "split_stay_type",
    "stay_type_label",
    "SeasonalAdjustment",
    "find_season",
    "resolve_channel_adjustment_percent",
    "resolve_meal_plan_markup",
    "resolve_seasonal_adjustment",
    "resolve_seasonal_adjustment_percent",
    "RatePolicyProjectionStore",
    "RatePolicyService",
]
