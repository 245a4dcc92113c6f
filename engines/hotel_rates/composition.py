"""
Innkeep Hotel Rates — Rate Composition Engine
===============================================
Turns a room, a stay interval, a meal plan and a channel context into
one chargeable amount.

Fixed order of application:
    1. base rate          room price x nights
    2. meal plan markup   flat per night, or percent of the base rate
    3. season             x (1 + season% / 100), plus flat amount x nights
    4. channel            x (1 + channel% / 100)
    5. overrides          pinned nightly amounts, then the manual override
    6. tax                subtotal x tax% / 100
    7. display currency   reported separately, never fed back

Nothing is rounded until RateBreakdown.rounded() is called for display.
The engine is pure: repositories are read, never written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from core.config.rules import (
    CENT, ConfigStore, PricingSettings, convert_from_base, room_tax_percent,
)
from core.time.temporal import StayInterval
from engines.hotel_rates.overrides import RateOverrideKey, RateOverrideLookup
from engines.rate_policy.models import AdjustmentType, Room, stay_type_label
from engines.rate_policy.resolvers import (
    ChannelRepository, MealPlanRepository, SeasonRepository,
    resolve_channel_adjustment_percent, resolve_meal_plan_markup,
    resolve_seasonal_adjustment,
)

logger = logging.getLogger("innkeep.hotel_rates")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


# ══════════════════════════════════════════════════════════════
# VALUE OBJECTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ManualOverride:
    """Front-desk adjustment: AMOUNT is added, PERCENTAGE multiplies."""

    adjustment_type: AdjustmentType
    value: Decimal

    def __post_init__(self):
        if not isinstance(self.adjustment_type, AdjustmentType):
            raise ValueError("adjustment_type must be AdjustmentType enum.")
        if not isinstance(self.value, Decimal):
            raise ValueError("value must be Decimal.")

    def apply(self, amount: Decimal) -> Decimal:
        if self.adjustment_type is AdjustmentType.AMOUNT:
            return amount + self.value
        return amount * (1 + self.value / HUNDRED)


_MONEY_FIELDS = (
    "base_rate", "meal_plan_markup", "seasonal_adjustment", "channel_adjustment",
    "override_adjustment", "manual_adjustment", "subtotal", "tax", "total_amount",
    "display_total",
)


@dataclass(frozen=True)
class RateBreakdown:
    """
    Itemised result of one rate computation.

    subtotal is pre-tax; total_amount = subtotal + tax. Adjustment
    fields are the signed change each step made.
    """

    room_id: str
    room_type: str
    check_in: date
    check_out: date
    nights: int
    meal_plan_code: str
    stay_type: str
    base_rate: Decimal
    meal_plan_markup: Decimal
    seasonal_adjustment: Decimal
    channel_adjustment: Decimal
    override_adjustment: Decimal
    manual_adjustment: Decimal
    subtotal: Decimal
    tax_percent: Decimal
    tax: Decimal
    total_amount: Decimal
    season_id: Optional[str] = None
    seasonal_percent: Decimal = ZERO
    channel_percent: Decimal = ZERO
    main_channel_id: Optional[str] = None
    sub_channel_id: Optional[str] = None
    manual_override: Optional[ManualOverride] = None
    overridden_nights: tuple = ()
    display_currency: Optional[str] = None
    display_total: Optional[Decimal] = None

    def rounded(self) -> "RateBreakdown":
        """Copy with every money field rounded to cents (half up)."""
        changes = {}
        for name in _MONEY_FIELDS:
            value = getattr(self, name)
            if value is not None:
                changes[name] = value.quantize(CENT, rounding=ROUND_HALF_UP)
        return replace(self, **changes)

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (Decimal, date)):
                value = str(value)
            elif isinstance(value, ManualOverride):
                value = {"adjustment_type": value.adjustment_type.value,
                         "value": str(value.value)}
            elif f.name == "overridden_nights":
                value = [str(d) for d in value]
            out[f.name] = value
        return out


# ══════════════════════════════════════════════════════════════
# ENGINE
# ══════════════════════════════════════════════════════════════

class RateCompositionEngine:
    """
    Rate composition over injected repositories.

    Usage:
        engine = RateCompositionEngine(
            meal_plans=policy_store, seasons=policy_store,
            channels=policy_store, config_store=config,
            settings=PricingSettings(), overrides=override_store,
        )
        breakdown = engine.compute_rate(room, check_in, check_out, "BB")
    """

    def __init__(
        self, *,
        meal_plans: MealPlanRepository,
        seasons: SeasonRepository,
        channels: ChannelRepository,
        config_store: ConfigStore,
        settings: PricingSettings,
        overrides: Optional[RateOverrideLookup] = None,
    ):
        self._meal_plans   = meal_plans
        self._seasons      = seasons
        self._channels     = channels
        self._config_store = config_store
        self._settings     = settings
        self._overrides    = overrides

    def compute_rate(
        self,
        room: Room,
        check_in: date,
        check_out: date,
        meal_plan_code: Optional[str] = None,
        main_channel_id: Optional[str] = None,
        sub_channel_id: Optional[str] = None,
        manual_override: Optional[ManualOverride] = None,
        display_currency: Optional[str] = None,
        tax_percent: Optional[Decimal] = None,
        apply_overrides: bool = True,
    ) -> RateBreakdown:
        stay = StayInterval(check_in, check_out)
        nights = stay.nights

        code = meal_plan_code or room.meal_plan_code
        meal_plan = self._meal_plans.get_meal_plan_by_code(code) if code else None
        if meal_plan is None:
            code = self._settings.default_meal_plan_code
        stay_type = stay_type_label(room.room_type, code)

        base_rate = room.price * nights
        meal_markup = resolve_meal_plan_markup(base_rate, nights, meal_plan)
        subtotal = base_rate + meal_markup

        season = resolve_seasonal_adjustment(
            self._seasons, check_in, room.room_type, code, stay_type)
        seasoned = subtotal * (1 + season.percent / HUNDRED) + season.flat_per_night * nights
        seasonal_adjustment = seasoned - subtotal

        channel_percent = resolve_channel_adjustment_percent(
            self._channels, main_channel_id, sub_channel_id)
        channelled = seasoned * (1 + channel_percent / HUNDRED)
        channel_adjustment = channelled - seasoned

        override_adjustment = ZERO
        overridden = []
        if apply_overrides and self._overrides is not None:
            computed_nightly = channelled / nights
            for night in stay.each_night():
                pinned = self._overrides.get_override(RateOverrideKey(stay_type, night))
                if pinned is not None:
                    override_adjustment += pinned - computed_nightly
                    overridden.append(night)
        overridden_total = channelled + override_adjustment

        final_subtotal = overridden_total
        if manual_override is not None:
            final_subtotal = manual_override.apply(overridden_total)
        manual_adjustment = final_subtotal - overridden_total

        if tax_percent is None:
            tax_percent = room_tax_percent(
                self._config_store, check_in, self._settings.default_tax_percent)
        tax = final_subtotal * tax_percent / HUNDRED
        total = final_subtotal + tax

        display_total = None
        if display_currency and display_currency != self._settings.base_currency:
            display_total = convert_from_base(self._config_store, total, display_currency)

        logger.debug(
            "Rate %s %s..%s: base=%s meal=%s season=%s channel=%s total=%s",
            stay_type, check_in, check_out, base_rate, meal_markup,
            seasonal_adjustment, channel_adjustment, total,
        )
        return RateBreakdown(
            room_id=room.room_id,
            room_type=room.room_type,
            check_in=check_in,
            check_out=check_out,
            nights=nights,
            meal_plan_code=code,
            stay_type=stay_type,
            base_rate=base_rate,
            meal_plan_markup=meal_markup,
            seasonal_adjustment=seasonal_adjustment,
            channel_adjustment=channel_adjustment,
            override_adjustment=override_adjustment,
            manual_adjustment=manual_adjustment,
            subtotal=final_subtotal,
            tax_percent=tax_percent,
            tax=tax,
            total_amount=total,
            season_id=season.season_id,
            seasonal_percent=season.percent,
            channel_percent=channel_percent,
            main_channel_id=main_channel_id,
            sub_channel_id=sub_channel_id,
            manual_override=manual_override,
            overridden_nights=tuple(overridden),
            display_currency=display_currency if display_total is not None else None,
            display_total=display_total,
        )

    def reprice_meal_plan(
        self, breakdown: RateBreakdown, room: Room, meal_plan_code: str,
    ) -> RateBreakdown:
        """Re-quote an existing stay after its meal plan changes."""
        if room.room_id != breakdown.room_id:
            raise ValueError(
                f"Breakdown is for room '{breakdown.room_id}', not '{room.room_id}'.")
        return self.compute_rate(
            room,
            breakdown.check_in,
            breakdown.check_out,
            meal_plan_code=meal_plan_code,
            main_channel_id=breakdown.main_channel_id,
            sub_channel_id=breakdown.sub_channel_id,
            manual_override=breakdown.manual_override,
            display_currency=breakdown.display_currency,
            tax_percent=breakdown.tax_percent,
        )
