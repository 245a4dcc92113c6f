"""
Innkeep Hotel Rates — Rate Grid and Bulk Preview/Commit
=========================================================
Calendar-month grid of nightly rates per stay type, plus the staged
bulk update workflow:

    IDLE ──preview──▶ PREVIEWING ──commit──▶ IDLE
                          │  ▲
                          │  └─preview (restage)
                          └──discard──▶ IDLE

Grid cells are nightly pre-tax amounts rounded to cents: the value
shown is the value committed. Committed cells become sparse
overrides that win over recomputation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from core.config.rules import CENT
from core.time.errors import InvalidIntervalError
from core.time.temporal import month_days
from engines.hotel_rates.composition import RateCompositionEngine
from engines.hotel_rates.errors import BulkWorkflowStateError, UnknownStayTypeError
from engines.rate_policy.models import AdjustmentType, MealPlan, Room, stay_type_label

logger = logging.getLogger("innkeep.hotel_rates")

HUNDRED = Decimal("100")

MonthGrid = Dict[str, Dict[int, Decimal]]


class RoomCatalog(Protocol):
    def list_rooms(self, room_type: Optional[str] = None) -> List[Room]: ...

    def list_meal_plans(self, active_only: bool = False) -> List[MealPlan]: ...


# ══════════════════════════════════════════════════════════════
# STAY TYPES
# ══════════════════════════════════════════════════════════════

def representative_rooms(catalog: RoomCatalog) -> Dict[str, Room]:
    """Cheapest active room of each room type, in first-seen type order."""
    chosen: Dict[str, Room] = {}
    for room in catalog.list_rooms():
        if not room.active:
            continue
        current = chosen.get(room.room_type)
        if current is None or room.price < current.price:
            chosen[room.room_type] = room
    return chosen


def stay_types(catalog: RoomCatalog, default_meal_plan_code: str) -> Dict[str, Tuple[Room, str]]:
    """stay type label -> (representative room, meal plan code)."""
    codes = [p.code for p in catalog.list_meal_plans(active_only=True)]
    if not codes:
        codes = [default_meal_plan_code]
    result: Dict[str, Tuple[Room, str]] = {}
    for room_type, room in representative_rooms(catalog).items():
        for code in codes:
            result[stay_type_label(room_type, code)] = (room, code)
    return result


# ══════════════════════════════════════════════════════════════
# GRID
# ══════════════════════════════════════════════════════════════

def _nightly(
    engine: RateCompositionEngine, room: Room, code: str, day: date,
    main_channel_id: Optional[str], sub_channel_id: Optional[str],
) -> Decimal:
    breakdown = engine.compute_rate(
        room, day, day + timedelta(days=1), meal_plan_code=code,
        main_channel_id=main_channel_id, sub_channel_id=sub_channel_id,
    )
    return breakdown.subtotal.quantize(CENT, rounding=ROUND_HALF_UP)


def stay_type_month(
    engine: RateCompositionEngine, room: Room, code: str, year: int, month: int,
    main_channel_id: Optional[str] = None, sub_channel_id: Optional[str] = None,
) -> Dict[int, Decimal]:
    return {
        day.day: _nightly(engine, room, code, day, main_channel_id, sub_channel_id)
        for day in month_days(year, month)
    }


def rate_grid(
    engine: RateCompositionEngine,
    catalog: RoomCatalog,
    year: int,
    month: int,
    default_meal_plan_code: str = "RO",
    main_channel_id: Optional[str] = None,
    sub_channel_id: Optional[str] = None,
) -> MonthGrid:
    """{stay type: {day of month: nightly amount}} for every stay type."""
    return {
        label: stay_type_month(engine, room, code, year, month,
                               main_channel_id, sub_channel_id)
        for label, (room, code) in stay_types(catalog, default_meal_plan_code).items()
    }


def apply_bulk_adjustment(
    amount: Decimal, adjustment_type: AdjustmentType, value: Decimal,
) -> Decimal:
    if adjustment_type is AdjustmentType.PERCENTAGE:
        adjusted = amount * (1 + value / HUNDRED)
    else:
        adjusted = amount + value
    return adjusted.quantize(CENT, rounding=ROUND_HALF_UP)


# ══════════════════════════════════════════════════════════════
# WORKFLOW
# ══════════════════════════════════════════════════════════════

class BulkState(Enum):
    IDLE = "IDLE"
    PREVIEWING = "PREVIEWING"


@dataclass(frozen=True)
class StagedBulkUpdate:
    stay_type: str
    adjustment_type: AdjustmentType
    value: Decimal
    year: int
    month: int
    preview: Dict[int, Decimal] = field(default_factory=dict)


class BulkRateWorkflow:
    """Holds at most one staged bulk update."""

    def __init__(self):
        self._staged: Optional[StagedBulkUpdate] = None

    @property
    def state(self) -> BulkState:
        return BulkState.IDLE if self._staged is None else BulkState.PREVIEWING

    @property
    def staged(self) -> Optional[StagedBulkUpdate]:
        return self._staged

    def preview(
        self,
        grid: MonthGrid,
        year: int,
        month: int,
        stay_type: str,
        adjustment_type: AdjustmentType,
        value: Decimal,
    ) -> Dict[int, Decimal]:
        """Stage an adjustment for one stay type; other rows stay as they are."""
        if stay_type not in grid:
            raise UnknownStayTypeError(stay_type)
        if not isinstance(adjustment_type, AdjustmentType):
            raise ValueError("adjustment_type must be AdjustmentType enum.")
        previewed = {
            day: apply_bulk_adjustment(amount, adjustment_type, value)
            for day, amount in grid[stay_type].items()
        }
        negative = sorted(day for day, amount in previewed.items() if amount < 0)
        if negative:
            raise ValueError(
                f"Adjustment {adjustment_type.value} {value} takes {stay_type} below zero "
                f"on day(s) {negative}.")
        self._staged = StagedBulkUpdate(
            stay_type=stay_type, adjustment_type=adjustment_type, value=value,
            year=year, month=month, preview=previewed,
        )
        logger.debug("Staged %s %s on %s for %04d-%02d",
                     adjustment_type.value, value, stay_type, year, month)
        return dict(previewed)

    def prepare_commit(self, previewed: Dict[int, Decimal]) -> StagedBulkUpdate:
        """
        Validate a commit against the staged update.

        The previewed map must cover exactly the days of the staged
        month with non-negative amounts. Staging is left in place; the
        caller discards it once the overrides are written.
        """
        staged = self._staged
        if staged is None:
            raise BulkWorkflowStateError("commit", self.state.value)
        expected = {d.day for d in month_days(staged.year, staged.month)}
        if set(previewed) != expected:
            raise InvalidIntervalError(
                date(staged.year, staged.month, 1),
                date(staged.year, staged.month, max(expected)),
                f"previewed grid has {len(previewed)} day(s), "
                f"month has {len(expected)}.",
            )
        negative = sorted(day for day, amount in previewed.items() if amount < 0)
        if negative:
            raise ValueError(f"previewed amounts must be >= 0; day(s) {negative} are not.")
        return StagedBulkUpdate(
            stay_type=staged.stay_type, adjustment_type=staged.adjustment_type,
            value=staged.value, year=staged.year, month=staged.month,
            preview=dict(previewed),
        )

    def discard(self) -> None:
        self._staged = None
