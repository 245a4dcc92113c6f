"""
Innkeep Hotel Rates Engine
============================
Rate composition, sparse nightly overrides and the bulk rate
preview/commit workflow.
"""

from engines.hotel_rates.bulk import BulkRateWorkflow, BulkState, rate_grid
from engines.hotel_rates.composition import (
    ManualOverride,
    RateBreakdown,
    RateCompositionEngine,
)
from engines.hotel_rates.errors import (
    BulkWorkflowStateError,
    RateEngineError,
    UnknownStayTypeError,
)
from engines.hotel_rates.overrides import RateOverrideKey, RateOverrideStore
from engines.hotel_rates.services import HotelRateService

__all__ = [
    "BulkRateWorkflow",
    "BulkState",
    "rate_grid",
    "ManualOverride",
    "RateBreakdown",
    "RateCompositionEngine",
    "BulkWorkflowStateError",
    "RateEngineError",
    "UnknownStayTypeError",
    "RateOverrideKey",
    "RateOverrideStore",
    "HotelRateService",
]
