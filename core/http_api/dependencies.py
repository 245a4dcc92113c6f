"""
Innkeep HTTP API - Dependencies
=================================
Injected services for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass

from engines.availability.services import AvailabilityService
from engines.hotel_rates.services import HotelRateService
from engines.rate_policy.services import RatePolicyService


@dataclass(frozen=True)
class HttpApiDependencies:
    rate_service: HotelRateService
    availability_service: AvailabilityService
    policy_service: RatePolicyService
