"""
Innkeep Django Adapter Wiring
===============================
Constructs HttpApiDependencies for local/staging live runs.

This module is adapter-only glue:
- pricing defaults come from settings.INNKEEP_PRICING
- in-memory stores and an in-memory event ledger
- the stock channel hierarchy is seeded on first use
"""

from __future__ import annotations

import copy
import logging
import threading
from decimal import Decimal
from typing import Any

from django.conf import settings

from core.audit import InMemoryAuditLog
from core.config.rules import CurrencyRate, InMemoryConfigStore, PricingSettings
from core.http_api.dependencies import HttpApiDependencies
from core.time.clock import SystemClock
from engines.availability.services import AvailabilityService, BookingProjectionStore
from engines.hotel_rates.overrides import RateOverrideStore
from engines.hotel_rates.services import HotelRateService
from engines.rate_policy.services import RatePolicyProjectionStore, RatePolicyService

logger = logging.getLogger("innkeep.config")

SYSTEM_ACTOR_ID = "system"

# code, name, symbol, units per one USD
DEFAULT_CURRENCIES = (
    ("USD", "US Dollar", "$", "1"),
    ("EUR", "Euro", "€", "0.92"),
    ("LKR", "Sri Lankan Rupee", "Rs", "300"),
)

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


class _InMemoryEventLedger:
    def __init__(self):
        self._events: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def record(self, event_data: dict[str, Any]) -> None:
        with self._lock:
            self._events.append(copy.deepcopy(event_data))

    def all_events(self) -> tuple[dict[str, Any], ...]:
        with self._lock:
            return tuple(copy.deepcopy(self._events))


def load_pricing_settings() -> PricingSettings:
    return PricingSettings.from_mapping(getattr(settings, "INNKEEP_PRICING", {}))


def _build_config_store(pricing: PricingSettings) -> InMemoryConfigStore:
    store = InMemoryConfigStore()
    if pricing.base_currency != "USD":
        logger.warning(
            "Base currency is %s; no display currencies loaded, quotes stay in %s.",
            pricing.base_currency, pricing.base_currency)
        return store
    for code, name, symbol, rate in DEFAULT_CURRENCIES:
        store.add_currency(CurrencyRate(
            code=code, name=name, symbol=symbol, rate_to_base=Decimal(rate)))
    return store


def _create_dependencies() -> HttpApiDependencies:
    pricing = load_pricing_settings()
    clock = SystemClock()
    ledger = _InMemoryEventLedger()
    audit_log = InMemoryAuditLog(limit=pricing.audit_log_limit)

    policy_store = RatePolicyProjectionStore()
    policy_service = RatePolicyService(
        projection_store=policy_store,
        persist_event=ledger.record,
        audit_log=audit_log,
    )
    policy_service.seed_default_channels(
        actor_id=SYSTEM_ACTOR_ID, issued_at=clock.now_utc())

    rate_service = HotelRateService(
        policy_store=policy_store,
        config_store=_build_config_store(pricing),
        settings=pricing,
        override_store=RateOverrideStore(),
        audit_log=audit_log,
        clock=clock,
        persist_event=ledger.record,
    )
    availability_service = AvailabilityService(
        projection_store=BookingProjectionStore(),
        room_catalog=policy_store,
        persist_event=ledger.record,
    )
    return HttpApiDependencies(
        rate_service=rate_service,
        availability_service=availability_service,
        policy_service=policy_service,
    )


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the singleton so the next request rebuilds it (tests)."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None
