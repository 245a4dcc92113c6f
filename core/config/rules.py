"""
Innkeep Core Config — Admin-Configurable Rules
================================================
Doctrine: No hardcoded tax rates or exchange rates in engine logic.
Tax percentages, currency rates and pricing defaults come from
admin-configurable data, not from source code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Protocol

from core.time.temporal import DateRange

logger = logging.getLogger("innkeep.config")

CENT = Decimal("0.01")

TAX_SCOPES = frozenset({"ROOM", "SERVICE", "EVENT", "GLOBAL"})


# ══════════════════════════════════════════════════════════════
# TAX RATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TaxRate:
    """
    Tax line (VAT, service charge, city tax...).

    percentage is expressed in percent: Decimal("10") means 10%.
    Removal is a soft delete (active=False) so historical invoices
    keep resolving.
    """

    tax_id: str
    name: str
    percentage: Decimal
    scope: str  # ROOM | SERVICE | EVENT | GLOBAL
    effective_from: date
    effective_to: Optional[date] = None
    code: str = ""
    active: bool = True

    def __post_init__(self) -> None:
        if not self.tax_id:
            raise ValueError("tax_id must be non-empty.")
        if self.scope not in TAX_SCOPES:
            raise ValueError(f"scope must be one of {sorted(TAX_SCOPES)}.")
        if not 0 <= self.percentage <= 100:
            raise ValueError(
                f"Tax percentage must be between 0 and 100, got {self.percentage}."
            )
        DateRange(self.effective_from, self.effective_to)

    def is_effective_on(self, day: date) -> bool:
        return self.active and DateRange(self.effective_from, self.effective_to).contains(day)

    def compute_tax(self, amount: Decimal) -> Decimal:
        """Unrounded tax on a base amount."""
        return amount * self.percentage / Decimal("100")


# ══════════════════════════════════════════════════════════════
# CURRENCY RATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CurrencyRate:
    """Display currency: one unit of base currency equals rate_to_base units."""

    code: str
    name: str
    symbol: str
    rate_to_base: Decimal
    active: bool = True

    def __post_init__(self) -> None:
        if not self.code or len(self.code) != 3:
            raise ValueError("code must be 3-letter ISO 4217 code.")
        if self.rate_to_base <= 0:
            raise ValueError("rate_to_base must be positive.")


# ══════════════════════════════════════════════════════════════
# PRICING SETTINGS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingSettings:
    """
    Process-wide pricing defaults.

    Loaded from Django settings (INNKEEP_PRICING) by the adapter;
    tests construct it directly.
    """

    base_currency: str = "USD"
    default_tax_percent: Decimal = Decimal("10")
    default_meal_plan_code: str = "RO"
    audit_log_limit: int = 1000

    def __post_init__(self) -> None:
        if not self.base_currency or len(self.base_currency) != 3:
            raise ValueError("base_currency must be 3-letter ISO 4217 code.")
        if not 0 <= self.default_tax_percent <= 100:
            raise ValueError("default_tax_percent must be between 0 and 100.")
        if self.audit_log_limit < 1:
            raise ValueError("audit_log_limit must be >= 1.")

    @classmethod
    def from_mapping(cls, values: dict) -> "PricingSettings":
        defaults = cls()
        return cls(
            base_currency=values.get("BASE_CURRENCY", defaults.base_currency),
            default_tax_percent=Decimal(
                str(values.get("DEFAULT_TAX_PERCENT", defaults.default_tax_percent))
            ),
            default_meal_plan_code=values.get(
                "DEFAULT_MEAL_PLAN_CODE", defaults.default_meal_plan_code
            ),
            audit_log_limit=int(values.get("AUDIT_LOG_LIMIT", defaults.audit_log_limit)),
        )


# ══════════════════════════════════════════════════════════════
# CONFIG STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ConfigStore(Protocol):
    """
    Protocol for admin-configured rule storage.

    Implementations may back this with a database, file, or in-memory store.
    """

    def get_tax_rates(self, scope: str, on: date) -> list[TaxRate]:
        """Active tax rates of a scope effective on a date."""
        ...  # pragma: no cover

    def get_currency(self, code: str) -> Optional[CurrencyRate]:
        """Fetch a display currency by code."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY CONFIG STORE (for testing / bootstrap)
# ══════════════════════════════════════════════════════════════

class InMemoryConfigStore:
    """Simple in-memory config store for testing and bootstrap."""

    def __init__(self) -> None:
        self._tax_rates: dict[str, TaxRate] = {}
        self._currencies: dict[str, CurrencyRate] = {}

    def add_tax_rate(self, rate: TaxRate) -> None:
        self._tax_rates[rate.tax_id] = rate

    def deactivate_tax_rate(self, tax_id: str) -> None:
        rate = self._tax_rates.get(tax_id)
        if rate is None:
            raise KeyError(f"tax rate '{tax_id}' not found.")
        self._tax_rates[tax_id] = TaxRate(
            tax_id=rate.tax_id, name=rate.name, percentage=rate.percentage,
            scope=rate.scope, effective_from=rate.effective_from,
            effective_to=rate.effective_to, code=rate.code, active=False,
        )

    def add_currency(self, currency: CurrencyRate) -> None:
        self._currencies[currency.code] = currency

    def get_tax_rates(self, scope: str, on: date) -> list[TaxRate]:
        return [
            r for r in self._tax_rates.values()
            if r.scope == scope and r.is_effective_on(on)
        ]

    def get_currency(self, code: str) -> Optional[CurrencyRate]:
        return self._currencies.get(code)


# ══════════════════════════════════════════════════════════════
# PURE HELPERS
# ══════════════════════════════════════════════════════════════

def room_tax_percent(store: ConfigStore, on: date, default: Decimal) -> Decimal:
    """
    Effective room tax percent on a date.

    Sum of active ROOM and GLOBAL rates; falls back to the configured
    default when no rate is set up at all.
    """
    rates = store.get_tax_rates("ROOM", on) + store.get_tax_rates("GLOBAL", on)
    if not rates:
        return default
    return sum((r.percentage for r in rates), Decimal("0"))


def convert_from_base(store: ConfigStore, amount: Decimal, code: str) -> Decimal:
    """
    Convert a base-currency amount for display, rounded to cents.

    Unknown or inactive currencies return the amount unchanged.
    """
    currency = store.get_currency(code)
    if currency is None or not currency.active:
        logger.warning("No active currency rate for %s; showing base amount.", code)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    return (amount * currency.rate_to_base).quantize(CENT, rounding=ROUND_HALF_UP)
