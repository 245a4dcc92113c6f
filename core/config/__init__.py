"""
Innkeep Core Config — Public API
==================================
Admin-configurable tax rates, currency rates and pricing defaults.
"""

from core.config.rules import (
    CENT,
    ConfigStore,
    CurrencyRate,
    InMemoryConfigStore,
    PricingSettings,
    TaxRate,
    convert_from_base,
    room_tax_percent,
)

__all__ = [
    "CENT",
    "ConfigStore",
    "CurrencyRate",
    "InMemoryConfigStore",
    "PricingSettings",
    "TaxRate",
    "convert_from_base",
    "room_tax_percent",
]
