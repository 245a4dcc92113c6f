"""
Innkeep Hotel Rates — Sparse Rate Overrides
=============================================
Per-night pre-tax amounts pinned for a stay type. Written only by
explicit cell edits and committed bulk updates; always wins over a
freshly computed nightly amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from engines.hotel_rates.events import (
    BULK_RATE_COMMITTED_V1, RATE_OVERRIDE_CLEARED_V1, RATE_OVERRIDE_SET_V1,
)


@dataclass(frozen=True)
class RateOverrideKey:
    """(stay type, calendar date) — a full date, so months never collide."""

    stay_type: str
    stay_date: date

    def __post_init__(self):
        if not self.stay_type:
            raise ValueError("stay_type must be non-empty.")
        if not isinstance(self.stay_date, date):
            raise ValueError("stay_date must be a date.")


class RateOverrideLookup(Protocol):
    def get_override(self, key: RateOverrideKey) -> Optional[Decimal]: ...


def _check_amount(key: RateOverrideKey, amount) -> None:
    if not isinstance(amount, Decimal):
        raise ValueError("override amount must be Decimal.")
    if amount < 0:
        raise ValueError(f"override amount for {key.stay_type} on {key.stay_date} must be >= 0.")


# ── Projection Store ──────────────────────────────────────────

class RateOverrideStore:
    """In-memory sparse override map."""

    def __init__(self):
        self._events:    List[dict]                     = []
        self._overrides: Dict[RateOverrideKey, Decimal] = {}

    # ── apply ─────────────────────────────────────────────────

    def apply(self, event_type: str, payload: dict) -> None:
        if event_type == RATE_OVERRIDE_SET_V1:
            self.set_override(
                RateOverrideKey(payload["stay_type"], payload["stay_date"]),
                payload["amount"])

        elif event_type == RATE_OVERRIDE_CLEARED_V1:
            self.clear_override(
                RateOverrideKey(payload["stay_type"], payload["stay_date"]))

        elif event_type == BULK_RATE_COMMITTED_V1:
            self.set_many(
                (RateOverrideKey(payload["stay_type"], day), amount)
                for day, amount in payload["cells"].items())

        self._events.append({"event_type": event_type, "payload": payload})

    # ── writes / queries ──────────────────────────────────────

    def set_override(self, key: RateOverrideKey, amount: Decimal) -> None:
        _check_amount(key, amount)
        self._overrides[key] = amount

    def set_many(self, cells: Iterable[Tuple[RateOverrideKey, Decimal]]) -> None:
        """All cells are checked before any is written."""
        cells = list(cells)
        for key, amount in cells:
            _check_amount(key, amount)
        self._overrides.update(cells)

    def clear_override(self, key: RateOverrideKey) -> None:
        self._overrides.pop(key, None)

    def get_override(self, key: RateOverrideKey) -> Optional[Decimal]:
        return self._overrides.get(key)

    def overrides_for(self, stay_type: str, year: int, month: int) -> Dict[date, Decimal]:
        return {
            k.stay_date: v for k, v in self._overrides.items()
            if k.stay_type == stay_type
            and k.stay_date.year == year and k.stay_date.month == month
        }

    def __len__(self) -> int:
        return len(self._overrides)

    @property
    def event_count(self) -> int:
        return len(self._events)

    def truncate(self):
        self._events.clear()
        self._overrides.clear()
