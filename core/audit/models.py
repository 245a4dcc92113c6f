"""
Innkeep Core Audit — Immutable Audit Models
=============================================
Append-only record of pricing changes (bulk rate commits, single
cell overrides, policy edits). Frozen dataclasses — once created,
never modified.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

AUDIT_ENTITY_TYPES = frozenset({
    "RATE_OVERRIDE", "BULK_RATE_UPDATE", "MEAL_PLAN", "SEASON",
    "CHANNEL", "CHANNEL_PRICING_RULE",
})


# ══════════════════════════════════════════════════════════════
# PRICING AUDIT ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingAuditEntry:
    """
    Immutable record of a pricing action.

    changes carries the action-specific detail, e.g. for a bulk
    commit: stay type, adjustment type/value and the affected days.
    """

    entry_id: uuid.UUID
    entity_type: str
    entity_id: str
    action: str
    actor_id: str
    occurred_at: datetime
    changes: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.entity_type not in AUDIT_ENTITY_TYPES:
            raise ValueError(
                f"entity_type must be one of {sorted(AUDIT_ENTITY_TYPES)}, "
                f"got '{self.entity_type}'."
            )
        if not self.actor_id:
            raise ValueError("actor_id must be non-empty.")
        if self.occurred_at.tzinfo is None:
            raise ValueError("occurred_at must be timezone-aware.")
