"""
Innkeep Core Audit — Pure Audit Functions
===========================================
Factory functions for audit entries. Pure — they return new frozen
objects and never touch a log.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from core.audit.models import PricingAuditEntry


def create_audit_entry(
    entity_type: str,
    entity_id: str,
    action: str,
    actor_id: str,
    occurred_at: datetime,
    changes: Optional[dict] = None,
) -> PricingAuditEntry:
    """Create an immutable pricing audit entry."""
    return PricingAuditEntry(
        entry_id=uuid.uuid4(),
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        occurred_at=occurred_at,
        changes=dict(changes or {}),
    )
