"""
Innkeep Core Audit — In-Memory Audit Log
==========================================
Newest-first, bounded audit log. Entries past the limit are dropped
from the tail; nothing else ever removes an entry.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from core.audit.models import PricingAuditEntry


class InMemoryAuditLog:
    def __init__(self, limit: int = 1000) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1.")
        self._limit = limit
        self._entries: List[PricingAuditEntry] = []

    def append(self, entry: PricingAuditEntry) -> None:
        self._entries = [entry, *self._entries][: self._limit]

    def entries(
        self,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[PricingAuditEntry]:
        result = self._entries
        if entity_type is not None:
            result = [e for e in result if e.entity_type == entity_type]
        if entity_id is not None:
            result = [e for e in result if e.entity_id == entity_id]
        if actor_id is not None:
            result = [e for e in result if e.actor_id == actor_id]
        if since is not None:
            result = [e for e in result if e.occurred_at >= since]
        if until is not None:
            result = [e for e in result if e.occurred_at <= until]
        return list(result)

    def __len__(self) -> int:
        return len(self._entries)
