"""
Innkeep Core Audit — Public API
=================================
Immutable pricing audit entries and the bounded in-memory log.
"""

from core.audit.functions import create_audit_entry
from core.audit.models import AUDIT_ENTITY_TYPES, PricingAuditEntry
from core.audit.store import InMemoryAuditLog

__all__ = [
    "AUDIT_ENTITY_TYPES",
    "PricingAuditEntry",
    "InMemoryAuditLog",
    "create_audit_entry",
]
