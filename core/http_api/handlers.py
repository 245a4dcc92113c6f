"""
Innkeep HTTP API - Framework-Agnostic Handlers
================================================
Pure handler functions over contracts and injected dependencies.
Every handler returns a response dict; engine failures become error
bodies here, never framework exceptions.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from core.audit.models import PricingAuditEntry
from core.http_api.contracts import (
    AuditQueryHttpRequest,
    AvailabilityCheckHttpRequest,
    RateGridHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import exception_response, success_response
from core.time.errors import InvalidIntervalError
from engines.hotel_rates.commands import (
    CommitBulkUpdateRequest,
    PreviewBulkUpdateRequest,
    QuoteRateRequest,
)
from engines.hotel_rates.errors import RateEngineError

logger = logging.getLogger("innkeep.http_api")

_HANDLED = (InvalidIntervalError, RateEngineError, ValueError, KeyError)


def _money(value: Decimal) -> str:
    return str(value)


def _day_map(cells: dict[int, Decimal]) -> dict[str, str]:
    return {str(day): _money(amount) for day, amount in sorted(cells.items())}


def _serialize_audit_entry(entry: PricingAuditEntry) -> dict[str, Any]:
    return {
        "entry_id": str(entry.entry_id),
        "entity_type": entry.entity_type,
        "entity_id": entry.entity_id,
        "action": entry.action,
        "actor_id": entry.actor_id,
        "occurred_at": entry.occurred_at.isoformat(),
        "changes": {k: str(v) if isinstance(v, Decimal) else v
                    for k, v in entry.changes.items()},
    }


def post_rate_quote(
    contract: QuoteRateRequest, dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    try:
        breakdown = dependencies.rate_service.quote(contract)
    except _HANDLED as exc:
        return exception_response(exc)
    return success_response(breakdown.rounded().to_dict())


def post_availability_check(
    contract: AvailabilityCheckHttpRequest, dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    service = dependencies.availability_service
    try:
        if contract.is_hall_check:
            result = service.check_hall_availability(
                contract.hall_ids, contract.start, contract.end,
                exclude_event_id=contract.exclude_booking_id,
            )
        else:
            result = service.check_room_availability(
                contract.room_id, contract.check_in, contract.check_out,
                exclude_booking_id=contract.exclude_booking_id,
            )
    except _HANDLED as exc:
        return exception_response(exc)
    return success_response({
        "available": result.ok,
        "reason": result.reason,
        "conflicting_ids": list(result.conflicting_ids),
    })


def get_rate_grid(
    contract: RateGridHttpRequest, dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    try:
        grid = dependencies.rate_service.rate_grid(
            contract.year, contract.month,
            main_channel_id=contract.main_channel_id,
            sub_channel_id=contract.sub_channel_id,
        )
    except _HANDLED as exc:
        return exception_response(exc)
    return success_response({
        "year": contract.year,
        "month": contract.month,
        "rows": {stay_type: _day_map(cells) for stay_type, cells in grid.items()},
    })


def post_bulk_preview(
    contract: PreviewBulkUpdateRequest, dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    try:
        previewed = dependencies.rate_service.preview_bulk_update(contract)
    except _HANDLED as exc:
        return exception_response(exc)
    return success_response({
        "stay_type": contract.stay_type,
        "year": contract.year,
        "month": contract.month,
        "state": dependencies.rate_service.bulk_state.value,
        "preview": _day_map(previewed),
    })


def post_bulk_commit(
    contract: CommitBulkUpdateRequest, dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    try:
        result = dependencies.rate_service.commit_bulk_update(contract)
    except _HANDLED as exc:
        logger.info("Bulk commit by %s refused: %s", contract.actor_id, exc)
        return exception_response(exc)
    payload = result["payload"]
    return success_response({
        "stay_type": payload["stay_type"],
        "committed_days": len(payload["cells"]),
        "committed_at": payload["committed_at"].isoformat(),
        "state": dependencies.rate_service.bulk_state.value,
    })


def post_bulk_discard(dependencies: HttpApiDependencies) -> dict[str, Any]:
    dependencies.rate_service.discard_preview()
    return success_response({"state": dependencies.rate_service.bulk_state.value})


def list_audit_entries(
    contract: AuditQueryHttpRequest, dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    entries = dependencies.rate_service.audit_log.entries(
        entity_type=contract.entity_type,
        entity_id=contract.entity_id,
        actor_id=contract.actor_id,
    )
    return success_response({
        "entries": [_serialize_audit_entry(e) for e in entries[: contract.limit]],
        "count": len(entries),
    })
