"""
Innkeep Hotel Rates — Service
===============================
Thin orchestration around the pure rate composition engine: looks up
rooms, drives the bulk preview/commit workflow, writes overrides and
the audit trail. All pricing math lives in composition.py.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Optional

from core.audit import InMemoryAuditLog, create_audit_entry
from core.config.rules import ConfigStore, PricingSettings
from core.time.clock import Clock, SystemClock
from engines.hotel_rates.bulk import (
    BulkRateWorkflow, BulkState, MonthGrid, rate_grid, stay_type_month, stay_types,
)
from engines.hotel_rates.commands import (
    ClearRateOverrideRequest, CommitBulkUpdateRequest, PreviewBulkUpdateRequest,
    QuoteRateRequest, SetRateOverrideRequest,
)
from engines.hotel_rates.composition import RateBreakdown, RateCompositionEngine
from engines.hotel_rates.errors import UnknownStayTypeError
from engines.hotel_rates.events import COMMAND_TO_EVENT_TYPE, PAYLOAD_BUILDERS
from engines.hotel_rates.overrides import RateOverrideKey, RateOverrideStore
from engines.rate_policy.models import AdjustmentType
from engines.rate_policy.services import RatePolicyProjectionStore

logger = logging.getLogger("innkeep.hotel_rates")


class HotelRateService:
    """
    Hotel rates engine service.
    Quotes stays, builds month grids, stages and commits bulk rate
    updates, and pins single nightly rates.
    """

    def __init__(
        self, *,
        policy_store: RatePolicyProjectionStore,
        config_store: ConfigStore,
        settings: PricingSettings,
        override_store: Optional[RateOverrideStore] = None,
        audit_log: Optional[InMemoryAuditLog] = None,
        clock: Optional[Clock] = None,
        persist_event: Optional[Callable[[dict], None]] = None,
    ):
        self._policy        = policy_store
        self._settings      = settings
        self._overrides     = override_store if override_store is not None else RateOverrideStore()
        self._audit_log     = audit_log if audit_log is not None else InMemoryAuditLog(
            limit=settings.audit_log_limit)
        self._clock         = clock or SystemClock()
        self._persist_event = persist_event
        self._workflow      = BulkRateWorkflow()
        self._engine        = RateCompositionEngine(
            meal_plans=policy_store,
            seasons=policy_store,
            channels=policy_store,
            config_store=config_store,
            settings=settings,
            overrides=self._overrides,
        )

    # ── reads ─────────────────────────────────────────────────

    @property
    def engine(self) -> RateCompositionEngine:
        return self._engine

    @property
    def audit_log(self) -> InMemoryAuditLog:
        return self._audit_log

    @property
    def bulk_state(self) -> BulkState:
        return self._workflow.state

    def quote(self, request: QuoteRateRequest) -> RateBreakdown:
        room = self._policy.get_room(request.room_id)
        if room is None:
            raise ValueError(f"room '{request.room_id}' not found.")
        return self._engine.compute_rate(
            room,
            request.check_in,
            request.check_out,
            meal_plan_code=request.meal_plan_code,
            main_channel_id=request.main_channel_id,
            sub_channel_id=request.sub_channel_id,
            manual_override=request.manual_override(),
            display_currency=request.display_currency,
            tax_percent=request.tax_percent,
        )

    def reprice_meal_plan(self, breakdown: RateBreakdown, meal_plan_code: str) -> RateBreakdown:
        room = self._policy.get_room(breakdown.room_id)
        if room is None:
            raise ValueError(f"room '{breakdown.room_id}' not found.")
        repriced = self._engine.reprice_meal_plan(breakdown, room, meal_plan_code)
        logger.info("Repriced %s %s..%s from %s to %s: %s -> %s",
                    room.room_id, breakdown.check_in, breakdown.check_out,
                    breakdown.meal_plan_code, repriced.meal_plan_code,
                    breakdown.total_amount, repriced.total_amount)
        return repriced

    def rate_grid(
        self, year: int, month: int,
        main_channel_id: Optional[str] = None, sub_channel_id: Optional[str] = None,
    ) -> MonthGrid:
        return rate_grid(
            self._engine, self._policy, year, month,
            default_meal_plan_code=self._settings.default_meal_plan_code,
            main_channel_id=main_channel_id, sub_channel_id=sub_channel_id,
        )

    # ── bulk workflow ─────────────────────────────────────────

    def preview_bulk_update(self, request: PreviewBulkUpdateRequest) -> Dict[int, Decimal]:
        known = stay_types(self._policy, self._settings.default_meal_plan_code)
        if request.stay_type not in known:
            raise UnknownStayTypeError(request.stay_type)
        room, code = known[request.stay_type]
        current = stay_type_month(
            self._engine, room, code, request.year, request.month,
            request.main_channel_id, request.sub_channel_id,
        )
        return self._workflow.preview(
            {request.stay_type: current}, request.year, request.month,
            request.stay_type, AdjustmentType(request.adjustment_type), request.value,
        )

    def commit_bulk_update(self, request: CommitBulkUpdateRequest) -> dict:
        staged = self._workflow.prepare_commit(request.previewed)
        command = request.to_command(staged, issued_at=self._clock.now_utc())
        result = self._execute_command(command)
        self._workflow.discard()
        payload = result["payload"]

        self._audit_log.append(create_audit_entry(
            entity_type="BULK_RATE_UPDATE",
            entity_id=staged.stay_type,
            action="COMMIT",
            actor_id=request.actor_id,
            occurred_at=payload["committed_at"],
            changes={
                "stay_type": staged.stay_type,
                "adjustment_type": staged.adjustment_type.value,
                "adjustment_value": str(staged.value),
                "year": staged.year,
                "month": staged.month,
                "days": len(payload["cells"]),
            },
        ))
        logger.info("Bulk rate update committed by %s: %s %s %s for %04d-%02d (%d days)",
                    request.actor_id, staged.stay_type, staged.adjustment_type.value,
                    staged.value, staged.year, staged.month, len(payload["cells"]))
        return result

    def discard_preview(self) -> None:
        if self._workflow.state is BulkState.PREVIEWING:
            logger.debug("Discarded staged bulk update for %s", self._workflow.staged.stay_type)
        self._workflow.discard()

    # ── single cells ──────────────────────────────────────────

    def set_rate_override(self, request: SetRateOverrideRequest) -> dict:
        self._require_stay_type(request.stay_type)
        result = self._execute_command(request.to_command(issued_at=self._clock.now_utc()))
        self._audit_cell(result["payload"], "SET", request.actor_id,
                         {"amount": str(request.amount)})
        return result

    def clear_rate_override(self, request: ClearRateOverrideRequest) -> dict:
        result = self._execute_command(request.to_command(issued_at=self._clock.now_utc()))
        self._audit_cell(result["payload"], "CLEAR", request.actor_id, {})
        return result

    def get_rate_override(self, stay_type: str, stay_date: date) -> Optional[Decimal]:
        return self._overrides.get_override(RateOverrideKey(stay_type, stay_date))

    # ── internals ─────────────────────────────────────────────

    def _require_stay_type(self, stay_type: str) -> None:
        if stay_type not in stay_types(self._policy, self._settings.default_meal_plan_code):
            raise UnknownStayTypeError(stay_type)

    def _audit_cell(self, payload: dict, action: str, actor_id: str, extra: dict) -> None:
        occurred_at = payload.get("set_at") or payload.get("cleared_at")
        self._audit_log.append(create_audit_entry(
            entity_type="RATE_OVERRIDE",
            entity_id=f"{payload['stay_type']}@{payload['stay_date'].isoformat()}",
            action=action,
            actor_id=actor_id,
            occurred_at=occurred_at,
            changes={"stay_type": payload["stay_type"],
                     "stay_date": payload["stay_date"].isoformat(), **extra},
        ))

    def _execute_command(self, command) -> dict:
        event_type = COMMAND_TO_EVENT_TYPE.get(command.command_type)
        if event_type is None:
            raise ValueError(f"Unknown command: {command.command_type}")

        builder = PAYLOAD_BUILDERS.get(event_type)
        if builder is None:
            raise ValueError(f"No payload builder for: {event_type}")

        payload = builder(command)
        self._overrides.apply(event_type, payload)
        if self._persist_event is not None:
            self._persist_event({
                "event_type":  event_type,
                "payload":     payload,
                "actor_id":    command.actor_id,
                "occurred_at": command.issued_at,
            })
        return {"event_type": event_type, "payload": payload}
