"""
Innkeep Hotel Rate Service — Test Suite
=========================================
Tests for: month rate grid, bulk preview/commit workflow, single
cell overrides, override precedence and the pricing audit trail.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 5, 20, 9, 0, 0, tzinfo=timezone.utc)
ACTOR = "manager-001"
DELUXE_BB = "Deluxe – BB"


# ══════════════════════════════════════════════════════════════
# TEST HELPERS
# ══════════════════════════════════════════════════════════════

def actor_args():
    return dict(actor_id=ACTOR, issued_at=NOW)


def _setup(meal_plans=True):
    from core.audit import InMemoryAuditLog
    from core.config.rules import InMemoryConfigStore, PricingSettings
    from core.time.clock import FixedClock
    from engines.hotel_rates.services import HotelRateService
    from engines.rate_policy.commands import (
        CreateMealPlanRequest, CreateSeasonRequest, RegisterRoomRequest,
    )
    from engines.rate_policy.services import RatePolicyProjectionStore, RatePolicyService

    store = RatePolicyProjectionStore()
    policy = RatePolicyService(projection_store=store)
    policy.seed_default_channels(**actor_args())
    for room_id, price in (("room-101", "150"), ("room-102", "180")):
        policy.execute(RegisterRoomRequest(
            room_id=room_id, number=room_id[-3:], room_type="Deluxe",
            capacity=2, price=price, **actor_args()))
    if meal_plans:
        policy.execute(CreateMealPlanRequest(
            meal_plan_id="mp-ro", code="RO", name="Room Only",
            markup_type="FLAT", markup_value="0", **actor_args()))
        policy.execute(CreateMealPlanRequest(
            meal_plan_id="mp-bb", code="BB", name="Bed & Breakfast",
            markup_type="PERCENTAGE", markup_value="10", **actor_args()))
    policy.execute(CreateSeasonRequest(
        season_id="season-summer", name="Summer",
        start_date=date(2024, 6, 1), end_date=date(2024, 8, 31),
        adjustment_type="PERCENTAGE", adjustment_value="0",
        room_type_adjustments={"Deluxe": "8"}, **actor_args()))

    persisted = []
    audit = InMemoryAuditLog()
    svc = HotelRateService(
        policy_store=store,
        config_store=InMemoryConfigStore(),
        settings=PricingSettings(),
        audit_log=audit,
        clock=FixedClock(NOW),
        persist_event=persisted.append,
    )
    return svc, policy, persisted, audit


def _preview(svc, value="10", adjustment_type="PERCENTAGE", stay_type=DELUXE_BB,
             year=2024, month=6, **kwargs):
    from engines.hotel_rates.commands import PreviewBulkUpdateRequest
    return svc.preview_bulk_update(PreviewBulkUpdateRequest(
        year=year, month=month, stay_type=stay_type,
        adjustment_type=adjustment_type, value=value, **kwargs))


def _commit(svc, previewed):
    from engines.hotel_rates.commands import CommitBulkUpdateRequest
    return svc.commit_bulk_update(CommitBulkUpdateRequest(previewed=previewed, actor_id=ACTOR))


def _quote(svc, check_in, check_out, code="BB", **kwargs):
    from engines.hotel_rates.commands import QuoteRateRequest
    return svc.quote(QuoteRateRequest(
        room_id="room-101", check_in=check_in, check_out=check_out,
        meal_plan_code=code, **kwargs))


# ══════════════════════════════════════════════════════════════
# GRID
# ══════════════════════════════════════════════════════════════

class TestRateGrid:
    def test_rows_per_stay_type(self):
        svc, _, _, _ = _setup()
        grid = svc.rate_grid(2024, 6)
        assert set(grid) == {"Deluxe – RO", DELUXE_BB}
        assert len(grid[DELUXE_BB]) == 30
        # cheapest Deluxe room (150) + 10% breakfast, +8% summer
        assert grid[DELUXE_BB][15] == Decimal("178.20")
        assert grid["Deluxe – RO"][1] == Decimal("162.00")

    def test_cells_follow_seasons(self):
        svc, _, _, _ = _setup()
        grid = svc.rate_grid(2024, 5)
        assert grid["Deluxe – RO"][31] == Decimal("150.00")

    def test_channel_context(self):
        svc, _, _, _ = _setup()
        grid = svc.rate_grid(2024, 6, main_channel_id="main-ota")
        assert grid["Deluxe – RO"][1] == Decimal("178.20")

    def test_default_meal_plan_without_plans(self):
        svc, _, _, _ = _setup(meal_plans=False)
        assert list(svc.rate_grid(2024, 6)) == ["Deluxe – RO"]


# ══════════════════════════════════════════════════════════════
# BULK WORKFLOW
# ══════════════════════════════════════════════════════════════

class TestBulkPreview:
    def test_percentage_preview(self):
        from engines.hotel_rates.bulk import BulkState
        svc, _, persisted, _ = _setup()
        previewed = _preview(svc)
        assert previewed[15] == Decimal("196.02")
        assert len(previewed) == 30
        assert svc.bulk_state is BulkState.PREVIEWING
        assert persisted == []

    def test_amount_preview(self):
        svc, _, _, _ = _setup()
        previewed = _preview(svc, value="-8.20", adjustment_type="AMOUNT")
        assert previewed[1] == Decimal("170.00")

    def test_preview_does_not_write_overrides(self):
        svc, _, _, _ = _setup()
        _preview(svc)
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 15)) is None

    def test_unknown_stay_type(self):
        from engines.hotel_rates.errors import UnknownStayTypeError
        svc, _, _, _ = _setup()
        with pytest.raises(UnknownStayTypeError, match="Penthouse – FB"):
            _preview(svc, stay_type="Penthouse – FB")

    def test_restage_replaces_previous_preview(self):
        svc, _, _, _ = _setup()
        _preview(svc, value="10")
        second = _preview(svc, value="20", stay_type="Deluxe – RO")
        _commit(svc, second)
        assert svc.get_rate_override("Deluxe – RO", date(2024, 6, 1)) == Decimal("194.40")
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 1)) is None

    def test_discard(self):
        from engines.hotel_rates.bulk import BulkState
        svc, _, _, _ = _setup()
        _preview(svc)
        svc.discard_preview()
        assert svc.bulk_state is BulkState.IDLE

    def test_request_validation(self):
        from engines.hotel_rates.commands import PreviewBulkUpdateRequest
        with pytest.raises(ValueError, match="month"):
            PreviewBulkUpdateRequest(year=2024, month=13, stay_type=DELUXE_BB,
                                     adjustment_type="PERCENTAGE", value="10")
        with pytest.raises(ValueError, match="adjustment_type"):
            PreviewBulkUpdateRequest(year=2024, month=6, stay_type=DELUXE_BB,
                                     adjustment_type="MULTIPLY", value="10")


class TestBulkCommit:
    def test_commit_writes_sparse_overrides(self):
        from engines.hotel_rates.bulk import BulkState
        svc, _, persisted, _ = _setup()
        result = _commit(svc, _preview(svc))
        assert result["event_type"] == "hotel_rates.bulk_update.committed.v1"
        assert svc.bulk_state is BulkState.IDLE
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 15)) == Decimal("196.02")
        assert svc.get_rate_override(DELUXE_BB, date(2024, 7, 15)) is None
        assert svc.get_rate_override("Deluxe – RO", date(2024, 6, 15)) is None
        assert persisted[0]["payload"]["cells"][date(2024, 6, 30)] == Decimal("196.02")
        assert persisted[0]["occurred_at"] == NOW

    def test_commit_edited_cells(self):
        svc, _, _, _ = _setup()
        previewed = _preview(svc)
        previewed[15] = Decimal("210.00")
        _commit(svc, {str(day): str(amount) for day, amount in previewed.items()})
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 15)) == Decimal("210.00")

    def test_commit_while_idle(self):
        from engines.hotel_rates.errors import BulkWorkflowStateError
        svc, _, persisted, _ = _setup()
        with pytest.raises(BulkWorkflowStateError, match="IDLE"):
            _commit(svc, {1: Decimal("100")})
        assert persisted == []

    def test_day_count_mismatch_keeps_preview(self):
        from core.time.errors import InvalidIntervalError
        from engines.hotel_rates.bulk import BulkState
        svc, _, persisted, _ = _setup()
        previewed = _preview(svc)
        del previewed[30]
        with pytest.raises(InvalidIntervalError, match="29 day"):
            _commit(svc, previewed)
        assert svc.bulk_state is BulkState.PREVIEWING
        assert persisted == []

    def test_negative_cell_leaves_preview_and_store_untouched(self):
        from engines.hotel_rates.bulk import BulkState
        from engines.hotel_rates.commands import CommitBulkUpdateRequest
        svc, _, persisted, audit = _setup()
        previewed = _preview(svc)
        edited = dict(previewed)
        edited[20] = Decimal("-1")
        with pytest.raises(ValueError, match=r"previewed\[20\] must be >= 0"):
            svc.commit_bulk_update(CommitBulkUpdateRequest(previewed=edited, actor_id=ACTOR))
        assert svc.bulk_state is BulkState.PREVIEWING
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 1)) is None
        assert persisted == []
        assert audit.entries(entity_type="BULK_RATE_UPDATE") == []

        _commit(svc, previewed)
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 20)) == Decimal("196.02")
        assert len(persisted) == 1

    def test_workflow_checks_every_cell_before_commit(self):
        from engines.hotel_rates.bulk import BulkRateWorkflow, BulkState
        from engines.rate_policy.models import AdjustmentType
        workflow = BulkRateWorkflow()
        grid = {DELUXE_BB: {1: Decimal("100.00"), 2: Decimal("100.00")}}
        workflow.preview(grid, 2024, 2, DELUXE_BB, AdjustmentType.AMOUNT, Decimal("5"))
        cells = {day: Decimal("105.00") for day in range(1, 30)}
        cells[2] = Decimal("-0.01")
        with pytest.raises(ValueError, match=r"day\(s\) \[2\]"):
            workflow.prepare_commit(cells)
        assert workflow.state is BulkState.PREVIEWING

    def test_preview_below_zero_is_not_staged(self):
        from engines.hotel_rates.bulk import BulkState
        svc, _, _, _ = _setup()
        with pytest.raises(ValueError, match="below zero"):
            _preview(svc, value="-1000", adjustment_type="AMOUNT")
        assert svc.bulk_state is BulkState.IDLE

        _preview(svc, value="10")
        with pytest.raises(ValueError, match="below zero"):
            _preview(svc, value="-1000", adjustment_type="AMOUNT")
        assert svc.bulk_state is BulkState.PREVIEWING
        assert svc._workflow.staged.value == Decimal("10")

    def test_store_writes_bulk_cells_all_or_nothing(self):
        from engines.hotel_rates.events import BULK_RATE_COMMITTED_V1
        from engines.hotel_rates.overrides import RateOverrideKey, RateOverrideStore
        store = RateOverrideStore()
        cells = {date(2024, 6, 1): Decimal("120.00"), date(2024, 6, 2): Decimal("-5.00")}
        with pytest.raises(ValueError, match="2024-06-02 must be >= 0"):
            store.apply(BULK_RATE_COMMITTED_V1, {"stay_type": DELUXE_BB, "cells": cells})
        assert len(store) == 0
        assert store.event_count == 0
        assert store.get_override(RateOverrideKey(DELUXE_BB, date(2024, 6, 1))) is None

    def test_commit_request_rejects_garbage(self):
        from engines.hotel_rates.commands import CommitBulkUpdateRequest
        with pytest.raises(ValueError, match="day of month"):
            CommitBulkUpdateRequest(previewed={"first": "100"}, actor_id=ACTOR)
        with pytest.raises(ValueError, match="non-empty"):
            CommitBulkUpdateRequest(previewed={}, actor_id=ACTOR)

    def test_commit_is_audited(self):
        svc, _, _, audit = _setup()
        _commit(svc, _preview(svc))
        entry = audit.entries(entity_type="BULK_RATE_UPDATE")[0]
        assert entry.action == "COMMIT"
        assert entry.actor_id == ACTOR
        assert entry.occurred_at == NOW
        assert entry.changes["days"] == 30
        assert entry.changes["adjustment_value"] == "10"


class TestOverridePrecedence:
    def test_committed_day_wins_after_policy_changes(self):
        from engines.rate_policy.commands import UpdateMainChannelRequest, UpdateSeasonRequest
        svc, policy, _, _ = _setup()
        _commit(svc, _preview(svc))
        assert _quote(svc, date(2024, 6, 15), date(2024, 6, 16)).subtotal == Decimal("196.02")

        policy.execute(UpdateSeasonRequest(
            season_id="season-summer",
            updates={"room_type_adjustments": {"Deluxe": "20"}}, **actor_args()))
        policy.execute(UpdateMainChannelRequest(
            channel_id="main-ota", updates={"adjustment_percentage": "25"}, **actor_args()))
        after = _quote(svc, date(2024, 6, 15), date(2024, 6, 16), main_channel_id="main-ota")
        assert after.subtotal == Decimal("196.02")
        assert after.overridden_nights == (date(2024, 6, 15),)

    def test_multi_night_mixes_pinned_and_computed(self):
        svc, _, _, _ = _setup()
        _commit(svc, _preview(svc))
        b = _quote(svc, date(2024, 6, 30), date(2024, 7, 2))
        # June 30 pinned, July 1 computed at 178.2
        assert b.subtotal == Decimal("374.22")
        assert b.overridden_nights == (date(2024, 6, 30),)

    def test_manual_override_applies_after_pinned_rate(self):
        svc, _, _, _ = _setup()
        _commit(svc, _preview(svc))
        b = _quote(svc, date(2024, 6, 15), date(2024, 6, 16),
                   manual_override_type="AMOUNT", manual_override_value="-6.02")
        assert b.subtotal == Decimal("190.00")


class TestSingleCellOverrides:
    def test_set_and_clear(self):
        from engines.hotel_rates.commands import ClearRateOverrideRequest, SetRateOverrideRequest
        svc, _, persisted, audit = _setup()
        svc.set_rate_override(SetRateOverrideRequest(
            stay_type=DELUXE_BB, stay_date=date(2024, 6, 20), amount="185", actor_id=ACTOR))
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 20)) == Decimal("185")
        svc.clear_rate_override(ClearRateOverrideRequest(
            stay_type=DELUXE_BB, stay_date=date(2024, 6, 20), actor_id=ACTOR))
        assert svc.get_rate_override(DELUXE_BB, date(2024, 6, 20)) is None
        assert [e.action for e in audit.entries(entity_type="RATE_OVERRIDE")] == ["CLEAR", "SET"]
        assert audit.entries()[0].entity_id == "Deluxe – BB@2024-06-20"
        assert len(persisted) == 2

    def test_unknown_stay_type_rejected(self):
        from engines.hotel_rates.commands import SetRateOverrideRequest
        from engines.hotel_rates.errors import UnknownStayTypeError
        svc, _, persisted, _ = _setup()
        with pytest.raises(UnknownStayTypeError):
            svc.set_rate_override(SetRateOverrideRequest(
                stay_type="Suite – BB", stay_date=date(2024, 6, 20),
                amount="185", actor_id=ACTOR))
        assert persisted == []

    def test_negative_amount_rejected(self):
        from engines.hotel_rates.commands import SetRateOverrideRequest
        with pytest.raises(ValueError, match=">= 0"):
            SetRateOverrideRequest(stay_type=DELUXE_BB, stay_date=date(2024, 6, 20),
                                   amount="-1", actor_id=ACTOR)

    def test_months_do_not_collide(self):
        from engines.hotel_rates.commands import SetRateOverrideRequest
        svc, _, _, _ = _setup()
        svc.set_rate_override(SetRateOverrideRequest(
            stay_type=DELUXE_BB, stay_date=date(2024, 6, 15), amount="185", actor_id=ACTOR))
        assert svc.get_rate_override(DELUXE_BB, date(2024, 7, 15)) is None


class TestQuoteService:
    def test_unknown_room(self):
        from engines.hotel_rates.commands import QuoteRateRequest
        svc, _, _, _ = _setup()
        with pytest.raises(ValueError, match="not found"):
            svc.quote(QuoteRateRequest(
                room_id="room-999", check_in=date(2024, 6, 1), check_out=date(2024, 6, 2)))

    def test_reprice_meal_plan(self):
        svc, _, _, _ = _setup()
        ro = _quote(svc, date(2024, 9, 10), date(2024, 9, 12), code="RO")
        bb = svc.reprice_meal_plan(ro, "BB")
        assert ro.subtotal == Decimal("300")
        assert bb.subtotal == Decimal("330")

    def test_manual_override_pair_required(self):
        from engines.hotel_rates.commands import QuoteRateRequest
        with pytest.raises(ValueError, match="go together"):
            QuoteRateRequest(room_id="room-101", check_in=date(2024, 6, 1),
                             check_out=date(2024, 6, 2), manual_override_type="AMOUNT")
