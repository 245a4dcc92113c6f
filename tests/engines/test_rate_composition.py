"""
Innkeep Rate Composition — Test Suite
=======================================
Tests for the pure rate composition engine: step order, rounding at
display only, zero-adjustment fallbacks, overrides, tax and currency.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 5, 20, 9, 0, 0, tzinfo=timezone.utc)
ACTOR = "manager-001"
CHECK_IN = date(2024, 7, 10)
CHECK_OUT = date(2024, 7, 12)


# ══════════════════════════════════════════════════════════════
# TEST HELPERS
# ══════════════════════════════════════════════════════════════

def actor_args():
    return dict(actor_id=ACTOR, issued_at=NOW)


def _policy(*, price="150", bb_type="PERCENTAGE", bb_value="10", season=True):
    from engines.rate_policy.commands import (
        CreateMealPlanRequest, CreateSeasonRequest, RegisterRoomRequest,
    )
    from engines.rate_policy.services import RatePolicyProjectionStore, RatePolicyService
    store = RatePolicyProjectionStore()
    svc = RatePolicyService(projection_store=store)
    svc.seed_default_channels(**actor_args())
    svc.execute(RegisterRoomRequest(
        room_id="room-101", number="101", room_type="Deluxe",
        capacity=2, price=price, **actor_args()))
    svc.execute(CreateMealPlanRequest(
        meal_plan_id="mp-ro", code="RO", name="Room Only",
        markup_type="FLAT", markup_value="0", **actor_args()))
    svc.execute(CreateMealPlanRequest(
        meal_plan_id="mp-bb", code="BB", name="Bed & Breakfast",
        markup_type=bb_type, markup_value=bb_value, **actor_args()))
    if season:
        svc.execute(CreateSeasonRequest(
            season_id="season-summer", name="Summer",
            start_date=date(2024, 6, 1), end_date=date(2024, 8, 31),
            adjustment_type="PERCENTAGE", adjustment_value="0",
            room_type_adjustments={"Deluxe": "8"}, **actor_args()))
    return svc, store


def _engine(store, config=None, overrides=None, **settings):
    from core.config.rules import InMemoryConfigStore, PricingSettings
    from engines.hotel_rates.composition import RateCompositionEngine
    return RateCompositionEngine(
        meal_plans=store, seasons=store, channels=store,
        config_store=config or InMemoryConfigStore(),
        settings=PricingSettings(**settings),
        overrides=overrides,
    )


# ══════════════════════════════════════════════════════════════
# END TO END
# ══════════════════════════════════════════════════════════════

class TestEndToEndQuote:
    def test_documented_scenario(self):
        _, store = _policy()
        engine = _engine(store)
        b = engine.compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "BB",
            main_channel_id="main-ota", sub_channel_id="sub-booking-com")
        assert b.nights == 2
        assert b.base_rate == Decimal("300")
        assert b.meal_plan_markup == Decimal("30")
        assert b.base_rate + b.meal_plan_markup + b.seasonal_adjustment == Decimal("356.4")
        assert b.subtotal == Decimal("409.860")
        assert b.tax_percent == Decimal("10")
        assert b.total_amount == Decimal("450.8460")
        assert b.rounded().total_amount == Decimal("450.85")
        assert b.stay_type == "Deluxe – BB"
        assert b.season_id == "season-summer"
        assert b.channel_percent == Decimal("15")

    def test_no_intermediate_rounding(self):
        _, store = _policy(price="99.995")
        b = _engine(store).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "BB")
        # 199.99 * 1.1 * 1.08
        assert b.subtotal == Decimal("237.588120")
        assert b.rounded().subtotal == Decimal("237.59")

    def test_determinism(self):
        _, store = _policy()
        engine = _engine(store)
        room = store.get_room("room-101")
        first = engine.compute_rate(room, CHECK_IN, CHECK_OUT, "BB", "main-ota", "sub-agoda")
        second = engine.compute_rate(room, CHECK_IN, CHECK_OUT, "BB", "main-ota", "sub-agoda")
        assert first == second

    def test_to_dict_is_json_ready(self):
        _, store = _policy()
        data = _engine(store).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "BB").rounded().to_dict()
        assert data["check_in"] == "2024-07-10"
        assert data["total_amount"] == "392.04"
        assert data["overridden_nights"] == []


# ══════════════════════════════════════════════════════════════
# STEPS
# ══════════════════════════════════════════════════════════════

class TestMealPlanStep:
    @pytest.mark.parametrize("price,flat,percentage", [
        ("100", Decimal("30"), Decimal("30")),
        ("200", Decimal("30"), Decimal("60")),
    ])
    def test_flat_and_percentage_diverge(self, price, flat, percentage):
        three_nights = (date(2024, 10, 1), date(2024, 10, 4))
        _, flat_store = _policy(price=price, bb_type="FLAT", season=False)
        _, pct_store = _policy(price=price, bb_type="PERCENTAGE", season=False)
        flat_b = _engine(flat_store).compute_rate(
            flat_store.get_room("room-101"), *three_nights, "BB")
        pct_b = _engine(pct_store).compute_rate(
            pct_store.get_room("room-101"), *three_nights, "BB")
        assert flat_b.meal_plan_markup == flat
        assert pct_b.meal_plan_markup == percentage

    def test_unknown_code_falls_back_to_default(self):
        _, store = _policy(season=False)
        b = _engine(store).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "ALL-INCLUSIVE")
        assert b.meal_plan_markup == Decimal("0")
        assert b.meal_plan_code == "RO"
        assert b.stay_type == "Deluxe – RO"

    def test_room_default_meal_plan_used(self):
        from engines.rate_policy.commands import UpdateRoomRequest
        svc, store = _policy(season=False)
        svc.execute(UpdateRoomRequest(
            room_id="room-101", updates={"meal_plan_code": "BB"}, **actor_args()))
        b = _engine(store).compute_rate(store.get_room("room-101"), CHECK_IN, CHECK_OUT)
        assert b.meal_plan_code == "BB"
        assert b.meal_plan_markup == Decimal("30")


class TestSeasonStep:
    def test_room_type_bucket(self):
        from engines.rate_policy.commands import CreateSeasonRequest
        svc, store = _policy(season=False)
        svc.execute(CreateSeasonRequest(
            season_id="season-high", name="High",
            start_date=date(2024, 7, 1), end_date=date(2024, 7, 31),
            adjustment_type="PERCENTAGE", adjustment_value="10",
            room_type_adjustments={"Deluxe": "5"}, **actor_args()))
        b = _engine(store).compute_rate(store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO")
        assert b.seasonal_percent == Decimal("15")
        assert b.seasonal_adjustment == Decimal("45")

    def test_amount_season_adds_per_night(self):
        from engines.rate_policy.commands import CreateSeasonRequest
        svc, store = _policy(season=False)
        svc.execute(CreateSeasonRequest(
            season_id="season-festival", name="Festival",
            start_date=date(2024, 7, 1), end_date=date(2024, 7, 31),
            adjustment_type="AMOUNT", adjustment_value="20", **actor_args()))
        b = _engine(store).compute_rate(store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO")
        assert b.seasonal_adjustment == Decimal("40")

    def test_season_resolved_on_check_in(self):
        _, store = _policy()
        b = _engine(store).compute_rate(
            store.get_room("room-101"), date(2024, 8, 31), date(2024, 9, 2), "RO")
        assert b.season_id == "season-summer"
        assert b.seasonal_adjustment == Decimal("24")


class TestChannelStep:
    def test_main_only(self):
        _, store = _policy(season=False)
        b = _engine(store).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO", "main-ota")
        assert b.channel_percent == Decimal("10")
        assert b.subtotal == Decimal("330")

    def test_unknown_channel_is_neutral(self):
        _, store = _policy(season=False)
        b = _engine(store).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO", "main-fax")
        assert b.channel_adjustment == Decimal("0")


class TestOverrides:
    def test_pinned_night_replaces_computed_night(self):
        from engines.hotel_rates.overrides import RateOverrideKey, RateOverrideStore
        _, store = _policy(season=False)
        overrides = RateOverrideStore()
        overrides.set_override(RateOverrideKey("Deluxe – RO", CHECK_IN), Decimal("120"))
        b = _engine(store, overrides=overrides).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO")
        assert b.override_adjustment == Decimal("-30")
        assert b.subtotal == Decimal("270")
        assert b.overridden_nights == (CHECK_IN,)

    def test_override_for_other_stay_type_ignored(self):
        from engines.hotel_rates.overrides import RateOverrideKey, RateOverrideStore
        _, store = _policy(season=False)
        overrides = RateOverrideStore()
        overrides.set_override(RateOverrideKey("Deluxe – BB", CHECK_IN), Decimal("120"))
        b = _engine(store, overrides=overrides).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO")
        assert b.override_adjustment == Decimal("0")

    def test_apply_overrides_false(self):
        from engines.hotel_rates.overrides import RateOverrideKey, RateOverrideStore
        _, store = _policy(season=False)
        overrides = RateOverrideStore()
        overrides.set_override(RateOverrideKey("Deluxe – RO", CHECK_IN), Decimal("120"))
        b = _engine(store, overrides=overrides).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO", apply_overrides=False)
        assert b.subtotal == Decimal("300")

    def test_manual_amount_then_percentage(self):
        from engines.hotel_rates.composition import ManualOverride
        from engines.rate_policy.models import AdjustmentType
        _, store = _policy(season=False)
        engine = _engine(store)
        room = store.get_room("room-101")
        amount = engine.compute_rate(
            room, CHECK_IN, CHECK_OUT, "RO",
            manual_override=ManualOverride(AdjustmentType.AMOUNT, Decimal("-50")))
        percent = engine.compute_rate(
            room, CHECK_IN, CHECK_OUT, "RO",
            manual_override=ManualOverride(AdjustmentType.PERCENTAGE, Decimal("-10")))
        assert amount.subtotal == Decimal("250")
        assert amount.manual_adjustment == Decimal("-50")
        assert percent.subtotal == Decimal("270.0")


class TestTaxAndCurrency:
    def test_configured_room_and_global_tax(self):
        from core.config.rules import InMemoryConfigStore, TaxRate
        _, store = _policy(season=False)
        config = InMemoryConfigStore()
        config.add_tax_rate(TaxRate(
            tax_id="tax-vat", name="VAT", percentage=Decimal("8"),
            scope="ROOM", effective_from=date(2024, 1, 1)))
        config.add_tax_rate(TaxRate(
            tax_id="tax-city", name="City", percentage=Decimal("2"),
            scope="GLOBAL", effective_from=date(2024, 1, 1)))
        b = _engine(store, config=config).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO")
        assert b.tax_percent == Decimal("10")
        assert b.tax == Decimal("30")

    def test_explicit_tax_percent_wins(self):
        _, store = _policy(season=False)
        b = _engine(store).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO", tax_percent=Decimal("0"))
        assert b.total_amount == b.subtotal

    def test_display_currency_is_reported_separately(self):
        from core.config.rules import CurrencyRate, InMemoryConfigStore
        _, store = _policy(season=False)
        config = InMemoryConfigStore()
        config.add_currency(CurrencyRate(
            code="LKR", name="Rupee", symbol="Rs", rate_to_base=Decimal("300")))
        b = _engine(store, config=config).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO", display_currency="LKR")
        assert b.total_amount == Decimal("330")
        assert b.display_total == Decimal("99000.00")
        assert b.display_currency == "LKR"

    def test_base_currency_has_no_display_total(self):
        _, store = _policy(season=False)
        b = _engine(store).compute_rate(
            store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO", display_currency="USD")
        assert b.display_total is None


class TestIntervalRejection:
    @pytest.mark.parametrize("check_in,check_out", [
        (date(2024, 7, 10), date(2024, 7, 10)),
        (date(2024, 7, 12), date(2024, 7, 10)),
    ])
    def test_invalid_interval(self, check_in, check_out):
        from core.time.errors import InvalidIntervalError
        _, store = _policy()
        with pytest.raises(InvalidIntervalError):
            _engine(store).compute_rate(store.get_room("room-101"), check_in, check_out, "BB")

    def test_quote_request_rejects_before_lookup(self):
        from core.time.errors import InvalidIntervalError
        from engines.hotel_rates.commands import QuoteRateRequest
        with pytest.raises(InvalidIntervalError):
            QuoteRateRequest(room_id="room-ghost", check_in=CHECK_OUT, check_out=CHECK_IN)


class TestRepriceMealPlan:
    def test_switch_to_bb_keeps_stay_and_channel(self):
        _, store = _policy(season=False)
        engine = _engine(store)
        room = store.get_room("room-101")
        ro = engine.compute_rate(room, CHECK_IN, CHECK_OUT, "RO", "main-ota")
        bb = engine.reprice_meal_plan(ro, room, "BB")
        assert bb.meal_plan_code == "BB"
        assert bb.main_channel_id == "main-ota"
        assert bb.subtotal == Decimal("363.0")

    def test_other_room_rejected(self):
        from engines.rate_policy.models import Room
        _, store = _policy(season=False)
        engine = _engine(store)
        ro = engine.compute_rate(store.get_room("room-101"), CHECK_IN, CHECK_OUT, "RO")
        other = Room(room_id="room-102", number="102", room_type="Deluxe",
                     capacity=2, price=Decimal("150"))
        with pytest.raises(ValueError, match="room-101"):
            engine.reprice_meal_plan(ro, other, "BB")
