"""
Innkeep Django Adapter — Test Suite
=====================================
End-to-end HTTP checks through the Django test client: routing,
JSON parsing, status codes and the shared in-memory wiring.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone

import pytest

ACTOR = "manager-001"
STAY_TYPE = "Deluxe – RO"


@pytest.fixture(autouse=True)
def fresh_dependencies():
    from adapters.django_api import reset_dependencies
    reset_dependencies()
    yield
    reset_dependencies()


@pytest.fixture
def deps():
    from adapters.django_api import SYSTEM_ACTOR_ID, build_dependencies
    from engines.rate_policy.commands import RegisterRoomRequest

    dependencies = build_dependencies()
    dependencies.policy_service.execute(RegisterRoomRequest(
        room_id="room-101", number="101", room_type="Deluxe", capacity=2, price="150",
        actor_id=SYSTEM_ACTOR_ID, issued_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
    ))
    return dependencies


def _post(client, url, body):
    return client.post(url, data=json.dumps(body), content_type="application/json")


class TestWiring:
    def test_singleton_until_reset(self):
        from adapters.django_api import build_dependencies, reset_dependencies
        first = build_dependencies()
        assert build_dependencies() is first
        reset_dependencies()
        assert build_dependencies() is not first

    def test_pricing_settings_come_from_django_settings(self, settings):
        from decimal import Decimal
        from adapters.django_api import load_pricing_settings
        settings.INNKEEP_PRICING = {"DEFAULT_TAX_PERCENT": "12.5", "AUDIT_LOG_LIMIT": 50}
        loaded = load_pricing_settings()
        assert loaded.default_tax_percent == Decimal("12.5")
        assert loaded.audit_log_limit == 50

    def test_non_usd_base_currency_warns(self, settings, caplog):
        import logging
        from adapters.django_api import build_dependencies
        settings.INNKEEP_PRICING = {"BASE_CURRENCY": "EUR"}
        with caplog.at_level(logging.WARNING, logger="innkeep.config"):
            build_dependencies()
        assert "Base currency is EUR; no display currencies loaded" in caplog.text


class TestRateQuoteView:
    def test_quote(self, client, deps):
        response = _post(client, "/v1/rates/quote", {
            "room_id": "room-101", "check_in": "2026-09-10", "check_out": "2026-09-12",
            "display_currency": "EUR",
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subtotal"] == "300.00"
        assert data["total_amount"] == "330.00"
        assert data["display_total"] == "303.60"

    def test_decimal_json_numbers(self, client, deps):
        response = _post(client, "/v1/rates/quote", {
            "room_id": "room-101", "check_in": "2026-09-10", "check_out": "2026-09-11",
            "tax_percent": 12.5,
        })
        assert response.json()["data"]["tax"] == "18.75"

    def test_invalid_interval(self, client, deps):
        response = _post(client, "/v1/rates/quote", {
            "room_id": "room-101", "check_in": "2026-09-12", "check_out": "2026-09-12",
        })
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INTERVAL"

    def test_missing_field(self, client, deps):
        response = _post(client, "/v1/rates/quote", {"room_id": "room-101"})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Missing field: check_in."

    def test_malformed_json(self, client, deps):
        response = client.post("/v1/rates/quote", data="{not json",
                               content_type="application/json")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_method_not_allowed(self, client, deps):
        response = client.get("/v1/rates/quote")
        assert response.status_code == 405
        assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


class TestAvailabilityView:
    def test_room_conflict(self, client, deps):
        from engines.availability.commands import CreateReservationRequest
        deps.availability_service.execute(CreateReservationRequest(
            reservation_id="res-1", room_id="room-101",
            check_in=date(2026, 3, 1), check_out=date(2026, 3, 4),
            actor_id=ACTOR, issued_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        ))
        blocked = _post(client, "/v1/availability/check", {
            "room_id": "room-101", "check_in": "2026-03-03", "check_out": "2026-03-05",
        })
        assert blocked.status_code == 200
        assert blocked.json()["data"]["available"] is False
        assert blocked.json()["data"]["conflicting_ids"] == ["res-1"]

        turnover = _post(client, "/v1/availability/check", {
            "room_id": "room-101", "check_in": "2026-03-04", "check_out": "2026-03-06",
        })
        assert turnover.json()["data"]["available"] is True

    def test_halls_need_offsets(self, client, deps):
        ok = _post(client, "/v1/availability/check", {
            "hall_ids": ["hall-a"],
            "start": "2026-03-01T10:00:00+00:00", "end": "2026-03-01T12:00:00+00:00",
        })
        assert ok.json()["data"]["available"] is True

        naive = _post(client, "/v1/availability/check", {
            "hall_ids": ["hall-a"],
            "start": "2026-03-01T10:00:00", "end": "2026-03-01T12:00:00",
        })
        assert naive.status_code == 400


class TestRateGridView:
    def test_grid(self, client, deps):
        response = client.get("/v1/rates/grid", {"year": "2026", "month": "2"})
        assert response.status_code == 200
        rows = response.json()["data"]["rows"]
        assert rows[STAY_TYPE]["1"] == "150.00"
        assert len(rows[STAY_TYPE]) == 28

    def test_channel_query_params(self, client, deps):
        response = client.get("/v1/rates/grid",
                              {"year": "2026", "month": "2", "main_channel_id": "main-ota"})
        assert response.json()["data"]["rows"][STAY_TYPE]["1"] == "165.00"

    def test_bad_month(self, client, deps):
        response = client.get("/v1/rates/grid", {"year": "2026", "month": "february"})
        assert response.status_code == 400


class TestBulkViews:
    def _preview(self, client, stay_type=STAY_TYPE):
        return _post(client, "/v1/rates/bulk/preview", {
            "year": 2026, "month": 2, "stay_type": stay_type,
            "adjustment_type": "AMOUNT", "value": "-20",
        })

    def test_preview_commit_then_quote(self, client, deps):
        preview = self._preview(client)
        assert preview.status_code == 200
        assert preview.json()["data"]["state"] == "PREVIEWING"
        cells = preview.json()["data"]["preview"]
        assert cells["14"] == "130.00"

        commit = _post(client, "/v1/rates/bulk/commit", {"previewed": cells, "actor_id": ACTOR})
        assert commit.status_code == 200
        assert commit.json()["data"]["committed_days"] == 28
        assert commit.json()["data"]["state"] == "IDLE"

        quote = _post(client, "/v1/rates/quote", {
            "room_id": "room-101", "check_in": "2026-02-14", "check_out": "2026-02-15",
        })
        assert quote.json()["data"]["subtotal"] == "130.00"

        audit = client.get("/v1/rates/audit", {"entity_type": "BULK_RATE_UPDATE"})
        entries = audit.json()["data"]["entries"]
        assert [e["action"] for e in entries] == ["COMMIT"]
        assert entries[0]["actor_id"] == ACTOR

    def test_commit_without_preview_conflicts(self, client, deps):
        response = _post(client, "/v1/rates/bulk/commit",
                         {"previewed": {"1": "100"}, "actor_id": ACTOR})
        assert response.status_code == 409
        assert response.json()["error"]["details"]["state"] == "IDLE"

    def test_commit_previewed_must_be_object(self, client, deps):
        self._preview(client)
        response = _post(client, "/v1/rates/bulk/commit",
                         {"previewed": ["130.00"], "actor_id": ACTOR})
        assert response.status_code == 400

    def test_unknown_stay_type(self, client, deps):
        response = self._preview(client, stay_type="Suite – FB")
        assert response.status_code == 404

    def test_discard(self, client, deps):
        self._preview(client)
        response = client.post("/v1/rates/bulk/discard")
        assert response.json()["data"]["state"] == "IDLE"
        assert deps.rate_service.bulk_state.value == "IDLE"


class TestAuditView:
    def test_limit_and_count(self, client, deps):
        response = client.get("/v1/rates/audit", {"limit": "2"})
        data = response.json()["data"]
        assert len(data["entries"]) == 2
        assert data["count"] > 2

    def test_rejects_bad_limit(self, client, deps):
        assert client.get("/v1/rates/audit", {"limit": "0"}).status_code == 400
