"""
Innkeep Django Adapter Views
==============================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
from core.http_api.contracts import (
    AuditQueryHttpRequest,
    AvailabilityCheckHttpRequest,
    RateGridHttpRequest,
)
from core.http_api.errors import error_response, exception_response, http_status_for
from core.http_api.handlers import (
    get_rate_grid,
    list_audit_entries,
    post_availability_check,
    post_bulk_commit,
    post_bulk_discard,
    post_bulk_preview,
    post_rate_quote,
)
from core.time.errors import InvalidIntervalError
from core.time.temporal import parse_iso_date
from engines.hotel_rates.commands import (
    CommitBulkUpdateRequest,
    PreviewBulkUpdateRequest,
    QuoteRateRequest,
)


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _respond(payload: dict[str, Any]) -> JsonResponse:
    return JsonResponse(payload, status=http_status_for(payload))


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"), parse_float=Decimal)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _parse_datetime(value: Any, field_name: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"{field_name} must be an ISO datetime.") from exc
    if parsed.tzinfo is None:
        raise ValueError(f"{field_name} must include a UTC offset.")
    return parsed


def _parse_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer.") from exc


def _optional(body: dict[str, Any], key: str):
    value = body.get(key)
    return None if value in (None, "") else value


def _dispatch(handler, contract_factory, source: dict[str, Any]) -> JsonResponse:
    try:
        contract = contract_factory(source)
    except InvalidIntervalError as exc:
        return _respond(exception_response(exc))
    except (ValueError, KeyError) as exc:
        return _respond(exception_response(exc))
    return _respond(handler(contract, build_dependencies()))


def _dispatch_write(handler, contract_factory, request: HttpRequest) -> JsonResponse:
    try:
        body = _parse_json_body(request)
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _dispatch(handler, contract_factory, body)


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _quote_contract_factory(body):
    return QuoteRateRequest(
        room_id=body["room_id"],
        check_in=parse_iso_date(body["check_in"]),
        check_out=parse_iso_date(body["check_out"]),
        meal_plan_code=_optional(body, "meal_plan_code"),
        main_channel_id=_optional(body, "main_channel_id"),
        sub_channel_id=_optional(body, "sub_channel_id"),
        manual_override_type=_optional(body, "manual_override_type"),
        manual_override_value=_optional(body, "manual_override_value"),
        display_currency=_optional(body, "display_currency"),
        tax_percent=_optional(body, "tax_percent"),
    )


def _availability_contract_factory(body):
    hall_ids = body.get("hall_ids") or ()
    if hall_ids:
        return AvailabilityCheckHttpRequest(
            hall_ids=tuple(hall_ids),
            start=_parse_datetime(body["start"], "start"),
            end=_parse_datetime(body["end"], "end"),
            exclude_booking_id=_optional(body, "exclude_booking_id"),
        )
    return AvailabilityCheckHttpRequest(
        room_id=body["room_id"],
        check_in=parse_iso_date(body["check_in"]),
        check_out=parse_iso_date(body["check_out"]),
        exclude_booking_id=_optional(body, "exclude_booking_id"),
    )


def _grid_contract_factory(params):
    return RateGridHttpRequest(
        year=_parse_int(params["year"], "year"),
        month=_parse_int(params["month"], "month"),
        main_channel_id=_optional(params, "main_channel_id"),
        sub_channel_id=_optional(params, "sub_channel_id"),
    )


def _preview_contract_factory(body):
    return PreviewBulkUpdateRequest(
        year=_parse_int(body["year"], "year"),
        month=_parse_int(body["month"], "month"),
        stay_type=body["stay_type"],
        adjustment_type=body["adjustment_type"],
        value=body["value"],
        main_channel_id=_optional(body, "main_channel_id"),
        sub_channel_id=_optional(body, "sub_channel_id"),
    )


def _commit_contract_factory(body):
    previewed = body["previewed"]
    if not isinstance(previewed, dict):
        raise ValueError("previewed must be an object of day -> amount.")
    return CommitBulkUpdateRequest(previewed=previewed, actor_id=body["actor_id"])


def _audit_contract_factory(params):
    return AuditQueryHttpRequest(
        entity_type=_optional(params, "entity_type"),
        entity_id=_optional(params, "entity_id"),
        actor_id=_optional(params, "actor_id"),
        limit=_parse_int(params.get("limit", 100), "limit"),
    )


@csrf_exempt
def rate_quote_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(post_rate_quote, _quote_contract_factory, request)


@csrf_exempt
def availability_check_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(post_availability_check, _availability_contract_factory, request)


@csrf_exempt
def rate_grid_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(get_rate_grid, _grid_contract_factory, request.GET.dict())


@csrf_exempt
def bulk_preview_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(post_bulk_preview, _preview_contract_factory, request)


@csrf_exempt
def bulk_commit_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(post_bulk_commit, _commit_contract_factory, request)


@csrf_exempt
def bulk_discard_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _respond(post_bulk_discard(build_dependencies()))


@csrf_exempt
def audit_list_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(list_audit_entries, _audit_contract_factory, request.GET.dict())
