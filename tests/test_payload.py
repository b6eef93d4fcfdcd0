from __future__ import annotations

import json
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from regimen_compliance import Client, CompletionEvent, Item, Regimen, RegimenKind, compute_week_compliance
from regimen_compliance.models import DayResult, DayStatus
from regimen_compliance.payload import (
    INTRODUCED_CODE,
    NO_REGIMEN_ASSIGNED_CODE,
    NOT_SIGNED_UP_YET_CODE,
    REST_CODE,
    encode_day,
    week_payload,
)

DENVER = ZoneInfo("America/Denver")


def _week(now: datetime):
    plan = Regimen(
        id="plan-1",
        kind=RegimenKind.MEAL,
        created_at=datetime(2026, 2, 3, 10, 0, tzinfo=DENVER),
        activated_at=datetime(2026, 2, 3, 10, 0, tzinfo=DENVER),
        is_active=True,
        items=(
            Item(id="b", name="Breakfast", scheduled_time=time(8, 0)),
            Item(id="l", name="Lunch", scheduled_time=time(12, 0)),
            Item(id="d", name="Dinner", scheduled_time=time(18, 0)),
        ),
    )
    return compute_week_compliance(
        client=Client(id="c1", signup_date=date(2026, 2, 3)),
        kind="meal",
        regimens=[plan],
        completions=[CompletionEvent(item_id="b", completed_at=datetime(2026, 2, 4, 8, 5, tzinfo=DENVER))],
        week_start="2026-02-02",
        now=now,
        timezone_name="America/Denver",
    )


def test_sentinel_codes_are_distinct_and_negative() -> None:
    codes = [NOT_SIGNED_UP_YET_CODE, NO_REGIMEN_ASSIGNED_CODE, INTRODUCED_CODE, REST_CODE]
    assert len(set(codes)) == 4
    assert all(code < 0 for code in codes)


def test_encode_day() -> None:
    assert encode_day(DayResult.of_ratio(1, 4)) == 0.25
    assert encode_day(DayResult(DayStatus.PENDING)) == 0
    assert encode_day(DayResult(DayStatus.REST)) == REST_CODE


def test_week_payload_shape() -> None:
    payload = week_payload(_week(datetime(2026, 2, 10, 12, 0, tzinfo=DENVER)))

    assert payload["kind"] == "meal"
    assert payload["weekStart"] == "2026-02-02"
    assert payload["dayKeys"] == [f"2026-02-0{n}" for n in range(2, 9)]
    assert payload["complianceData"][:3] == [NOT_SIGNED_UP_YET_CODE, INTRODUCED_CODE, 1 / 3]
    assert payload["dayStates"][:3] == ["not_signed_up_yet", "introduced", "ratio"]
    assert payload["introducedUnitsByDay"] == {
        "2026-02-03": ["breakfast@08:00", "dinner@18:00", "lunch@12:00"]
    }
    json.dumps(payload)


def test_pending_is_reported_out_of_band() -> None:
    payload = week_payload(_week(datetime(2026, 2, 5, 7, 0, tzinfo=DENVER)))

    assert payload["complianceData"][3:] == [0, 0, 0, 0]
    assert payload["dayStates"][3:] == ["pending"] * 4


def test_rounding_only_applies_to_ratios() -> None:
    payload = week_payload(_week(datetime(2026, 2, 10, 12, 0, tzinfo=DENVER)), precision=2)
    assert payload["complianceData"][:3] == [NOT_SIGNED_UP_YET_CODE, INTRODUCED_CODE, 0.33]
