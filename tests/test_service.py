from datetime import date, datetime, time, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from regimen_compliance.config import Config
from regimen_compliance.loader import Snapshot
from regimen_compliance.models import Client, CompletionEvent, DayStatus, Item, Regimen, RegimenKind
from regimen_compliance.service import (
    fetch_client_summary,
    fetch_week_compliance,
    fetch_week_payload,
    run_week,
)

TZ = "America/Denver"
NOW = datetime(2026, 2, 10, 19, 0, tzinfo=timezone.utc)
CLIENT = Client(id="c1", signup_date=date(2026, 1, 1))


def _meal_snapshot() -> Snapshot:
    regimen = Regimen(
        id="plan-1",
        kind=RegimenKind.MEAL,
        created_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
        activated_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
        is_active=True,
        items=(Item(id="b", name="Breakfast", scheduled_time=time(8, 0)),),
    )
    return Snapshot(
        client=CLIENT,
        kind=RegimenKind.MEAL,
        regimens=(regimen,),
        completions=(CompletionEvent(item_id="b", completed_at=datetime(2026, 2, 2, 15, 0, tzinfo=timezone.utc)),),
    )


def _empty_snapshot(kind: RegimenKind) -> Snapshot:
    return Snapshot(client=CLIENT, kind=kind, regimens=(), completions=())


class TestFetchWeek:
    async def test_unknown_client_gets_unassigned_week(self):
        with patch("regimen_compliance.service.load_snapshot", AsyncMock(return_value=None)):
            week = await fetch_week_compliance(
                AsyncMock(), client_id="ghost", kind="meal", week_start="2026-02-02", timezone_name=TZ, now=NOW
            )
        assert week.count(DayStatus.NO_REGIMEN_ASSIGNED) == 7

    async def test_payload_for_known_client(self):
        with patch("regimen_compliance.service.load_snapshot", AsyncMock(return_value=_meal_snapshot())):
            payload = await fetch_week_payload(
                AsyncMock(), client_id="c1", kind="meal", week_start="2026-02-02", timezone_name=TZ, now=NOW
            )
        assert payload["complianceData"] == [1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0]
        assert payload["dayStates"] == ["ratio"] * 7


class TestClientSummary:
    async def test_every_kind_shares_one_now(self):
        snapshots = {
            RegimenKind.MEAL: _meal_snapshot(),
            RegimenKind.SUPPLEMENT: _empty_snapshot(RegimenKind.SUPPLEMENT),
            RegimenKind.WORKOUT: _empty_snapshot(RegimenKind.WORKOUT),
        }

        async def fake_load(conn, *, kind, **kwargs):
            return snapshots[kind]

        with patch("regimen_compliance.service.load_snapshot", side_effect=fake_load):
            summary = await fetch_client_summary(
                AsyncMock(), client_id="c1", week_start="2026-02-02", timezone_name=TZ, now=NOW
            )

        assert summary.as_dict() == {
            "id": "c1",
            "meal_compliance": 14,
            "supplement_compliance": None,
            "workout_compliance": None,
            "overall_compliance": 14,
        }


class TestRunWeek:
    async def test_requires_database_url(self):
        with pytest.raises(RuntimeError, match="DATABASE_URL must be set"):
            await run_week(Config(), client_id="c1", kind="meal", week_start="2026-02-02")

    async def test_connects_and_uses_configured_timezone(self):
        conn = MagicMock()
        conn.__aenter__.return_value = conn
        connect = AsyncMock(return_value=conn)
        fetch = AsyncMock(return_value={"kind": "meal"})
        config = Config(timezone="Europe/Berlin", database_url="postgresql://app@db/coach")

        with patch("regimen_compliance.service.psycopg.AsyncConnection.connect", connect), patch(
            "regimen_compliance.service.fetch_week_payload", fetch
        ):
            result = await run_week(config, client_id="c1", kind="meal", week_start="2026-02-02")

        assert result == {"kind": "meal"}
        connect.assert_awaited_once_with("postgresql://app@db/coach")
        assert fetch.call_args.kwargs["timezone_name"] == "Europe/Berlin"
        assert fetch.call_args.args[0] is conn
