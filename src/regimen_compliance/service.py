"""Request-layer entry points: load a snapshot, run the engine, encode the week."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

import psycopg

from .config import Config
from .engine import WeekCompliance, compute_week_compliance, unassigned_week
from .loader import load_snapshot
from .models import RegimenKind
from .payload import week_payload
from .summary import ClientSummary, summarize_client

logger = logging.getLogger(__name__)


async def fetch_week_compliance(
    conn: psycopg.AsyncConnection[Any],
    *,
    client_id: str,
    kind: RegimenKind | str,
    week_start: date | str,
    timezone_name: str,
    now: datetime | None = None,
) -> WeekCompliance:
    """Compute one client's week; an unknown client yields seven NoRegimenAssigned days."""
    captured_now = now if now is not None else datetime.now(timezone.utc)
    snapshot = await load_snapshot(
        conn,
        kind=kind,
        client_id=client_id,
        week_start=week_start,
        timezone_name=timezone_name,
    )
    if snapshot is None:
        return unassigned_week(kind, week_start, timezone_name)

    week = compute_week_compliance(
        client=snapshot.client,
        kind=snapshot.kind,
        regimens=snapshot.regimens,
        completions=snapshot.completions,
        week_start=week_start,
        now=captured_now,
        timezone_name=timezone_name,
    )
    logger.info(
        "Served %s compliance for client %s",
        snapshot.kind.value,
        client_id,
        extra={
            "compliance_client_id": client_id,
            "compliance_regimen_kind": snapshot.kind.value,
            "compliance_week_start": week.week_start.isoformat(),
            "compliance_regimens": len(snapshot.regimens),
            "compliance_events": len(snapshot.completions),
            "compliance_unmatched_events": week.unmatched_events,
        },
    )
    return week


async def fetch_week_payload(
    conn: psycopg.AsyncConnection[Any],
    *,
    client_id: str,
    kind: RegimenKind | str,
    week_start: date | str,
    timezone_name: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    week = await fetch_week_compliance(
        conn,
        client_id=client_id,
        kind=kind,
        week_start=week_start,
        timezone_name=timezone_name,
        now=now,
    )
    return week_payload(week)


async def fetch_client_summary(
    conn: psycopg.AsyncConnection[Any],
    *,
    client_id: str,
    week_start: date | str,
    timezone_name: str,
    now: datetime | None = None,
) -> ClientSummary:
    """Roll up every regimen kind for one client against a single captured "now"."""
    captured_now = now if now is not None else datetime.now(timezone.utc)
    weeks = [
        await fetch_week_compliance(
            conn,
            client_id=client_id,
            kind=kind,
            week_start=week_start,
            timezone_name=timezone_name,
            now=captured_now,
        )
        for kind in RegimenKind
    ]
    return summarize_client(client_id, weeks)


async def run_week(
    config: Config,
    *,
    client_id: str,
    kind: RegimenKind | str,
    week_start: date | str,
) -> dict[str, Any]:
    """Open a connection from config and return the encoded week."""
    async with await psycopg.AsyncConnection.connect(config.require_database_url()) as conn:
        return await fetch_week_payload(
            conn,
            client_id=client_id,
            kind=kind,
            week_start=week_start,
            timezone_name=config.timezone,
        )
