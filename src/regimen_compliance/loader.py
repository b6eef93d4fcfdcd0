"""Snapshot loader for the reference PostgreSQL schema.

Gathers everything one engine invocation needs (client, regimens with items,
completion events) before the engine runs. Expected tables:

- users(id, created_at)
- meal_plans / workout_plans(id, user_id, created_at, activated_at,
  deactivated_at, is_active, is_template)
- meals(id, meal_plan_id, name, time, sequence_order, option_label, active_from)
  plus foods(meal_id); meals without foods are not prescribed
- workout_days(id, workout_plan_id, day_of_week, is_rest, workout_name,
  active_from); a null day_of_week marks a flexible (client-scheduled) plan
- supplements(id, user_id, name, created_at, active_from)
- meal_completions(meal_id, completed_at), supplement_completions(supplement_id,
  completed_at), workout_completions(workout_day_id, completed_at); a null
  workout_day_id is a "rest chosen" entry
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import psycopg
from psycopg.rows import dict_row

from .models import Client, CompletionEvent, Item, Regimen, RegimenKind
from .timezones import local_date, resolve_zone
from .window import fetch_bounds, resolve_week

logger = logging.getLogger(__name__)

_WEEKDAY_MAP = {
    "mon": 0,
    "monday": 0,
    "tue": 1,
    "tues": 1,
    "tuesday": 1,
    "wed": 2,
    "wednesday": 2,
    "thu": 3,
    "thur": 3,
    "thurs": 3,
    "thursday": 3,
    "fri": 4,
    "friday": 4,
    "sat": 5,
    "saturday": 5,
    "sun": 6,
    "sunday": 6,
}

_PLAN_TABLES = {
    RegimenKind.MEAL: "meal_plans",
    RegimenKind.WORKOUT: "workout_plans",
}

_COMPLETION_QUERIES = {
    RegimenKind.MEAL: """
        SELECT meal_id AS item_id, completed_at
        FROM meal_completions
        WHERE user_id = %s AND completed_at >= %s AND completed_at < %s
        ORDER BY completed_at ASC
    """,
    RegimenKind.SUPPLEMENT: """
        SELECT supplement_id AS item_id, completed_at
        FROM supplement_completions
        WHERE user_id = %s AND completed_at >= %s AND completed_at < %s
        ORDER BY completed_at ASC
    """,
    RegimenKind.WORKOUT: """
        SELECT workout_day_id AS item_id, completed_at
        FROM workout_completions
        WHERE user_id = %s AND completed_at >= %s AND completed_at < %s
        ORDER BY completed_at ASC
    """,
}


@dataclass(frozen=True)
class Snapshot:
    client: Client
    kind: RegimenKind
    regimens: tuple[Regimen, ...]
    completions: tuple[CompletionEvent, ...]


def parse_weekday(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw if 0 <= raw <= 6 else None
    return _WEEKDAY_MAP.get(str(raw).strip().lower())


async def load_client(
    conn: psycopg.AsyncConnection[Any], client_id: str, zone: ZoneInfo
) -> Client | None:
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute("SELECT id, created_at FROM users WHERE id = %s", (client_id,))
        row = await cur.fetchone()
    if row is None:
        return None
    return Client.from_signup_timestamp(str(row["id"]), row["created_at"], zone)


async def _load_items(
    conn: psycopg.AsyncConnection[Any], kind: RegimenKind, plan_ids: list[str]
) -> dict[str, list[dict[str, Any]]]:
    if not plan_ids:
        return {}
    if kind is RegimenKind.MEAL:
        query = """
            SELECT m.id, m.meal_plan_id AS plan_id, m.name, m.time, m.option_label,
                   m.active_from, NULL AS day_of_week, FALSE AS is_rest
            FROM meals m
            WHERE m.meal_plan_id = ANY(%s)
              AND EXISTS (SELECT 1 FROM foods f WHERE f.meal_id = m.id)
            ORDER BY m.meal_plan_id, m.sequence_order ASC, m.id ASC
        """
    else:
        query = """
            SELECT d.id, d.workout_plan_id AS plan_id, COALESCE(d.workout_name, 'Rest') AS name,
                   NULL AS time, NULL AS option_label, d.active_from, d.day_of_week, d.is_rest
            FROM workout_days d
            WHERE d.workout_plan_id = ANY(%s)
            ORDER BY d.workout_plan_id, d.id ASC
        """
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(query, (plan_ids,))
        rows = await cur.fetchall()

    by_plan: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        by_plan.setdefault(str(row["plan_id"]), []).append(row)
    return by_plan


def _item_from_row(row: dict[str, Any]) -> Item:
    return Item(
        id=str(row["id"]),
        name=row["name"],
        scheduled_time=row.get("time"),
        active_from=row.get("active_from"),
        option_group=row.get("option_label"),
        weekday=parse_weekday(row.get("day_of_week")),
        is_rest=bool(row.get("is_rest")),
    )


async def load_plan_regimens(
    conn: psycopg.AsyncConnection[Any], kind: RegimenKind, client_id: str
) -> list[Regimen]:
    table = _PLAN_TABLES[kind]
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(
            f"""
            SELECT id, created_at, activated_at, deactivated_at, is_active
            FROM {table}
            WHERE user_id = %s AND is_template = FALSE
            ORDER BY created_at DESC, id ASC
            """,
            (client_id,),
        )
        plan_rows = await cur.fetchall()

    items_by_plan = await _load_items(conn, kind, [str(row["id"]) for row in plan_rows])

    regimens: list[Regimen] = []
    for row in plan_rows:
        plan_id = str(row["id"])
        item_rows = items_by_plan.get(plan_id, [])
        flexible = kind is RegimenKind.WORKOUT and any(
            item_row.get("day_of_week") is None for item_row in item_rows
        )
        regimens.append(
            Regimen(
                id=plan_id,
                kind=kind,
                created_at=row["created_at"],
                activated_at=row["activated_at"],
                deactivated_at=row["deactivated_at"],
                is_active=bool(row["is_active"]),
                schedule="flexible" if flexible else "fixed",
                items=tuple(_item_from_row(item_row) for item_row in item_rows),
            )
        )
    return regimens


async def load_supplement_regimen(
    conn: psycopg.AsyncConnection[Any], client_id: str, zone: ZoneInfo
) -> list[Regimen]:
    """Supplements hang off the client directly; the list as a whole is one regimen.

    The list activates with its first supplement; later additions count from
    the local day they were created.
    """
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(
            """
            SELECT id, name, created_at, active_from
            FROM supplements
            WHERE user_id = %s
            ORDER BY created_at ASC, id ASC
            """,
            (client_id,),
        )
        rows = await cur.fetchall()
    if not rows:
        return []

    first_created: datetime = rows[0]["created_at"]
    items = []
    for row in rows:
        active_from: date | None = row.get("active_from")
        if active_from is None:
            active_from = local_date(row["created_at"], zone)
        items.append(Item(id=str(row["id"]), name=row["name"], active_from=active_from))

    return [
        Regimen(
            id=f"supplements:{client_id}",
            kind=RegimenKind.SUPPLEMENT,
            created_at=first_created,
            activated_at=first_created,
            is_active=True,
            items=tuple(items),
        )
    ]


async def load_completions(
    conn: psycopg.AsyncConnection[Any],
    kind: RegimenKind,
    client_id: str,
    start: datetime,
    end: datetime,
) -> list[CompletionEvent]:
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(_COMPLETION_QUERIES[kind], (client_id, start, end))
        rows = await cur.fetchall()
    return [
        CompletionEvent(
            completed_at=row["completed_at"],
            item_id=str(row["item_id"]) if row["item_id"] is not None else None,
        )
        for row in rows
    ]


async def load_snapshot(
    conn: psycopg.AsyncConnection[Any],
    *,
    kind: RegimenKind | str,
    client_id: str,
    week_start: date | str,
    timezone_name: str,
) -> Snapshot | None:
    """Load one client's inputs for a week, or None when the client is unknown."""
    resolved_kind = RegimenKind(kind)
    zone = resolve_zone(timezone_name)

    client = await load_client(conn, client_id, zone)
    if client is None:
        logger.info("Client %s not found; skipping regimen load", client_id)
        return None

    if resolved_kind is RegimenKind.SUPPLEMENT:
        regimens = await load_supplement_regimen(conn, client_id, zone)
    else:
        regimens = await load_plan_regimens(conn, resolved_kind, client_id)

    # One day of slop on each side keeps late-evening local completions that
    # are stored on the next UTC day.
    start, end = fetch_bounds(resolve_week(week_start, timezone_name))
    completions = await load_completions(conn, resolved_kind, client_id, start, end)

    return Snapshot(
        client=client,
        kind=resolved_kind,
        regimens=tuple(regimens),
        completions=tuple(completions),
    )
