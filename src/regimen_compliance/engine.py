"""Seven-day compliance sequence builder.

Pure and synchronous: every input arrives in the call, "now" included, so two
calls with the same snapshot return identical weeks.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

from .activation import ActivationSpan, activation_spans, resolve_governing
from .classifier import DayContext, classify_day
from .completion import NOTHING_LOGGED, bucket_by_local_day, match_day
from .models import (
    NO_REGIMEN_ASSIGNED,
    Client,
    CompletionEvent,
    DayResult,
    DayStatus,
    Regimen,
    RegimenKind,
)
from .policies import RegimenPolicy, get_policy
from .timezones import local_date, resolve_zone
from .units import DayUnits, Unit, group_units, units_for_day
from .window import DayWindow, resolve_week

logger = logging.getLogger(__name__)

_NO_UNITS = DayUnits(active=(), introduced=())


@dataclass(frozen=True)
class WeekCompliance:
    kind: RegimenKind
    timezone: str
    windows: tuple[DayWindow, ...]
    days: tuple[DayResult, ...]
    introduced_units_by_day: dict[str, frozenset[str]] = field(default_factory=dict)
    unmatched_events_by_day: dict[str, int] = field(default_factory=dict)

    @property
    def week_start(self) -> date:
        return self.windows[0].day

    @property
    def day_keys(self) -> tuple[str, ...]:
        return tuple(window.key for window in self.windows)

    def count(self, status: DayStatus) -> int:
        return sum(1 for result in self.days if result.status is status)

    @property
    def unmatched_events(self) -> int:
        return sum(self.unmatched_events_by_day.values())


@dataclass
class _UnitCache:
    policy: RegimenPolicy
    _units: dict[str, list[Unit]] = field(default_factory=dict)

    def units_for(self, span: ActivationSpan) -> list[Unit]:
        regimen_id = span.regimen.id
        if regimen_id not in self._units:
            self._units[regimen_id] = group_units(
                span.regimen.items,
                activation_day=span.activation_day,
                key_fn=self.policy.unit_key,
            )
        return self._units[regimen_id]


def _check_kinds(regimens: Sequence[Regimen], kind: RegimenKind) -> None:
    for regimen in regimens:
        if regimen.kind is not kind:
            raise ValueError(
                f"Regimen {regimen.id} is a {regimen.kind.value} regimen, expected {kind.value}"
            )


def _warn_unknown_items(regimens: Sequence[Regimen], completions: Sequence[CompletionEvent]) -> None:
    known = {item.id for regimen in regimens for item in regimen.items}
    unknown = sorted(
        {event.item_id for event in completions if event.item_id is not None} - known
    )
    if unknown:
        logger.warning(
            "Ignoring %d completion item id(s) not present in any regimen: %s",
            len(unknown),
            ", ".join(unknown[:5]),
            extra={"compliance_unknown_item_count": len(unknown)},
        )


def _day_units(span: ActivationSpan | None, day: date, cache: _UnitCache) -> DayUnits:
    if span is None:
        return _NO_UNITS
    return units_for_day(
        cache.units_for(span),
        day,
        activation_day=span.activation_day,
        item_filter=cache.policy.item_filter,
    )


def compute_week_compliance(
    *,
    client: Client,
    kind: RegimenKind | str,
    regimens: Iterable[Regimen],
    completions: Iterable[CompletionEvent],
    week_start: date | str,
    now: datetime,
    timezone_name: str,
) -> WeekCompliance:
    """Classify the seven days starting at ``week_start`` for one regimen kind.

    ``now`` is captured once by the caller; its zone-local day is the single
    "today" used for pending and introduction checks alike.
    """
    policy = get_policy(kind)
    zone: ZoneInfo = resolve_zone(timezone_name)
    windows = resolve_week(week_start, timezone_name)
    regimen_list = list(regimens)
    completion_list = list(completions)
    _check_kinds(regimen_list, policy.kind)
    _warn_unknown_items(regimen_list, completion_list)

    today = local_date(now, zone)
    spans = activation_spans(regimen_list, zone)
    events_by_day = bucket_by_local_day(completion_list, zone)
    cache = _UnitCache(policy)

    days: list[DayResult] = []
    introduced: dict[str, frozenset[str]] = {}
    unmatched: dict[str, int] = {}
    for window in windows:
        span = resolve_governing(spans, window.day)
        units = _day_units(span, window.day, cache)
        day_events = events_by_day.get(window.day)
        completions_today = match_day(units.active, day_events) if day_events else NOTHING_LOGGED

        result = classify_day(
            DayContext(
                day=window.day,
                today=today,
                signup_date=client.signup_date,
                span=span,
                units=units,
                completions=completions_today,
                supports_rest=policy.supports_rest,
            )
        )
        days.append(result)
        if units.introduced and window.day >= client.signup_date:
            introduced[window.key] = units.introduced_keys
        if completions_today.unmatched:
            unmatched[window.key] = completions_today.unmatched

    week = WeekCompliance(
        kind=policy.kind,
        timezone=zone.key,
        windows=tuple(windows),
        days=tuple(days),
        introduced_units_by_day=introduced,
        unmatched_events_by_day=unmatched,
    )
    logger.debug(
        "Computed %s compliance for client %s week of %s",
        policy.kind.value,
        client.id,
        week.week_start.isoformat(),
        extra={
            "compliance_client_id": client.id,
            "compliance_regimen_kind": policy.kind.value,
            "compliance_week_start": week.week_start.isoformat(),
            "compliance_unmatched_events": week.unmatched_events,
        },
    )
    return week


def unassigned_week(
    kind: RegimenKind | str, week_start: date | str, timezone_name: str
) -> WeekCompliance:
    """All seven days NoRegimenAssigned: the answer for a client that cannot be resolved."""
    policy = get_policy(kind)
    windows = resolve_week(week_start, timezone_name)
    return WeekCompliance(
        kind=policy.kind,
        timezone=resolve_zone(timezone_name).key,
        windows=tuple(windows),
        days=tuple(NO_REGIMEN_ASSIGNED for _ in windows),
    )
