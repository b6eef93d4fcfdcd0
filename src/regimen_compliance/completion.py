"""Completion matching: logged events onto (day, unit) pairs by zone-local day."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from .models import CompletionEvent
from .timezones import local_date
from .units import Unit


@dataclass(frozen=True)
class DayCompletions:
    completed_keys: frozenset[str]
    rest_chosen: bool
    unmatched: int = 0

    def completed_among(self, units: Iterable[Unit]) -> int:
        return sum(1 for unit in units if unit.key in self.completed_keys)


NOTHING_LOGGED = DayCompletions(completed_keys=frozenset(), rest_chosen=False)


def bucket_by_local_day(
    events: Iterable[CompletionEvent], zone: ZoneInfo
) -> dict[date, list[CompletionEvent]]:
    """Group events by the zone-local day they were logged on.

    A completion stored in UTC at 05:58 the next morning still belongs to the
    previous local evening in a UTC-6 zone.
    """
    by_day: dict[date, list[CompletionEvent]] = defaultdict(list)
    for event in events:
        by_day[local_date(event.completed_at, zone)].append(event)
    return dict(by_day)


def match_day(units: Sequence[Unit], events: Iterable[CompletionEvent]) -> DayCompletions:
    unit_by_item: dict[str, str] = {}
    for unit in units:
        for item_id in unit.item_ids:
            unit_by_item[item_id] = unit.key
    unit_keys = {unit.key for unit in units}

    completed: set[str] = set()
    rest_chosen = False
    unmatched = 0
    for event in events:
        if event.is_rest_choice:
            rest_chosen = True
            continue
        if event.item_id is not None and event.item_id in unit_by_item:
            completed.add(unit_by_item[event.item_id])
        elif event.unit_id is not None and event.unit_id in unit_keys:
            completed.add(event.unit_id)
        else:
            unmatched += 1

    return DayCompletions(
        completed_keys=frozenset(completed),
        rest_chosen=rest_chosen,
        unmatched=unmatched,
    )
