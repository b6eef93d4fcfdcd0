"""Unit grouping: A/B options of the same logical task collapse into one Unit.

Completing any option satisfies the unit, so the unit (not the item) is what a
day's denominator counts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, time

from .models import Item

UnitKeyFn = Callable[[Item], tuple[str, time | None]]
ItemDayFilter = Callable[[Item, date, date], bool]


def canonical_name(raw: str) -> str:
    return " ".join(raw.strip().lower().split())


def unit_key(name: str, scheduled_time: time | None) -> str:
    base = canonical_name(name)
    if scheduled_time is None:
        return base
    return f"{base}@{scheduled_time.strftime('%H:%M')}"


def key_by_name_and_time(item: Item) -> tuple[str, time | None]:
    return canonical_name(item.name), item.scheduled_time


def key_by_name(item: Item) -> tuple[str, time | None]:
    return canonical_name(item.name), None


def effective_active_from(item: Item, activation_day: date) -> date:
    """An item never counts before its regimen governs."""
    if item.active_from is None or item.active_from < activation_day:
        return activation_day
    return item.active_from


@dataclass(frozen=True)
class Unit:
    key: str
    name: str
    scheduled_time: time | None
    items: tuple[Item, ...]
    first_day: date

    @property
    def item_ids(self) -> frozenset[str]:
        return frozenset(item.id for item in self.items)

    @property
    def is_rest(self) -> bool:
        return all(item.is_rest for item in self.items)

    @property
    def options(self) -> tuple[str, ...]:
        return tuple(item.option_group or item.id for item in self.items)


@dataclass(frozen=True)
class DayUnits:
    active: tuple[Unit, ...]
    introduced: tuple[Unit, ...]

    @property
    def introduced_keys(self) -> frozenset[str]:
        return frozenset(unit.key for unit in self.introduced)

    @property
    def all_introduced(self) -> bool:
        return bool(self.introduced) and len(self.introduced) == len(self.active)

    @property
    def scoring(self) -> tuple[Unit, ...]:
        new = self.introduced_keys
        return tuple(unit for unit in self.active if unit.key not in new)


def group_units(
    items: Iterable[Item],
    *,
    activation_day: date,
    key_fn: UnitKeyFn = key_by_name_and_time,
) -> list[Unit]:
    """Partition items into units, preserving first-appearance order."""
    grouped: dict[tuple[str, time | None], list[Item]] = {}
    display_names: dict[tuple[str, time | None], str] = {}
    for item in items:
        key = key_fn(item)
        grouped.setdefault(key, []).append(item)
        display_names.setdefault(key, item.name.strip())

    units: list[Unit] = []
    for key, members in grouped.items():
        name, scheduled_time = key
        units.append(
            Unit(
                key=unit_key(name, scheduled_time),
                name=display_names[key],
                scheduled_time=scheduled_time,
                items=tuple(members),
                first_day=min(effective_active_from(item, activation_day) for item in members),
            )
        )
    return units


def item_active_from_day(item: Item, day: date, activation_day: date) -> bool:
    return day >= effective_active_from(item, activation_day)


def units_for_day(
    units: Iterable[Unit],
    day: date,
    *,
    activation_day: date,
    item_filter: ItemDayFilter = item_active_from_day,
) -> DayUnits:
    active: list[Unit] = []
    introduced: list[Unit] = []
    for unit in units:
        if not any(item_filter(item, day, activation_day) for item in unit.items):
            continue
        active.append(unit)
        if unit.first_day == day:
            introduced.append(unit)
    return DayUnits(active=tuple(active), introduced=tuple(introduced))
