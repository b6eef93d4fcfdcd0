"""Precedence-ordered day classification.

The first matching rule wins:

1. day before signup                          -> NOT_SIGNED_UP_YET
2. ungoverned, or no active units             -> NO_REGIMEN_ASSIGNED
3. regimen created today / every unit is new  -> INTRODUCED
4. (rest-aware kinds) designated or chosen rest -> REST
5. future day, or today with nothing done     -> PENDING
6. otherwise                                  -> ratio of completed scoring units

Rule 6 divides by the scoring-unit count without a zero check; rules 2-4 leave
at least one scoring unit whenever rule 6 is reached.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .activation import ActivationSpan
from .completion import DayCompletions
from .models import (
    INTRODUCED,
    NO_REGIMEN_ASSIGNED,
    NOT_SIGNED_UP_YET,
    PENDING,
    REST,
    DayResult,
)
from .units import DayUnits, Unit


@dataclass(frozen=True)
class DayContext:
    day: date
    today: date
    signup_date: date
    span: ActivationSpan | None
    units: DayUnits
    completions: DayCompletions
    supports_rest: bool = False

    @property
    def flexible_schedule(self) -> bool:
        return self.span is not None and self.span.regimen.schedule == "flexible"


def _is_rest_day(ctx: DayContext) -> bool:
    if ctx.flexible_schedule and ctx.completions.rest_chosen:
        return True
    return all(unit.is_rest for unit in ctx.units.scoring)


def _counted_units(ctx: DayContext) -> tuple[Unit, ...]:
    if ctx.supports_rest:
        return tuple(unit for unit in ctx.units.scoring if not unit.is_rest)
    return ctx.units.scoring


def classify_day(ctx: DayContext) -> DayResult:
    if ctx.day < ctx.signup_date:
        return NOT_SIGNED_UP_YET

    if ctx.span is None or not ctx.units.active:
        return NO_REGIMEN_ASSIGNED

    if ctx.span.is_creation_day(ctx.day) or ctx.units.all_introduced:
        return INTRODUCED

    if ctx.supports_rest and _is_rest_day(ctx):
        return REST

    counted = _counted_units(ctx)
    completed = ctx.completions.completed_among(counted)

    if ctx.day > ctx.today or (ctx.day == ctx.today and completed == 0):
        return PENDING

    return DayResult.of_ratio(completed, len(counted))
