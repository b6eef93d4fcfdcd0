"""Weekly roll-ups for the coach's client compliance list."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from fractions import Fraction

from .engine import WeekCompliance
from .models import DayStatus, RegimenKind


@dataclass(frozen=True)
class WeekSummary:
    scored_days: int
    satisfied: Fraction

    @property
    def rate(self) -> Fraction | None:
        if self.scored_days == 0:
            return None
        return self.satisfied / self.scored_days

    @property
    def percent(self) -> int | None:
        rate = self.rate
        # half-up, matching the dashboard percentages
        return None if rate is None else math.floor(100 * rate + Fraction(1, 2))


@dataclass(frozen=True)
class ClientSummary:
    client_id: str
    by_kind: dict[RegimenKind, WeekSummary]

    def percent_for(self, kind: RegimenKind) -> int | None:
        summary = self.by_kind.get(kind)
        return summary.percent if summary is not None else None

    @property
    def overall(self) -> WeekSummary:
        return WeekSummary(
            scored_days=sum(summary.scored_days for summary in self.by_kind.values()),
            satisfied=sum((summary.satisfied for summary in self.by_kind.values()), Fraction(0)),
        )

    def as_dict(self) -> dict[str, int | str | None]:
        row: dict[str, int | str | None] = {"id": self.client_id}
        for kind in RegimenKind:
            row[f"{kind.value}_compliance"] = self.percent_for(kind)
        row["overall_compliance"] = self.overall.percent
        return row


def summarize_week(week: WeekCompliance) -> WeekSummary:
    """Ratio days count their value, rest days count as satisfied, other sentinels are skipped."""
    scored = 0
    satisfied = Fraction(0)
    for result in week.days:
        if result.ratio is not None:
            scored += 1
            satisfied += result.ratio
        elif result.status is DayStatus.REST:
            scored += 1
            satisfied += 1
    return WeekSummary(scored_days=scored, satisfied=satisfied)


def summarize_client(client_id: str, weeks: Iterable[WeekCompliance]) -> ClientSummary:
    by_kind: dict[RegimenKind, WeekSummary] = {}
    for week in weeks:
        if week.kind in by_kind:
            raise ValueError(f"Duplicate {week.kind.value} week for client {client_id}")
        by_kind[week.kind] = summarize_week(week)
    return ClientSummary(client_id=client_id, by_kind=by_kind)


def rank_clients(summaries: Iterable[ClientSummary]) -> list[ClientSummary]:
    """Highest overall compliance first; clients with nothing scored go last."""

    def sort_key(summary: ClientSummary) -> tuple[int, Fraction, str]:
        rate = summary.overall.rate
        if rate is None:
            return (1, Fraction(0), summary.client_id)
        return (0, -rate, summary.client_id)

    return sorted(summaries, key=sort_key)
