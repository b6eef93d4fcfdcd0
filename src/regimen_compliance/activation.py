"""Activation resolution: which regimen (if any) governs a zone-local day."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from .errors import ConfigurationError
from .models import Regimen
from .timezones import as_utc, local_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivationSpan:
    """A regimen's activation window projected onto zone-local days.

    Governs ``[activation_day, deactivation_day)``; an open end means still active.
    """

    regimen: Regimen
    activation_day: date
    deactivation_day: date | None
    created_day: date
    activated_at_utc: datetime

    def governs(self, day: date) -> bool:
        if self.activation_day > day:
            return False
        return self.deactivation_day is None or self.deactivation_day > day

    def is_creation_day(self, day: date) -> bool:
        """Created on ``day`` and ``day`` is its first governed day."""
        return self.created_day == day and self.activation_day == day


def validate_regimen(regimen: Regimen) -> None:
    if regimen.activated_at is None or regimen.deactivated_at is None:
        return
    if as_utc(regimen.deactivated_at) < as_utc(regimen.activated_at):
        raise ConfigurationError(
            f"Regimen {regimen.id} is deactivated ({regimen.deactivated_at.isoformat()}) "
            f"before it was activated ({regimen.activated_at.isoformat()})",
            regimen_id=regimen.id,
        )


def activation_spans(regimens: Iterable[Regimen], zone: ZoneInfo) -> list[ActivationSpan]:
    """Validate every regimen and project the activated ones onto local days.

    Never-activated regimens govern nothing and are dropped here.
    """
    spans: list[ActivationSpan] = []
    for regimen in regimens:
        validate_regimen(regimen)
        if regimen.activated_at is None:
            continue
        spans.append(
            ActivationSpan(
                regimen=regimen,
                activation_day=local_date(regimen.activated_at, zone),
                deactivation_day=local_date(regimen.deactivated_at, zone)
                if regimen.deactivated_at is not None
                else None,
                created_day=local_date(regimen.created_at, zone),
                activated_at_utc=as_utc(regimen.activated_at),
            )
        )
    return spans


def _precedence(span: ActivationSpan) -> tuple:
    regimen = span.regimen
    return (
        span.activated_at_utc,
        regimen.is_active,
        as_utc(regimen.created_at),
        regimen.id,
    )


def resolve_governing(spans: Iterable[ActivationSpan], day: date) -> ActivationSpan | None:
    """Select the governing span for ``day``; latest activation wins on overlap."""
    matches = [span for span in spans if span.governs(day)]
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            "Overlapping activation windows on %s: %s; using latest activation",
            day.isoformat(),
            ", ".join(sorted(span.regimen.id for span in matches)),
            extra={"compliance_overlap_count": len(matches)},
        )
    return max(matches, key=_precedence)
