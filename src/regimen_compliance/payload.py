"""Collaborator-facing encoding of a computed week.

``complianceData`` keeps the flat numeric shape existing calendar widgets read:
ratios in [0, 1] and reserved negative codes for the sentinel states. Pending
has no code of its own (it renders like an empty day), so the tagged status of
every day is also reported out-of-band in ``dayStates``.
"""

from __future__ import annotations

from typing import Any

from .engine import WeekCompliance
from .models import DayResult, DayStatus

NOT_SIGNED_UP_YET_CODE = -1
NO_REGIMEN_ASSIGNED_CODE = -2
INTRODUCED_CODE = -3
REST_CODE = -4

SENTINEL_CODES: dict[DayStatus, int] = {
    DayStatus.NOT_SIGNED_UP_YET: NOT_SIGNED_UP_YET_CODE,
    DayStatus.NO_REGIMEN_ASSIGNED: NO_REGIMEN_ASSIGNED_CODE,
    DayStatus.INTRODUCED: INTRODUCED_CODE,
    DayStatus.REST: REST_CODE,
}


def encode_day(result: DayResult) -> float | int:
    if result.ratio is not None:
        return float(result.ratio)
    if result.status is DayStatus.PENDING:
        return 0
    return SENTINEL_CODES[result.status]


def week_payload(week: WeekCompliance, *, precision: int | None = None) -> dict[str, Any]:
    """JSON-ready dict for the request layer.

    Rounding happens here and only here; ``precision=None`` keeps full floats.
    """
    compliance_data: list[float | int] = []
    for result in week.days:
        value = encode_day(result)
        if precision is not None and result.ratio is not None:
            value = round(value, precision)
        compliance_data.append(value)

    return {
        "kind": week.kind.value,
        "timezone": week.timezone,
        "weekStart": week.week_start.isoformat(),
        "dayKeys": list(week.day_keys),
        "complianceData": compliance_data,
        "dayStates": [result.status.value for result in week.days],
        "introducedUnitsByDay": {
            key: sorted(units) for key, units in sorted(week.introduced_units_by_day.items())
        },
    }
