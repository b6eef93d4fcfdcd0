"""Per-regimen-kind strategies for the shared compliance engine.

Each kind differs only in how items collapse into units, whether rest is a
meaningful state, and which items count on a given day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from .errors import UnknownRegimenKindError
from .models import Item, RegimenKind
from .units import (
    ItemDayFilter,
    UnitKeyFn,
    item_active_from_day,
    key_by_name,
    key_by_name_and_time,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegimenPolicy:
    kind: RegimenKind
    unit_key: UnitKeyFn
    item_filter: ItemDayFilter
    supports_rest: bool = False


def workout_item_on_day(item: Item, day: date, activation_day: date) -> bool:
    if not item_active_from_day(item, day, activation_day):
        return False
    return item.weekday is None or item.weekday == day.weekday()


_policies: dict[RegimenKind, RegimenPolicy] = {}


def register_policy(policy: RegimenPolicy) -> RegimenPolicy:
    if policy.kind in _policies:
        raise ValueError(f"Duplicate compliance policy for kind={policy.kind.value!r}")
    _policies[policy.kind] = policy
    logger.debug("Registered compliance policy for kind=%s", policy.kind.value)
    return policy


def get_policy(kind: RegimenKind | str) -> RegimenPolicy:
    try:
        resolved = RegimenKind(kind)
    except ValueError:
        raise UnknownRegimenKindError(str(kind)) from None
    policy = _policies.get(resolved)
    if policy is None:
        raise UnknownRegimenKindError(resolved.value)
    return policy


def registered_kinds() -> list[RegimenKind]:
    return sorted(_policies, key=lambda kind: kind.value)


MEAL_POLICY = register_policy(
    RegimenPolicy(
        kind=RegimenKind.MEAL,
        unit_key=key_by_name_and_time,
        item_filter=item_active_from_day,
    )
)

# Supplements are daily; a second "Magnesium" row is an alternative, not a new dose.
SUPPLEMENT_POLICY = register_policy(
    RegimenPolicy(
        kind=RegimenKind.SUPPLEMENT,
        unit_key=key_by_name,
        item_filter=item_active_from_day,
    )
)

WORKOUT_POLICY = register_policy(
    RegimenPolicy(
        kind=RegimenKind.WORKOUT,
        unit_key=key_by_name_and_time,
        item_filter=workout_item_on_day,
        supports_rest=True,
    )
)
