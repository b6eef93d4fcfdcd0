"""Snapshot models consumed by the engine and the tagged per-day result.

Inputs are pydantic models so the loader (or any other collaborator) gets
validation at the boundary; the engine treats them as an immutable snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from fractions import Fraction
from typing import Any, Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .timezones import local_date


class RegimenKind(str, Enum):
    MEAL = "meal"
    SUPPLEMENT = "supplement"
    WORKOUT = "workout"


def _normalized_non_empty(value: str, *, field_name: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"{field_name} must not be empty")
    return normalized


class Client(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    signup_date: date

    @classmethod
    def from_signup_timestamp(cls, client_id: str, signup_at: datetime, zone: ZoneInfo) -> Client:
        return cls(id=client_id, signup_date=local_date(signup_at, zone))


class Item(BaseModel):
    """One prescribed entry of a regimen (a meal option, a supplement, a workout day)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    scheduled_time: time | None = None
    active_from: date | None = None
    option_group: str | None = None
    weekday: int | None = Field(default=None, ge=0, le=6)
    is_rest: bool = False

    @field_validator("id", "name")
    @classmethod
    def validate_non_empty(cls, value: str, info: Any) -> str:
        return _normalized_non_empty(value, field_name=info.field_name)

    @field_validator("scheduled_time")
    @classmethod
    def truncate_to_minute(cls, value: time | None) -> time | None:
        # "08:00" and "08:00:00" name the same slot.
        if value is None:
            return None
        return value.replace(second=0, microsecond=0, tzinfo=None)


class Regimen(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: RegimenKind
    created_at: datetime
    activated_at: datetime | None = None
    deactivated_at: datetime | None = None
    is_active: bool = False
    schedule: Literal["fixed", "flexible"] = "fixed"
    items: tuple[Item, ...] = ()


class CompletionEvent(BaseModel):
    """One logged client action. Neither item nor unit set means "rest chosen"."""

    model_config = ConfigDict(frozen=True)

    completed_at: datetime | date
    item_id: str | None = None
    unit_id: str | None = None

    @field_validator("completed_at", mode="before")
    @classmethod
    def parse_completed_at(cls, value: Any) -> Any:
        # Only a bare YYYY-MM-DD is a zone-local date; "2026-02-03T00:00:00Z" is a UTC instant.
        if not isinstance(value, str):
            return value
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)

    @property
    def is_rest_choice(self) -> bool:
        return self.item_id is None and self.unit_id is None


class DayStatus(str, Enum):
    RATIO = "ratio"
    NOT_SIGNED_UP_YET = "not_signed_up_yet"
    NO_REGIMEN_ASSIGNED = "no_regimen_assigned"
    INTRODUCED = "introduced"
    PENDING = "pending"
    REST = "rest"


@dataclass(frozen=True)
class DayResult:
    """Either a completion ratio or a sentinel reason, never both."""

    status: DayStatus
    ratio: Fraction | None = None

    def __post_init__(self) -> None:
        if (self.status is DayStatus.RATIO) != (self.ratio is not None):
            raise ValueError("ratio must be set exactly when status is RATIO")
        if self.ratio is not None and not 0 <= self.ratio <= 1:
            raise ValueError(f"ratio out of range: {self.ratio}")

    @classmethod
    def of_ratio(cls, completed: int, total: int) -> DayResult:
        return cls(DayStatus.RATIO, Fraction(completed, total))

    @property
    def is_ratio(self) -> bool:
        return self.status is DayStatus.RATIO


NOT_SIGNED_UP_YET = DayResult(DayStatus.NOT_SIGNED_UP_YET)
NO_REGIMEN_ASSIGNED = DayResult(DayStatus.NO_REGIMEN_ASSIGNED)
INTRODUCED = DayResult(DayStatus.INTRODUCED)
PENDING = DayResult(DayStatus.PENDING)
REST = DayResult(DayStatus.REST)
