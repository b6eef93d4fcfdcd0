"""Regimen compliance: seven-day adherence calendars for coach-assigned regimens."""

from .engine import WeekCompliance, compute_week_compliance, unassigned_week
from .errors import ComplianceError, ConfigurationError, UnknownRegimenKindError
from .models import (
    Client,
    CompletionEvent,
    DayResult,
    DayStatus,
    Item,
    Regimen,
    RegimenKind,
)

__all__ = [
    "Client",
    "ComplianceError",
    "CompletionEvent",
    "ConfigurationError",
    "DayResult",
    "DayStatus",
    "Item",
    "Regimen",
    "RegimenKind",
    "UnknownRegimenKindError",
    "WeekCompliance",
    "compute_week_compliance",
    "unassigned_week",
]
