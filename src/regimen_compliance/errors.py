"""Error types raised by the compliance engine."""

from __future__ import annotations


class ComplianceError(Exception):
    """Base class for every error raised by regimen_compliance."""


class ConfigurationError(ComplianceError):
    """Data-integrity or configuration fault the engine refuses to guess around."""

    def __init__(self, message: str, *, regimen_id: str | None = None) -> None:
        super().__init__(message)
        self.regimen_id = regimen_id


class UnknownRegimenKindError(ComplianceError, KeyError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"No compliance policy registered for regimen kind={kind!r}")
        self.kind = kind

    def __str__(self) -> str:
        return str(self.args[0])
