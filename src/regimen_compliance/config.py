import logging
import os
from dataclasses import dataclass

from .errors import ConfigurationError
from .logging import LOG_FORMATS
from .timezones import DEFAULT_TIMEZONE, normalize_timezone_name


@dataclass(frozen=True)
class Config:
    timezone: str = DEFAULT_TIMEZONE
    log_format: str = "json"
    log_level: int = logging.INFO
    database_url: str | None = None

    @classmethod
    def from_env(cls) -> "Config":
        raw_timezone = os.environ.get("COMPLIANCE_TIMEZONE", DEFAULT_TIMEZONE)
        timezone_name = normalize_timezone_name(raw_timezone)
        if timezone_name is None:
            raise ConfigurationError(
                f"COMPLIANCE_TIMEZONE is not a valid IANA timezone: {raw_timezone!r}"
            )

        raw_level = os.environ.get("COMPLIANCE_LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelName(raw_level)
        if not isinstance(level, int):
            raise ConfigurationError(f"COMPLIANCE_LOG_LEVEL is not a log level: {raw_level!r}")

        log_format = os.environ.get("COMPLIANCE_LOG_FORMAT", "json").strip().lower()
        if log_format not in LOG_FORMATS:
            raise ConfigurationError(f"COMPLIANCE_LOG_FORMAT must be json or text: {log_format!r}")

        return cls(
            timezone=timezone_name,
            log_format=log_format,
            log_level=level,
            database_url=os.environ.get("DATABASE_URL") or None,
        )

    def require_database_url(self) -> str:
        if not self.database_url:
            raise RuntimeError("DATABASE_URL must be set")
        return self.database_url
