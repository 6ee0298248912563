from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from typing import Optional

from zoneinfo import ZoneInfo

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import TimezoneOutOfRange

MAX_OFFSET_HOURS = 23


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")
    """Application runtime configuration."""

    app_name: str = "Punch Clock"
    host: str = os.getenv("PC_HOST", "127.0.0.1")
    port: int = int(os.getenv("PC_PORT", "8080"))

    ledger_path: Path = Path(os.getenv("PC_LEDGER_PATH", "./.punch_clock/record"))

    timezone: str = os.getenv("TZ", "")
    utc_offset: Optional[float] = (
        float(os.getenv("PC_UTC_OFFSET")) if os.getenv("PC_UTC_OFFSET") else None
    )

    calendar_width: int = int(os.getenv("PC_CALENDAR_WIDTH", "48"))
    calendar_days: int = int(os.getenv("PC_CALENDAR_DAYS", "7"))
    day_width: int = int(os.getenv("PC_DAY_WIDTH", "6"))
    day_format: str = os.getenv("PC_DAY_FORMAT", "%R")

    log_level: str = os.getenv("PC_LOG_LEVEL", "INFO")

    @field_validator("utc_offset", mode="before")
    @classmethod
    def _blank_offset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("calendar_width", "calendar_days", "day_width")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value


settings = Settings()


def fixed_offset(hours: float) -> dt.tzinfo:
    if abs(hours) > MAX_OFFSET_HOURS:
        raise TimezoneOutOfRange(hours)
    return dt.timezone(dt.timedelta(hours=hours))


def display_zone(offset: Optional[float] = None) -> dt.tzinfo:
    """Resolve the zone used for day boundaries and formatting.

    A per-query ``offset`` wins over ``PC_UTC_OFFSET``, which wins over ``TZ``;
    with none of them set the host's local zone is used.
    """
    if offset is not None:
        return fixed_offset(offset)
    if settings.utc_offset is not None:
        return fixed_offset(settings.utc_offset)
    if settings.timezone:
        return ZoneInfo(settings.timezone)
    return dt.datetime.now().astimezone().tzinfo
