from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from typing_extensions import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_serializer

from .models import ensure_single_line


def _serialize_datetime(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.isoformat()


class ClockRequest(BaseModel):
    comment: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def _single_line(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and ("\n" in value or "\r" in value):
            raise ValueError("Comments must not contain line breaks")
        return ensure_single_line(value)


class ClockInResponse(BaseModel):
    check_in: dt.datetime

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {"check_in": _serialize_datetime(self.check_in)}


class ClockOutResponse(BaseModel):
    check_out: dt.datetime
    duration_seconds: float
    duration: str

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "check_out": _serialize_datetime(self.check_out),
            "duration_seconds": self.duration_seconds,
            "duration": self.duration,
        }


LedgerState = Literal["clocked_in", "clocked_out", "empty"]


class UndoResponse(BaseModel):
    removed: Optional[dt.datetime] = None
    state: LedgerState
    since: Optional[dt.datetime] = None
    message: str

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "removed": _serialize_datetime(self.removed) if self.removed else None,
            "state": self.state,
            "since": _serialize_datetime(self.since) if self.since else None,
            "message": self.message,
        }


class StatusResponse(BaseModel):
    state: LedgerState
    since: Optional[dt.datetime] = None
    message: str

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "since": _serialize_datetime(self.since) if self.since else None,
            "message": self.message,
        }


class StatsResponse(BaseModel):
    day: Optional[dt.date] = None
    total_seconds: float
    today_seconds: float
    day_seconds: Optional[float] = None
    current_session_seconds: Optional[float] = None


class LedgerEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    timestamp: dt.datetime
    event: Literal["in", "out"]
    comment: Optional[str] = None

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "timestamp": _serialize_datetime(self.timestamp),
            "event": self.event,
            "comment": self.comment,
        }


class InitResponse(BaseModel):
    path: str
    entries: int