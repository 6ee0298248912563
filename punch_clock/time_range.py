"""Resolution-bucketed day view with comment attribution."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from typing import List, Optional, Union

from .errors import SessionOverlap
from .models import Entry, Session
from .painter import DARK, FILLED, LIGHT
from .ranges import DateTimeRange
from .record import Record
from .timeutil import UTC


class DayResolution(enum.Enum):
    """Slots per hour for the day view."""

    HOUR = 1
    HALF_HOUR = 2
    THIRD_HOUR = 3
    QUARTER_HOUR = 4
    TEN_MINUTES = 6
    FIVE_MINUTES = 12
    TWO_MINUTES = 30
    MINUTE = 60

    @property
    def slots_per_day(self) -> int:
        return 24 * self.value

    @classmethod
    def from_name(cls, name: str) -> "DayResolution":
        return cls[name.strip().upper().replace("-", "_")]


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class SessionStart:
    check_in: dt.datetime
    comment: Optional[str] = None


@dataclass(frozen=True)
class SessionEnd:
    check_out: dt.datetime
    comment: Optional[str] = None


@dataclass(frozen=True)
class SessionSpan:
    pass


@dataclass(frozen=True)
class SessionWhole:
    check_in: dt.datetime
    check_out: dt.datetime
    in_comment: Optional[str] = None
    out_comment: Optional[str] = None


@dataclass(frozen=True)
class Multi:
    count: int


SlotInfo = Union[Empty, SessionStart, SessionEnd, SessionSpan, SessionWhole, Multi]


def _collide(info: SlotInfo) -> Multi:
    if isinstance(info, Multi):
        return Multi(info.count + 1)
    return Multi(2)


@dataclass
class Slot:
    anchor: dt.datetime
    info: SlotInfo


class TimeRangeTable:
    def __init__(self, window: DateTimeRange, slots: List[Slot]) -> None:
        self.window = window
        self.slots = slots

    @classmethod
    def empty(cls, window: DateTimeRange, resolution: int) -> "TimeRangeTable":
        if resolution < 1:
            raise ValueError("resolution must be at least 1")
        step = window.span() / resolution
        slots = [Slot(window.start + step * index, Empty()) for index in range(resolution)]
        return cls(window, slots)

    @classmethod
    def build(cls, record: Record, window: DateTimeRange, resolution: int, now: dt.datetime) -> "TimeRangeTable":
        table = cls.empty(window, resolution)
        for entry in record.entries:
            if entry.check_in >= window.end:
                break
            if entry.check_out < window.start:
                continue
            table._mark_entry(entry)
        if record.current_session is not None:
            table._mark_session(record.current_session, now)
        return table

    @property
    def infos(self) -> List[SlotInfo]:
        return [slot.info for slot in self.slots]

    def _slot_end(self, index: int) -> dt.datetime:
        if index + 1 < len(self.slots):
            return self.slots[index + 1].anchor
        return self.window.end

    def _touched(self, check_in: dt.datetime, check_out: dt.datetime) -> List[int]:
        touched = []
        for index, slot in enumerate(self.slots):
            slot_end = self._slot_end(index)
            if check_in == check_out:
                if slot.anchor <= check_in < slot_end:
                    touched.append(index)
            elif check_in < slot_end and slot.anchor < check_out:
                touched.append(index)
        return touched

    def _mark_entry(self, entry: Entry) -> None:
        for index in self._touched(entry.check_in, entry.check_out):
            slot = self.slots[index]
            has_start = slot.anchor <= entry.check_in
            has_end = entry.check_out <= self._slot_end(index)
            if has_start and has_end:
                info: SlotInfo = SessionWhole(entry.check_in, entry.check_out, entry.in_comment, entry.out_comment)
            elif has_start:
                info = SessionStart(entry.check_in, entry.in_comment)
            elif has_end:
                info = SessionEnd(entry.check_out, entry.out_comment)
            else:
                info = SessionSpan()
            slot.info = info if isinstance(slot.info, Empty) else _collide(slot.info)

    def _mark_session(self, session: Session, now: dt.datetime) -> None:
        if now < session.check_in:
            return
        check_out = now if now > session.check_in else session.check_in
        for index in self._touched(session.check_in, check_out):
            slot = self.slots[index]
            has_start = slot.anchor <= session.check_in
            if isinstance(slot.info, Empty):
                slot.info = SessionStart(session.check_in, session.in_comment) if has_start else SessionSpan()
            elif has_start:
                # Only the slot the session opened in may hold an earlier check-out.
                slot.info = _collide(slot.info)
            else:
                raise SessionOverlap(
                    f"The current session overlaps a closed entry at {slot.anchor.isoformat()}"
                )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    @staticmethod
    def _glyphs(info: SlotInfo, width: int, background_toggle: bool) -> str:
        if not isinstance(info, Empty):
            return FILLED * width
        return "".join(LIGHT if background_toggle ^ (index % 2 == 0) else DARK for index in range(width))

    @staticmethod
    def annotation(info: SlotInfo, date_format: str, zone: dt.tzinfo = UTC) -> Optional[str]:
        def fmt(value: dt.datetime) -> str:
            return value.astimezone(zone).strftime(date_format)

        def with_comment(text: str, comment: Optional[str]) -> str:
            return f"{text} {comment}" if comment else text

        if isinstance(info, SessionStart):
            return with_comment(f"In @ {fmt(info.check_in)}", info.comment)
        if isinstance(info, SessionEnd):
            return with_comment(f"Out @ {fmt(info.check_out)}", info.comment)
        if isinstance(info, SessionWhole):
            parts = [f"{fmt(info.check_in)} -> {fmt(info.check_out)}"]
            parts.extend(f"*{comment}" for comment in (info.in_comment, info.out_comment) if comment)
            return " ".join(parts)
        if isinstance(info, Multi):
            return f"[{info.count} transitions overlapping]"
        return None

    def render_lines(self, width: int, date_format: str, zone: dt.tzinfo = UTC) -> List[str]:
        lines = []
        for index, slot in enumerate(self.slots):
            line = f"{slot.anchor.astimezone(zone).strftime(date_format)} {self._glyphs(slot.info, width, index % 2 == 0)}"
            note = self.annotation(slot.info, date_format, zone)
            if note:
                line = f"{line} {note}"
            lines.append(line)
        return lines

    def render(self, width: int, date_format: str, zone: dt.tzinfo = UTC) -> str:
        return "\n".join(self.render_lines(width, date_format, zone))

