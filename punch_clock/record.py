from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .errors import (
    AlreadyClockedIn,
    CheckInBeforeLastCheckOut,
    EntryIncorrectNumberOfLines,
    NotClockedIn,
    TimestampParseError,
)
from .models import Entry, Item, Session
from .ranges import DateTimeRange, crop_pairs, total_span
from .timeutil import (
    TIMESTAMP_WIDTH,
    UTC,
    day_bounds,
    ensure_utc,
    format_timestamp,
    local_date,
    parse_timestamp,
)

NumberedLine = Tuple[int, str]


def _paragraphs(text: str) -> List[List[NumberedLine]]:
    paragraphs: List[List[NumberedLine]] = []
    current: List[NumberedLine] = []
    for number, line in enumerate(text.split("\n"), start=1):
        if line.strip():
            current.append((number, line))
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def _parse_line(numbered: NumberedLine) -> Tuple[dt.datetime, Optional[str]]:
    number, line = numbered
    parts = line.strip().split(None, 1)
    timestamp = parse_timestamp(parts[0], number)
    comment = parts[1].strip() if len(parts) > 1 else None
    return timestamp, comment or None


def _parse_entry_line(numbered: NumberedLine) -> Optional[Entry]:
    """Read the one-line ``<check-in> <check-out>`` form, or return ``None``."""
    number, line = numbered
    tokens = line.split()
    if len(tokens) != 2:
        return None
    check_in = parse_timestamp(tokens[0], number)
    try:
        check_out = parse_timestamp(tokens[1], number)
    except TimestampParseError:
        return None
    return Entry(check_in, check_out)


def _is_one_line_block(paragraph: List[NumberedLine]) -> bool:
    # A two-line paragraph is a commented entry unless both lines are one-line entries.
    if _parse_entry_line(paragraph[0]) is None:
        return False
    return len(paragraph) != 2 or _parse_entry_line(paragraph[1]) is not None


def _format_line(value: dt.datetime, comment: Optional[str], zone: dt.tzinfo) -> str:
    timestamp = format_timestamp(value, zone)
    if not comment:
        return timestamp
    return f"{timestamp:<{TIMESTAMP_WIDTH}} {comment}"


@dataclass
class Record:
    """The full ledger: closed entries in chronological order plus an optional open session."""

    entries: List[Entry] = field(default_factory=list)
    current_session: Optional[Session] = None

    # ------------------------------------------------------------------
    # Text format
    # ------------------------------------------------------------------
    @classmethod
    def parse(cls, text: str) -> "Record":
        paragraphs = _paragraphs(text)
        entries: List[Entry] = []
        current_session: Optional[Session] = None
        for index, paragraph in enumerate(paragraphs):
            is_last = index == len(paragraphs) - 1
            if _is_one_line_block(paragraph):
                for position, numbered in enumerate(paragraph):
                    entry = _parse_entry_line(numbered)
                    if entry is not None:
                        entries.append(entry)
                    elif is_last and position == len(paragraph) - 1:
                        check_in, in_comment = _parse_line(numbered)
                        current_session = Session(check_in, in_comment)
                    else:
                        raise EntryIncorrectNumberOfLines(len(paragraph), numbered[0])
            elif len(paragraph) == 2:
                check_in, in_comment = _parse_line(paragraph[0])
                check_out, out_comment = _parse_line(paragraph[1])
                entries.append(Entry(check_in, check_out, in_comment, out_comment))
            elif len(paragraph) == 1 and is_last:
                check_in, in_comment = _parse_line(paragraph[0])
                current_session = Session(check_in, in_comment)
            else:
                raise EntryIncorrectNumberOfLines(len(paragraph), paragraph[0][0])
        return cls(entries=entries, current_session=current_session)

    def serialize(self, zone: dt.tzinfo = UTC) -> str:
        blocks = [
            "\n".join(
                (
                    _format_line(entry.check_in, entry.in_comment, zone),
                    _format_line(entry.check_out, entry.out_comment, zone),
                )
            )
            for entry in self.entries
        ]
        if self.current_session is not None:
            blocks.append(_format_line(self.current_session.check_in, self.current_session.in_comment, zone))
        if not blocks:
            return ""
        return "\n\n".join(blocks) + "\n"

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    def items(self) -> Iterator[Item]:
        yield from self.entries
        if self.current_session is not None:
            yield self.current_session

    def is_empty(self) -> bool:
        return not self.entries and self.current_session is None

    def latest(self) -> Optional[Item]:
        if self.current_session is not None:
            return self.current_session
        if self.entries:
            return self.entries[-1]
        return None

    def last_timestamp(self) -> Optional[dt.datetime]:
        latest = self.latest()
        if isinstance(latest, Session):
            return latest.check_in
        if isinstance(latest, Entry):
            return latest.check_out
        return None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def clock_in(self, now: dt.datetime, comment: Optional[str] = None) -> dt.datetime:
        if self.current_session is not None:
            raise AlreadyClockedIn()
        now = ensure_utc(now)
        if self.entries and now < self.entries[-1].check_out:
            raise CheckInBeforeLastCheckOut()
        self.current_session = Session(now, comment)
        return now

    def clock_out(self, now: dt.datetime, comment: Optional[str] = None) -> Tuple[dt.datetime, dt.timedelta]:
        if self.current_session is None:
            raise NotClockedIn()
        now = ensure_utc(now)
        entry = self.current_session.close(now, comment)
        self.entries.append(entry)
        self.current_session = None
        return now, entry.span()

    def undo(self) -> Optional[dt.datetime]:
        """Remove the most recent timestamp and return it.

        An open session is discarded; otherwise the last entry loses its
        check-out and becomes the open session again.
        """
        if self.current_session is not None:
            removed = self.current_session.check_in
            self.current_session = None
            return removed
        if not self.entries:
            return None
        entry = self.entries.pop()
        self.current_session = Session(entry.check_in, entry.in_comment)
        return entry.check_out

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------
    def crop(self, start: dt.datetime, end: dt.datetime, now: dt.datetime) -> List[DateTimeRange]:
        """Clip the ledger to the half-open window ``[start, end)``."""
        pairs: List[Tuple[dt.datetime, dt.datetime]] = [entry.interval() for entry in self.entries]
        if self.current_session is not None:
            check_in = self.current_session.check_in
            # The open session never runs past the window, nor before its own start.
            pairs.append((check_in, max(check_in, min(now, end))))
        return crop_pairs(pairs, start, end)

    def total_time(self, now: dt.datetime) -> dt.timedelta:
        total = sum((entry.span() for entry in self.entries), dt.timedelta(0))
        if self.current_session is not None:
            check_in = self.current_session.check_in
            total += self.current_session.close(max(check_in, now)).span()
        return total

    def todays_time(self, now: dt.datetime, zone: dt.tzinfo) -> dt.timedelta:
        day_start, day_end = day_bounds(local_date(now, zone), zone)
        ranges: List[DateTimeRange] = []
        latest_first = list(self.items())[::-1]
        for item in latest_first:
            item_start, item_end = item.interval(now)
            if item_end < day_start:
                break
            item_start = max(item_start, day_start)
            item_end = min(item_end, day_end)
            if item_end > item_start:
                ranges.append(DateTimeRange(item_start, item_end))
        return total_span(ranges)

    def days_time(self, day: dt.date, now: dt.datetime, zone: dt.tzinfo) -> dt.timedelta:
        start, end = day_bounds(day, zone)
        return total_span(self.crop(start, end, now))

    def current_session_time(self, now: dt.datetime) -> Optional[dt.timedelta]:
        if self.current_session is None:
            return None
        return self.current_session.elapsed(now)


__all__ = ["Record"]
