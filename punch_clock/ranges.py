from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .errors import RangeStartPosition
from .timeutil import day_bounds


@dataclass(frozen=True, slots=True)
class DateTimeRange:
    """A non-empty interval between two aware instants."""

    start: dt.datetime
    end: dt.datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise RangeStartPosition(
                f"Start must be before end (start {self.start.isoformat()}, end {self.end.isoformat()})"
            )

    def span(self) -> dt.timedelta:
        return self.end - self.start

    def bounds(self) -> Tuple[dt.datetime, dt.datetime]:
        return self.start, self.end

    def __contains__(self, instant: dt.datetime) -> bool:
        return self.start <= instant <= self.end

    def days_covered(self, zone: Optional[dt.tzinfo] = None) -> List[dt.date]:
        start = self.start.astimezone(zone) if zone else self.start
        end = self.end.astimezone(zone) if zone else self.end
        current = start.date()
        days: List[dt.date] = []
        while current <= end.date():
            days.append(current)
            current += dt.timedelta(days=1)
        return days


def total_span(ranges: Iterable[DateTimeRange]) -> dt.timedelta:
    return sum((item.span() for item in ranges), dt.timedelta(0))


def day_timespan(day: dt.date, zone: dt.tzinfo) -> DateTimeRange:
    start, end = day_bounds(day, zone)
    return DateTimeRange(start, end)


def overlaps_window(
    item_start: dt.datetime, item_end: dt.datetime, start: dt.datetime, end: dt.datetime
) -> bool:
    """Whether an item belongs to the half-open window ``[start, end)``.

    An item is kept when one of its bounds falls inside the window, or when it
    covers the whole window.
    """
    if start <= item_start < end or start <= item_end < end:
        return True
    return item_start < start and item_end >= end


def crop_pairs(
    pairs: Iterable[Tuple[dt.datetime, dt.datetime]], start: dt.datetime, end: dt.datetime
) -> List[DateTimeRange]:
    if end <= start:
        raise RangeStartPosition()
    kept = [(item_start, item_end) for item_start, item_end in pairs if overlaps_window(item_start, item_end, start, end)]
    if not kept:
        return []
    first_start, first_end = kept[0]
    kept[0] = (max(first_start, start), first_end)
    last_start, last_end = kept[-1]
    kept[-1] = (last_start, min(last_end, end))
    # Items collapsed onto a window edge carry no time.
    return [DateTimeRange(item_start, item_end) for item_start, item_end in kept if item_end > item_start]


def crop_ranges(ranges: Iterable[DateTimeRange], start: dt.datetime, end: dt.datetime) -> List[DateTimeRange]:
    return crop_pairs((item.bounds() for item in ranges), start, end)
