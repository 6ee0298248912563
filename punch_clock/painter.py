from __future__ import annotations

import datetime as dt
from fractions import Fraction
from typing import Iterable, List

from .errors import RangeStartPosition
from .ranges import DateTimeRange, day_timespan, total_span
from .record import Record
from .timeutil import day_bounds, hours_and_minutes, human_readable_duration

FILLED = "▓"
LIGHT = "░"
DARK = "▒"

_MICROSECOND = dt.timedelta(microseconds=1)


def _micros(delta: dt.timedelta) -> int:
    return delta // _MICROSECOND


def tween(window: DateTimeRange, instant: dt.datetime) -> Fraction:
    """Exact position of ``instant`` within ``window`` as a fraction of its span."""
    assert instant in window, "instant outside of the painted window"
    return Fraction(_micros(instant - window.start), _micros(window.span()))


def _round_half_up(value: Fraction) -> int:
    return (value.numerator * 2 + value.denominator) // (value.denominator * 2)


class IntervalPainter:
    """Rasterize time ranges onto a fixed-width line of glyphs.

    Cell indices are ``round(width * fraction)`` with ties rounded up, computed
    on exact fractions so identical inputs always paint identical cells.
    """

    def __init__(self, width: int, filled: str = FILLED, light: str = LIGHT, dark: str = DARK) -> None:
        if width < 1:
            raise ValueError("width must be at least 1")
        self.width = width
        self.filled = filled
        self.light = light
        self.dark = dark

    def cells(self, ranges: Iterable[DateTimeRange], window: DateTimeRange) -> List[bool]:
        buffer = [False] * self.width
        for item in ranges:
            paint_start = _round_half_up(self.width * tween(window, item.start))
            paint_end = _round_half_up(self.width * tween(window, item.end))
            for index in range(paint_start, paint_end):
                buffer[index] = True
        return buffer

    def background(self, index: int, shift: bool) -> str:
        odd = index % 2 != 0
        return self.light if odd ^ shift else self.dark

    def paint(self, ranges: Iterable[DateTimeRange], window: DateTimeRange, background_shift: bool = False) -> str:
        return "".join(
            self.filled if occupied else self.background(index, background_shift)
            for index, occupied in enumerate(self.cells(ranges, window))
        )


def paint_day_range(
    record: Record,
    date_from: dt.date,
    date_to: dt.date,
    width: int,
    now: dt.datetime,
    zone: dt.tzinfo,
) -> List[str]:
    """Calendar lines for every day in ``[date_from, date_to]``, preceded by the total."""
    if date_to < date_from:
        raise RangeStartPosition()
    painter = IntervalPainter(width)
    window_start, _ = day_bounds(date_from, zone)
    _, window_end = day_bounds(date_to, zone)
    total = total_span(record.crop(window_start, window_end, now))
    lines = [f"Total time: {hours_and_minutes(total)}"]

    day = date_from
    index = 0
    while day <= date_to:
        window = day_timespan(day, zone)
        ranges = record.crop(window.start, window.end, now)
        line = f"{day.isoformat()} {painter.paint(ranges, window, index % 2 != 0)}"
        duration = total_span(ranges)
        if duration:
            line = f"{line} {human_readable_duration(duration)}"
        lines.append(line)
        day += dt.timedelta(days=1)
        index += 1
    return lines
