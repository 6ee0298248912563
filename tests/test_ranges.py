from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from conftest import at
from punch_clock.errors import RangeStartPosition
from punch_clock.ranges import DateTimeRange, crop_ranges, day_timespan, total_span


def test_range_requires_end_after_start():
    with pytest.raises(RangeStartPosition):
        DateTimeRange(at(3), at(2))
    with pytest.raises(RangeStartPosition):
        DateTimeRange(at(3), at(3))


def test_span_and_bounds():
    window = DateTimeRange(at(1, 15), at(3))
    assert window.span() == dt.timedelta(hours=1, minutes=45)
    assert window.bounds() == (at(1, 15), at(3))


def test_membership_includes_both_bounds():
    window = DateTimeRange(at(1), at(2))
    assert at(1) in window
    assert at(2) in window
    assert at(1, 30) in window
    assert at(2, 1) not in window


def test_days_covered():
    start = dt.datetime(2020, 1, 1, tzinfo=dt.timezone.utc)
    end = dt.datetime(2020, 1, 4, tzinfo=dt.timezone.utc)
    assert DateTimeRange(start, end).days_covered() == [
        dt.date(2020, 1, 1),
        dt.date(2020, 1, 2),
        dt.date(2020, 1, 3),
        dt.date(2020, 1, 4),
    ]


def test_days_covered_in_other_zone():
    window = DateTimeRange(at(23), at(1, day=2))
    plus_two = dt.timezone(dt.timedelta(hours=2))
    assert window.days_covered() == [dt.date(2023, 1, 1), dt.date(2023, 1, 2)]
    assert window.days_covered(plus_two) == [dt.date(2023, 1, 2)]


def test_total_span_folds_ranges():
    ranges = [DateTimeRange(at(0), at(1)), DateTimeRange(at(2), at(2, 30))]
    assert total_span(ranges) == dt.timedelta(hours=1, minutes=30)
    assert total_span([]) == dt.timedelta(0)


def test_day_timespan_follows_daylight_saving():
    berlin = ZoneInfo("Europe/Berlin")
    spring = day_timespan(dt.date(2023, 3, 26), berlin)
    autumn = day_timespan(dt.date(2023, 10, 29), berlin)
    assert spring.span() == dt.timedelta(hours=23)
    assert autumn.span() == dt.timedelta(hours=25)
    assert spring.start == dt.datetime(2023, 3, 25, 23, tzinfo=dt.timezone.utc)


def test_crop_ranges_clips_edges_and_is_idempotent():
    ranges = [
        DateTimeRange(at(0), at(2)),
        DateTimeRange(at(3), at(4)),
        DateTimeRange(at(5), at(8)),
    ]
    cropped = crop_ranges(ranges, at(1), at(6))
    assert cropped == [
        DateTimeRange(at(1), at(2)),
        DateTimeRange(at(3), at(4)),
        DateTimeRange(at(5), at(6)),
    ]
    assert all(at(1) <= item.start and item.end <= at(6) for item in cropped)
    assert crop_ranges(cropped, at(1), at(6)) == cropped


def test_crop_ranges_keeps_range_covering_window():
    cropped = crop_ranges([DateTimeRange(at(0), at(10))], at(2), at(3))
    assert cropped == [DateTimeRange(at(2), at(3))]


def test_crop_ranges_half_open_window():
    ranges = [DateTimeRange(at(0), at(1)), DateTimeRange(at(2), at(3))]
    # A range ending on the window start or starting on its end carries no time inside it.
    assert crop_ranges(ranges, at(1), at(2)) == []


def test_crop_ranges_rejects_inverted_window():
    with pytest.raises(RangeStartPosition):
        crop_ranges([], at(2), at(2))
    with pytest.raises(RangeStartPosition):
        crop_ranges([], at(3), at(2))
