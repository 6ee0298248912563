from __future__ import annotations

import datetime as dt
import re
from typing import Tuple

from .errors import DateTimeOverflow, TimestampParseError

UTC = dt.timezone.utc

TIMESTAMP_WIDTH = 32

_FRACTION = re.compile(r"\.(\d+)")


def utcnow() -> dt.datetime:
    return dt.datetime.now(UTC)


def ensure_utc(value: dt.datetime, zone: dt.tzinfo = UTC) -> dt.datetime:
    """Normalise ``value`` to UTC, reading naive values as wall time in ``zone``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(UTC)


def parse_timestamp(token: str, line: int | None = None) -> dt.datetime:
    """Parse an RFC 3339 timestamp; an explicit offset is mandatory."""
    text = token.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat wants microseconds; nanosecond writers are truncated.
    text = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        value = dt.datetime.fromisoformat(text)
    except ValueError as exc:
        raise TimestampParseError(token, line, str(exc)) from exc
    if value.tzinfo is None:
        raise TimestampParseError(token, line, "missing UTC offset")
    return value.astimezone(UTC)


def format_timestamp(value: dt.datetime, zone: dt.tzinfo = UTC) -> str:
    return value.astimezone(zone).isoformat(timespec="microseconds")


def checked_add(value: dt.datetime, delta: dt.timedelta) -> dt.datetime:
    try:
        return value + delta
    except OverflowError as exc:
        raise DateTimeOverflow() from exc


def day_bounds(day: dt.date, zone: dt.tzinfo) -> Tuple[dt.datetime, dt.datetime]:
    start_local = dt.datetime.combine(day, dt.time.min, tzinfo=zone)
    # Wall-clock addition: the next local midnight, whatever the DST shift.
    end_local = checked_add(start_local, dt.timedelta(days=1))
    return start_local.astimezone(UTC), end_local.astimezone(UTC)


def local_date(value: dt.datetime, zone: dt.tzinfo) -> dt.date:
    return value.astimezone(zone).date()


def human_readable_duration(duration: dt.timedelta) -> str:
    total_minutes = int(abs(duration).total_seconds()) // 60
    days, remainder = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(remainder, 60)
    if days > 0:
        return f"{days} days, {hours} hours, {minutes} minutes"
    if hours > 0:
        return f"{hours} hours, {minutes} minutes"
    return f"{minutes} minutes"


def hours_and_minutes(duration: dt.timedelta) -> str:
    total_minutes = int(duration.total_seconds()) // 60
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours} hours, {minutes} minutes"


def describe_offset(delta: dt.timedelta) -> str:
    """Render ``instant - now`` as "... ago" or "... from now"."""
    suffix = "ago" if delta < dt.timedelta(0) else "from now"
    return f"{human_readable_duration(delta)} {suffix}"
