from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, List, Optional, Tuple

from .config import settings
from .models import Entry, Session, ensure_single_line
from .painter import paint_day_range
from .ranges import day_timespan
from .record import Record
from .storage import Ledger
from .time_range import DayResolution, TimeRangeTable
from .timeutil import describe_offset, human_readable_duration, local_date, utcnow

logger = logging.getLogger(__name__)


def _now(now: Optional[dt.datetime]) -> dt.datetime:
    return now if now is not None else utcnow()


def init_ledger(ledger: Ledger) -> Record:
    return ledger.init()


def clock_in(ledger: Ledger, comment: Optional[str] = None, now: Optional[dt.datetime] = None) -> dt.datetime:
    comment = ensure_single_line(comment)
    check_in = ledger.record.clock_in(_now(now), comment)
    ledger.commit()
    logger.info("Clocked in at %s", check_in.isoformat())
    return check_in


def clock_out(
    ledger: Ledger, comment: Optional[str] = None, now: Optional[dt.datetime] = None
) -> Tuple[dt.datetime, dt.timedelta]:
    comment = ensure_single_line(comment)
    check_out, since = ledger.record.clock_out(_now(now), comment)
    ledger.commit()
    logger.info("Clocked out at %s after %s", check_out.isoformat(), human_readable_duration(since))
    return check_out, since


def _state(record: Record) -> Tuple[str, Optional[dt.datetime]]:
    latest = record.latest()
    if latest is None:
        return "empty", None
    state = "clocked_in" if isinstance(latest, Session) else "clocked_out"
    return state, record.last_timestamp()


def undo(ledger: Ledger) -> Dict[str, Any]:
    removed = ledger.record.undo()
    if removed is None:
        return {"removed": None, "state": "empty", "since": None, "message": "Record is empty; nothing to undo."}
    ledger.commit()
    logger.info("Removed latest timestamp %s", removed.isoformat())
    state, since = _state(ledger.record)
    if state == "clocked_in":
        message = f"Now clocked in since {since.isoformat()}"
    elif state == "clocked_out":
        message = f"Now clocked out since {since.isoformat()}"
    else:
        message = "Record is now empty."
    return {"removed": removed, "state": state, "since": since, "message": message}


def status(record: Record, now: Optional[dt.datetime] = None) -> Dict[str, Any]:
    now = _now(now)
    state, since = _state(record)
    if since is None:
        return {"state": state, "since": None, "message": "No clock in/out records have been created."}
    ago = describe_offset(since - now)
    if state == "clocked_in":
        message = f"Currently clocked in ({ago})"
    else:
        message = f"Currently clocked out ({ago})"
    return {"state": state, "since": since, "message": message}


def stats(
    record: Record,
    zone: dt.tzinfo,
    day: Optional[dt.date] = None,
    now: Optional[dt.datetime] = None,
) -> Dict[str, Any]:
    now = _now(now)
    current = record.current_session_time(now)
    result: Dict[str, Any] = {
        "day": day,
        "total_seconds": record.total_time(now).total_seconds(),
        "today_seconds": record.todays_time(now, zone).total_seconds(),
        "day_seconds": None,
        "current_session_seconds": current.total_seconds() if current is not None else None,
    }
    if day is not None:
        result["day_seconds"] = record.days_time(day, now, zone).total_seconds()
    return result


def paint_calendar(
    record: Record,
    zone: dt.tzinfo,
    date_from: Optional[dt.date] = None,
    date_to: Optional[dt.date] = None,
    width: Optional[int] = None,
    now: Optional[dt.datetime] = None,
) -> List[str]:
    now = _now(now)
    today = local_date(now, zone)
    date_to = date_to or today
    date_from = date_from or date_to - dt.timedelta(days=settings.calendar_days - 1)
    return paint_day_range(record, date_from, date_to, width or settings.calendar_width, now, zone)


def day_view(
    record: Record,
    zone: dt.tzinfo,
    day: Optional[dt.date] = None,
    resolution: DayResolution = DayResolution.HOUR,
    width: Optional[int] = None,
    now: Optional[dt.datetime] = None,
) -> str:
    now = _now(now)
    window = day_timespan(day or local_date(now, zone), zone)
    table = TimeRangeTable.build(record, window, resolution.slots_per_day, now)
    return table.render(width or settings.day_width, settings.day_format, zone)


def dump(record: Record, zone: dt.tzinfo) -> List[Dict[str, Any]]:
    events: List[Dict[str, Any]] = []
    for item in record.items():
        events.append({"timestamp": item.check_in.astimezone(zone), "event": "in", "comment": item.in_comment})
        if isinstance(item, Entry):
            events.append({"timestamp": item.check_out.astimezone(zone), "event": "out", "comment": item.out_comment})
    return events
