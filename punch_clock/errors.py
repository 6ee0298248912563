from __future__ import annotations

from typing import Optional


class PunchClockError(Exception):
    """Base class for every error raised by the ledger core and its services."""

    status_code = 400
    message = "Punch clock error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


# Parse errors


class TimestampParseError(PunchClockError):
    status_code = 422

    def __init__(self, token: str, line: Optional[int] = None, reason: Optional[str] = None) -> None:
        self.token = token
        self.line = line
        location = f" on line {line}" if line is not None else ""
        suffix = f": {reason}" if reason else ""
        super().__init__(f"Date parsing error{location}: {token!r}{suffix}")


class EntryIncorrectNumberOfLines(PunchClockError):
    status_code = 422

    def __init__(self, count: int, line: Optional[int] = None) -> None:
        self.count = count
        self.line = line
        location = f" starting on line {line}" if line is not None else ""
        super().__init__(f"An entry{location} has an invalid number of lines ({count})")


# Invariant violations


class CheckOutBeforeCheckIn(PunchClockError):
    message = "There was an attempt to create an entry with check-out before check-in."


class CheckInBeforeLastCheckOut(PunchClockError):
    message = "There was an attempt to check in before the latest check-out."


class RangeStartPosition(PunchClockError):
    message = "Start must be before end"


class SessionOverlap(PunchClockError):
    status_code = 500
    message = "The current session overlaps a closed entry."


class CommentWithNewlines(PunchClockError):
    message = "Comments must not contain line breaks."


# State errors


class AlreadyClockedIn(PunchClockError):
    status_code = 409
    message = "Already clocked-in."


class NotClockedIn(PunchClockError):
    status_code = 409
    message = "Not currently clocked-in."


class AlreadyInitialized(PunchClockError):
    status_code = 409
    message = "Punch Clock is already initialized."


class Uninitialized(PunchClockError):
    status_code = 404
    message = "Punch Clock is not initialized"


# Arithmetic


class DateTimeOverflow(PunchClockError):
    message = "An entry was so long that it overflowed"


class TimezoneOutOfRange(PunchClockError):
    def __init__(self, offset: float) -> None:
        self.offset = offset
        super().__init__(f"Asked for an out-of-bounds timezone offset: {offset}")


__all__ = [
    "AlreadyClockedIn",
    "AlreadyInitialized",
    "CheckInBeforeLastCheckOut",
    "CheckOutBeforeCheckIn",
    "CommentWithNewlines",
    "DateTimeOverflow",
    "EntryIncorrectNumberOfLines",
    "NotClockedIn",
    "PunchClockError",
    "RangeStartPosition",
    "SessionOverlap",
    "TimestampParseError",
    "TimezoneOutOfRange",
    "Uninitialized",
]
