"""Ledger items: closed entries and the open session."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .errors import CheckOutBeforeCheckIn, CommentWithNewlines


def ensure_single_line(comment: Optional[str]) -> Optional[str]:
    """Validate a user supplied comment; blank comments become ``None``."""
    if comment is None:
        return None
    if "\n" in comment or "\r" in comment:
        raise CommentWithNewlines()
    stripped = comment.strip()
    return stripped or None


@dataclass(frozen=True, slots=True)
class Entry:
    """A closed work interval."""

    check_in: dt.datetime
    check_out: dt.datetime
    in_comment: Optional[str] = None
    out_comment: Optional[str] = None

    def __post_init__(self) -> None:
        if self.check_out < self.check_in:
            raise CheckOutBeforeCheckIn()

    def span(self) -> dt.timedelta:
        return self.check_out - self.check_in

    def interval(self, now: Optional[dt.datetime] = None) -> Tuple[dt.datetime, dt.datetime]:
        return self.check_in, self.check_out


@dataclass(frozen=True, slots=True)
class Session:
    """A check-in that has not been checked out yet."""

    check_in: dt.datetime
    in_comment: Optional[str] = None

    def interval(self, now: dt.datetime) -> Tuple[dt.datetime, dt.datetime]:
        return self.check_in, now

    def elapsed(self, now: dt.datetime) -> dt.timedelta:
        return now - self.check_in

    def close(self, now: dt.datetime, out_comment: Optional[str] = None) -> Entry:
        return Entry(self.check_in, now, self.in_comment, out_comment)


Item = Union[Entry, Session]


__all__ = ["Entry", "Item", "Session", "ensure_single_line"]
