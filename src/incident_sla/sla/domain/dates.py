"""
Date Normalization
==================

Conversion of heterogeneous spreadsheet cells into naive wall-clock
timestamps, and the display formats used throughout the report.

Accepted inputs:
- ``datetime`` / ``date`` values (as produced by spreadsheet readers)
- Spreadsheet serial day numbers (days since 1899-12-30, fraction = time of day)
- Strings such as ``"31-01-2024 08:30"``, ``"1/2/24 9:05:10 PM"`` or any
  calendar string the general parser understands (ISO-8601 and friends,
  read month-first when ambiguous: ``"03/04/2024"`` is 4 March)

All timestamps are naive; timezone information found in a string is dropped
so that every value is compared as local wall-clock time.
"""

import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser


UNIX_EPOCH = datetime(1970, 1, 1)

# Days between 1899-12-30 (serial day zero) and the Unix epoch
UNIX_EPOCH_SERIAL = 25569

MILLISECONDS_PER_DAY = 86_400_000

_DAY_FIRST_PATTERN = re.compile(
    r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})[ ,T](\d{1,2}):(\d{2})(?::(\d{2}))?\s*(AM|PM|am|pm)?$"
)

# Missing fields in a free-form string are filled from here, never from "today"
_FALLBACK_DEFAULT = datetime(1900, 1, 1)


class DateNormalizer:
    """
    Pure functions for timestamp parsing and formatting.

    Stateless utility class; ``parse`` never raises, it returns ``None`` for
    anything it cannot turn into a timestamp.
    """

    @staticmethod
    def parse(value: Any) -> Optional[datetime]:
        """
        Parse a cell value into a naive datetime.

        Args:
            value: datetime/date, serial day number, or string

        Returns:
            The parsed timestamp, or None when the value is not a date
        """
        if value is None:
            return None

        if isinstance(value, datetime):
            return value.replace(tzinfo=None)

        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)

        # bool is an int subclass but never a serial date
        if isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            return DateNormalizer.from_serial(value)

        text = str(value).strip()
        if not text:
            return None

        match = _DAY_FIRST_PATTERN.match(text)
        if match:
            return DateNormalizer._from_day_first_match(match)

        return DateNormalizer._parse_free_form(text)

    @staticmethod
    def from_serial(serial: float) -> Optional[datetime]:
        """
        Convert a spreadsheet serial day number to a datetime.

        The calendar fields are rebuilt from the epoch offset rather than
        through a Unix timestamp, so no local timezone is applied.
        """
        if not math.isfinite(serial):
            return None
        milliseconds = round((serial - UNIX_EPOCH_SERIAL) * MILLISECONDS_PER_DAY)
        try:
            return UNIX_EPOCH + timedelta(milliseconds=milliseconds)
        except OverflowError:
            return None

    @staticmethod
    def _from_day_first_match(match: "re.Match[str]") -> Optional[datetime]:
        day, month, year, hour, minute = (int(match.group(i)) for i in range(1, 6))
        second = int(match.group(6)) if match.group(6) else 0
        meridiem = match.group(7)

        if year < 100:
            year += 2000

        if meridiem:
            if meridiem.lower() == "pm" and hour < 12:
                hour += 12
            elif meridiem.lower() == "am" and hour == 12:
                hour = 0

        try:
            return datetime(year, month, day, hour, minute, second)
        except ValueError:
            return None

    @staticmethod
    def _parse_free_form(text: str) -> Optional[datetime]:
        try:
            parsed = date_parser.parse(
                text,
                dayfirst=False,
                default=_FALLBACK_DEFAULT,
            )
        except (ValueError, OverflowError):
            return None
        return parsed.replace(tzinfo=None)

    @staticmethod
    def format_canonical(timestamp: Optional[datetime]) -> str:
        """Render ``YYYY-MM-DD HH:MM:SS`` (empty string for None)."""
        if timestamp is None:
            return ""
        return timestamp.strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def format_short(timestamp: Optional[datetime]) -> str:
        """Render ``DD-MM-YYYY`` (empty string for None)."""
        if timestamp is None:
            return ""
        return timestamp.strftime("%d-%m-%Y")

    @staticmethod
    def format_duration(milliseconds: Optional[float]) -> str:
        """
        Render a duration as ``"{d}d {h}h {m}m {s}s"``.

        Negative durations are rendered by magnitude; callers that care about
        ordering inspect the interval's sign separately.
        """
        if milliseconds is None or not math.isfinite(milliseconds):
            return ""
        total_seconds = int(abs(milliseconds) // 1000)
        days, remainder = divmod(total_seconds, 86_400)
        hours, remainder = divmod(remainder, 3_600)
        minutes, seconds = divmod(remainder, 60)
        return f"{days}d {hours}h {minutes}m {seconds}s"


def to_milliseconds(delta: timedelta) -> int:
    """Signed whole milliseconds of a timedelta."""
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
