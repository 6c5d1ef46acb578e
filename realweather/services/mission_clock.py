"""Mission start time and date from an observation time plus offsets.

Time offsets use duration strings such as ``"-1h30m"``, ``"45m"`` or
``"1.5h"``; date offsets use signed calendar components such as ``"-1y"``
or ``"2mo3d"``. An unparsable offset is logged and treated as zero.
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime, timedelta, timezone

logger = logging.getLogger(__name__)

_DURATION_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DATE_PART_RE = re.compile(r"(\d+)(y|mo|d)")


def parse_duration(text: str) -> timedelta:
    """Parse a signed duration string. Raises ``ValueError`` when malformed."""
    text = text.strip()
    sign = 1
    if text and text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError("empty duration")

    total = timedelta(0)
    pos = 0
    while pos < len(text):
        match = _DURATION_PART_RE.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return sign * total


def parse_date_offset(text: str) -> tuple[int, int, int]:
    """Parse a signed ``y``/``mo``/``d`` offset into ``(years, months, days)``."""
    text = text.strip()
    sign = 1
    if text and text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return 0, 0, 0
    if not text:
        raise ValueError("empty date offset")

    parts = {"y": 0, "mo": 0, "d": 0}
    pos = 0
    while pos < len(text):
        match = _DATE_PART_RE.match(text, pos)
        if match is None:
            raise ValueError(f"invalid date offset {text!r}")
        parts[match.group(2)] += int(match.group(1))
        pos = match.end()
    return sign * parts["y"], sign * parts["mo"], sign * parts["d"]


def add_date_offset(day: date, years: int, months: int, days: int) -> date:
    """Shift by calendar years and months (clamping the day of month), then days."""
    month_index = day.year * 12 + (day.month - 1) + years * 12 + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    shifted = date(year, month, min(day.day, last_day))
    return shifted + timedelta(days=days)


def compute_start_time(reference: datetime, offset: str) -> tuple[int, datetime]:
    """Return seconds since midnight for ``reference`` shifted by ``offset``."""
    try:
        delta = parse_duration(offset)
    except ValueError as exc:
        logger.warning("Could not parse time offset of %s: %s", offset, exc)
        logger.warning("Using default offset of 0")
        delta = timedelta(0)
    shifted = reference + delta
    seconds = (shifted.hour * 60 + shifted.minute) * 60 + shifted.second
    return seconds, shifted


def compute_date(reference: datetime, offset: str) -> date:
    """Return the calendar date of ``reference`` shifted by ``offset``."""
    try:
        years, months, days = parse_date_offset(offset)
    except ValueError as exc:
        logger.warning("Could not parse date offset of %s: %s", offset, exc)
        logger.warning("Using default offset of 0")
        years = months = days = 0
    return add_date_offset(reference.date(), years, months, days)


def reference_time(observed: datetime, use_system: bool) -> datetime:
    """The observation time in UTC, or the current system time."""
    if use_system:
        return datetime.now().astimezone()
    return observed.astimezone(timezone.utc)
