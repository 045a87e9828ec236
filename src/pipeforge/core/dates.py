"""Recognizing and parsing the date strings found in fetched data.

Feeds and APIs hand back dates in a handful of shapes. A string only
counts as a date if it matches one of the known shapes and also parses,
so "2024-13-45" and free text are left alone.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # ISO 8601
    re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?Z?$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?[+-]\d{2}:\d{2}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    # RFC 2822 (RSS pubDate)
    re.compile(r"^[A-Za-z]{3},?\s+\d{1,2}\s+[A-Za-z]{3}\s+\d{4}\s+\d{2}:\d{2}:\d{2}"),
    # US-style numeric dates
    re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"),
    re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$"),
    # "January 5, 2024"
    re.compile(r"^[A-Za-z]+\s+\d{1,2},?\s+\d{4}$"),
)

_NUMERIC_FORMATS = ("%m/%d/%Y", "%m-%d-%Y")
_LONG_FORMATS = ("%B %d, %Y", "%B %d %Y", "%b %d, %Y", "%b %d %Y")


def _as_utc(value: datetime) -> datetime:
    # Naive values are taken as UTC so every parsed date is comparable.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_iso_datetime(value: str) -> datetime | None:
    """Parse an ISO 8601 date or datetime; None if it does not parse."""
    try:
        return _as_utc(datetime.fromisoformat(value.strip()))
    except ValueError:
        return None


def _parse_shaped(value: str) -> datetime | None:
    parsed = parse_iso_datetime(value)
    if parsed is not None:
        return parsed
    try:
        return _as_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError, IndexError):
        pass
    for fmt in (*_NUMERIC_FORMATS, *_LONG_FORMATS):
        try:
            return _as_utc(datetime.strptime(value, fmt))
        except ValueError:
            continue
    return None


def looks_like_date(value: str) -> bool:
    return any(pattern.match(value) for pattern in DATE_PATTERNS)


def parse_date_string(value: str) -> datetime | None:
    """Parse a string in one of the known date shapes.

    Returns:
        Timezone-aware UTC datetime, or None if the string is not a
        recognized date.

    Examples:
        >>> parse_date_string("2024-01-15").isoformat()
        '2024-01-15T00:00:00+00:00'
        >>> parse_date_string("Mon, 15 Jan 2024 10:30:00 GMT").hour
        10
        >>> parse_date_string("not a date") is None
        True
    """
    if not looks_like_date(value):
        return None
    return _parse_shaped(value.strip())


def to_iso_string(value: datetime) -> str:
    """Render as UTC ISO 8601 with millisecond precision and a Z suffix."""
    return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
