"""Calendar-day normalization shared by the streak and heatmap code.

A "day" is always a ``datetime.date`` in some timezone. Aware datetimes are
converted into that timezone before taking the date; naive datetimes are read
as local wall-clock time and keep their date.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from momentum.constants import DEFAULT_TIMEZONE, SUNDAY, WEEKDAY_TO_INDEX

logger = logging.getLogger(__name__)


def resolve_timezone(tz=None) -> tzinfo:
    if tz is None:
        tz = DEFAULT_TIMEZONE
    if isinstance(tz, tzinfo):
        return tz
    name = str(tz).strip() or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to UTC.", name)
        return timezone.utc


def parse_weekday(value) -> int:
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"Weekday index out of range: {value}")
    key = str(value or "").strip().lower()
    if key not in WEEKDAY_TO_INDEX:
        raise ValueError(f"Unknown weekday: {value!r}")
    return WEEKDAY_TO_INDEX[key]


def _parse_iso(value: str):
    raw = value.strip()
    if not raw:
        raise ValueError("Empty date string")
    if len(raw) == 10:
        return date.fromisoformat(raw)
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


def local_day(value, tz=None) -> date:
    """Return the calendar day of ``value`` as seen from ``tz``.

    Accepts ``date``, ``datetime`` or an ISO-8601 string. Raises ``ValueError``
    for anything that cannot be read as a day.
    """
    if isinstance(value, str):
        value = _parse_iso(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None and value.utcoffset() is not None:
            return value.astimezone(resolve_timezone(tz)).date()
        return value.date()
    if isinstance(value, date):
        return value
    raise ValueError(f"Cannot read a calendar day from {value!r}")


def as_utc(value, tz=None) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive datetimes and bare dates are read as wall-clock time in ``tz``.
    Raises ``ValueError`` like ``local_day``.
    """
    if isinstance(value, str):
        value = _parse_iso(value)
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            value = value.replace(tzinfo=resolve_timezone(tz))
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=resolve_timezone(tz)).astimezone(timezone.utc)
    raise ValueError(f"Cannot read a timestamp from {value!r}")


def parse_day(value, tz=None) -> date | None:
    try:
        return local_day(value, tz)
    except (TypeError, ValueError):
        logger.debug("Dropping malformed day value %r", value)
        return None


def today_in(tz=None, now: datetime | None = None) -> date:
    zone = resolve_timezone(tz)
    if now is None:
        return datetime.now(zone).date()
    return local_day(now, zone)


def day_key(day: date) -> str:
    return day.isoformat()


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def iter_days(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_start(day: date, week_starts_on: int = SUNDAY) -> date:
    offset = (day.weekday() - week_starts_on) % 7
    return day - timedelta(days=offset)
