"""Datetime parsing and the output formats used by exports."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import formatdate

import pendulum

# WordPress post_date format: no timezone suffix, no fractional seconds
WP_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_datetime(value: str | datetime, default_tz: str = "UTC") -> datetime:
    """Parse a lax datetime string into a timezone-aware datetime.

    Accepts ISO 8601 variants (with ``T`` or space separator, with or without
    ``Z``/offset, with or without fractional seconds) and bare dates.
    Missing timezone defaults to default_tz.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            tz = pendulum.timezone(default_tz)
            value = value.replace(tzinfo=tz)  # type: ignore[arg-type]
        return value

    value_str = value.strip()

    parsed = pendulum.parse(value_str, tz=default_tz, strict=False)
    if not isinstance(parsed, pendulum.DateTime):
        # pendulum.parse returns Date for date-only strings
        parsed = pendulum.datetime(
            parsed.year, parsed.month, parsed.day, tz=default_tz  # type: ignore[union-attr]
        )
    return parsed  # type: ignore[return-value]


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def format_iso(dt: datetime) -> str:
    """Format datetime as ISO 8601 in UTC with millisecond precision and ``Z`` suffix.

    Matches JavaScript's ``Date.prototype.toISOString``.
    """
    dt = ensure_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def format_rfc1123(dt: datetime) -> str:
    """Format datetime as an RFC 1123 date in GMT, e.g. ``Mon, 19 Oct 2026 12:00:00 GMT``."""
    return formatdate(ensure_utc(dt).timestamp(), usegmt=True)


def format_wp_date(dt: datetime) -> str:
    """Format datetime for ``wp:post_date``: ``YYYY-MM-DD HH:MM:SS`` in UTC."""
    return ensure_utc(dt).strftime(WP_DATE_FORMAT)
