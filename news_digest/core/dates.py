"""Timestamp helpers shared by feed parsing and result ordering."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
import time


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 or RFC 822 timestamp into an aware UTC datetime.

    Returns None for empty or unparsable input. Naive values are assumed
    to be UTC.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    dt: datetime | None = None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            dt = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def struct_time_to_iso(value: time.struct_time) -> str:
    """Convert a UTC struct_time (as produced by feedparser) to ISO 8601."""
    return datetime(*value[:6], tzinfo=timezone.utc).isoformat()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
