"""Datetime utilities for timezone-aware UTC timestamps and event dates.

Usage:
    from potluck.utils.datetime_utils import utc_now

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)
"""

from datetime import datetime, timezone
from typing import Optional

EVENT_DATETIME_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d")


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def parse_event_datetime(text: Optional[str]) -> Optional[datetime]:
    """Parse an event date typed as "YYYY-MM-DD HH:MM" or "YYYY-MM-DD".

    Returns:
        Naive local datetime, or None for blank input

    Raises:
        ValueError: If the text matches neither format
    """
    text = (text or "").strip()
    if not text:
        return None
    for fmt in EVENT_DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"Invalid event date '{text}', expected YYYY-MM-DD HH:MM")


def format_event_datetime(value: Optional[datetime]) -> str:
    """Inverse of parse_event_datetime; empty string for None."""
    if value is None:
        return ""
    return value.strftime(EVENT_DATETIME_FORMATS[0])
