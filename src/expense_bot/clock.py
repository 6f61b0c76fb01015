"""Business-day helpers. The shop's calendar day is defined in its local timezone."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


def local_today(tz_name: str) -> date:
    """Return today's date in the configured timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def days_ago(today: date, days: int) -> date:
    return today - timedelta(days=days)


def event_date(timestamp_ms: int | None, tz_name: str) -> date | None:
    """Convert a LINE event timestamp (epoch ms) to a local calendar date."""
    if timestamp_ms is None:
        return None
    return datetime.fromtimestamp(timestamp_ms / 1000, ZoneInfo(tz_name)).date()
