from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Tuple

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string into date. Raises ValueError otherwise."""
    if not _ISO_DATE.fullmatch(value or ""):
        raise ValueError(f"not a YYYY-MM-DD date: {value!r}")
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def date_stamp(value: date) -> str:
    return value.strftime("%Y%m%d")


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Return [00:00:00, 23:59:59.999999] of a calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def trailing_window(today: date, days: int) -> Tuple[datetime, datetime]:
    """Window covering `days` calendar days ending with `today` (inclusive)."""
    start_day = today - timedelta(days=days - 1)
    return datetime.combine(start_day, time.min), datetime.combine(today, time.max)


def day_label(value: date) -> str:
    return value.strftime("%d %b")


def hour_label(hour: int) -> str:
    suffix = "PM" if hour >= 12 else "AM"
    hour12 = 12 if hour % 12 == 0 else hour % 12
    return f"{hour12:02d}:00 {suffix}"


def to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
