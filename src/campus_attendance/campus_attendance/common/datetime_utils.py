from __future__ import annotations

from datetime import date, datetime

from ..core.constants import WORK_HOURS_PRECISION


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def work_hours_between(check_in: datetime, check_out: datetime) -> float:
    """Hours between check-in and check-out, rounded to 2 decimals."""
    seconds = (check_out - check_in).total_seconds()
    return round(seconds / 3600, WORK_HOURS_PRECISION)
