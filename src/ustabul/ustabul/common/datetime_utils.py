from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Tarix formatı yanlışdır (YYYY-MM-DD)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_start(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, 1)


def previous_month_start(moment: datetime) -> datetime:
    if moment.month == 1:
        return datetime(moment.year - 1, 12, 1)
    return datetime(moment.year, moment.month - 1, 1)


def iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def shift_month(moment: datetime, months: int) -> datetime:
    """First day of the month `months` away from `moment` (negative goes back)."""
    index = moment.year * 12 + (moment.month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1)
