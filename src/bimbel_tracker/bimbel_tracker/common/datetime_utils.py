from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Any

from ..core.exceptions import DataShapeError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM string into time."""
    return datetime.strptime(value, "%H:%M").time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_calendar_date(value: Any) -> date:
    """Normalize a date-like value into a plain calendar date.

    Accepted shapes:
    - datetime.date / datetime.datetime
    - ISO string ('2025-03-10', '2025-03-10T08:00:00', '2025-03-10T01:00:00.000Z')
    - store timestamp wrappers exposing ``to_date()`` or ``to_datetime()``
    """

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise DataShapeError("Tanggal kosong")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return parse_iso_date(text[:10])
        except ValueError:
            raise DataShapeError(f"Format tanggal tidak dikenali: {value!r}")

    for attr in ("to_date", "to_datetime"):
        converter = getattr(value, attr, None)
        if callable(converter):
            return to_calendar_date(converter())

    raise DataShapeError(f"Tipe tanggal tidak didukung: {type(value)!r}")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, days_in_month(year, month))


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, pulling ``day`` back to the month's last day when it overflows."""
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(value: date, months: int) -> date:
    index = value.year * 12 + (value.month - 1) + months
    year, month_index = divmod(index, 12)
    return clamped_date(year, month_index + 1, value.day)


def period_key(year: int, month: int) -> str:
    """Billing period key, always 'YYYY-MM'."""
    return f"{int(year)}-{int(month):02d}"
