from __future__ import annotations

from ..core.exceptions import ValidationError

# The deadline of a period falls in the following month, which must still be a valid date.
MIN_YEAR = 1
MAX_YEAR = 9998


def require_non_empty(value: str, field_name: str, *, message: str | None = None) -> str:
    if not value or not str(value).strip():
        raise ValidationError(message or f"{field_name} wajib diisi", field=field_name)
    return str(value).strip()


def require_month(month: int) -> int:
    try:
        month = int(month)
    except (TypeError, ValueError):
        raise ValidationError("Bulan tidak valid", field="month")
    if not 1 <= month <= 12:
        raise ValidationError("Bulan harus antara 1 dan 12", field="month")
    return month


def require_year(year: int) -> int:
    try:
        year = int(year)
    except (TypeError, ValueError):
        raise ValidationError("Tahun tidak valid", field="year")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Tahun harus antara {MIN_YEAR} dan {MAX_YEAR}", field="year")
    return year
