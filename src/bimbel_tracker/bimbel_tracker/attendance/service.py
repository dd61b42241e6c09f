from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.validators import require_month, require_non_empty, require_year
from ..core.constants import DEFAULT_RECORD_LIMIT
from ..core.enums import AttendanceStatus, EducationLevel, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import AttendanceRecord, RecordFilters
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "date",
    "education_level",
    "class_type",
    "location",
    "time_start",
    "time_end",
    "student_name",
    "tutor",
    "status",
    "notes",
)


class AttendanceService:
    """Review and maintenance of committed attendance records."""

    def __init__(self, attendance: AttendanceRepository, *, default_limit: int = DEFAULT_RECORD_LIMIT):
        self._attendance = attendance
        self._default_limit = int(default_limit)

    def build_filters(
        self,
        *,
        tutor: Optional[str] = None,
        class_type: Optional[str] = None,
        education_level: Optional[str] = None,
        location: Optional[str] = None,
        student_name: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> RecordFilters:
        if bool(month) != bool(year):
            raise ValidationError("Bulan dan tahun harus diisi bersamaan", field="month")
        return RecordFilters(
            tutor=(tutor or "").strip() or None,
            class_type=class_type or None,
            education_level=education_level or None,
            location=location or None,
            student_name=(student_name or "").strip() or None,
            month=require_month(month) if month else None,
            year=require_year(year) if year else None,
            limit=int(limit) if limit else self._default_limit,
        )

    def list_records(self, filters: RecordFilters, *, current_role: Role, current_name: str) -> Sequence[AttendanceRecord]:
        # Tutors only ever see their own sessions.
        if current_role != Role.ADMIN:
            filters = replace(filters, tutor=current_name)
        return self._attendance.list_records(filters)

    @staticmethod
    def _clean_updates(updates: Mapping[str, object]) -> dict:
        unknown = sorted(set(updates) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Field tidak dapat diubah: {', '.join(unknown)}", field=unknown[0])

        clean: dict = {}
        for key, raw in updates.items():
            value = str(raw if raw is not None else "").strip()
            if key == "notes":
                clean[key] = value
                continue

            value = require_non_empty(value, key)
            if key == "date":
                try:
                    clean[key] = parse_iso_date(value)
                except ValueError:
                    raise ValidationError("Tanggal harus berformat YYYY-MM-DD", field=key)
            elif key == "status":
                try:
                    clean[key] = AttendanceStatus(value)
                except ValueError:
                    raise ValidationError("Status kehadiran tidak dikenal", field=key)
            elif key == "education_level":
                if EducationLevel.parse(value) == EducationLevel.UNKNOWN:
                    raise ValidationError("Tingkat pendidikan tidak dikenal", field=key)
                clean[key] = value
            elif key in ("time_start", "time_end"):
                try:
                    parse_hhmm(value)
                except ValueError:
                    raise ValidationError("Waktu harus berformat HH:MM", field=key)
                clean[key] = value
            else:
                clean[key] = value
        return clean

    def update_record(self, record_id: int, updates: Mapping[str, object], *, current_role: Role, current_name: str) -> AttendanceRecord:
        existing = self._attendance.get_by_id(int(record_id))
        if not existing:
            raise NotFoundError("Data presensi tidak ditemukan")
        if current_role != Role.ADMIN and existing.tutor != current_name:
            raise AuthorizationError("Anda hanya dapat mengubah presensi sesi Anda sendiri")

        clean = self._clean_updates(updates)
        if not clean:
            raise ValidationError("Tidak ada perubahan")

        self._attendance.update_record(existing.record_id, clean)
        updated = self._attendance.get_by_id(existing.record_id)
        if not updated:
            raise NotFoundError("Data presensi tidak ditemukan")
        return updated

    def delete_record(self, record_id: int, *, current_role: Role, current_name: str) -> None:
        existing = self._attendance.get_by_id(int(record_id))
        if not existing:
            raise NotFoundError("Data presensi tidak ditemukan")
        if current_role != Role.ADMIN and existing.tutor != current_name:
            raise AuthorizationError("Anda hanya dapat menghapus presensi sesi Anda sendiri")
        self._attendance.delete_record(existing.record_id)
        logger.info("Deleted attendance record %s", existing.record_id)

    def delete_all(self, *, current_role: Role) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Anda tidak memiliki akses")
        count = self._attendance.delete_all()
        logger.warning("Deleted all attendance records (%d rows)", count)
        return count
