from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import date
from typing import Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local, to_calendar_date
from ..common.validators import require_non_empty
from ..core.enums import EducationLevel, StudentStatus
from ..core.exceptions import DataShapeError, NotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_PHONE_RE = re.compile(r"^[0-9+\-\s()]*$")

PROFILE_FIELDS = ("name", "education_level", "status", "phone", "parent_name", "notes")


class StudentService:
    """Student maintenance kept by admins.

    Soft delete keeps the row so its payment history survives; hard delete is
    for cleaning up duplicates and is permanent.
    """

    def __init__(self, students: StudentRepository, *, today: Optional[Callable[[], date]] = None):
        self._students = students
        self._today = today or (lambda: now_local().date())

    def _get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Siswa tidak ditemukan")
        return student

    @staticmethod
    def _clean_profile(data: Mapping[str, object]) -> dict:
        clean: dict = {}
        for key, raw in data.items():
            value = str(raw if raw is not None else "").strip()
            if key == "name":
                clean[key] = require_non_empty(value, key, message="Nama siswa harus diisi")
            elif key == "education_level":
                level = EducationLevel.parse(value) if value else EducationLevel.UNKNOWN
                if value and level == EducationLevel.UNKNOWN:
                    raise ValidationError("Tingkat pendidikan tidak dikenal", field=key)
                clean[key] = level
            elif key == "status":
                try:
                    clean[key] = StudentStatus(value or StudentStatus.ACTIVE.value)
                except ValueError:
                    raise ValidationError("Status siswa harus Aktif, Cuti atau Off", field=key)
            elif key == "phone":
                if not _PHONE_RE.match(value):
                    raise ValidationError("Format nomor telepon tidak valid", field=key)
                clean[key] = value
            else:
                clean[key] = value
        return clean

    def list_students(self, *, include_deleted: bool = False) -> Sequence[Student]:
        return self._students.list_students(include_deleted=include_deleted)

    def create_student(self, data: Mapping[str, object]) -> Student:
        unknown = sorted(set(data) - set(PROFILE_FIELDS) - {"registration_date"})
        if unknown:
            raise ValidationError(f"Field tidak dikenal: {', '.join(unknown)}", field=unknown[0])

        profile = self._clean_profile({"name": data.get("name"), **{k: v for k, v in data.items() if k in PROFILE_FIELDS}})

        registration_date = self._today()
        if data.get("registration_date"):
            try:
                registration_date = to_calendar_date(data["registration_date"])
            except DataShapeError:
                raise ValidationError("Tanggal daftar tidak valid", field="registration_date")

        student = Student(student_id=0, registration_date=registration_date, **profile)
        student_id = self._students.create_student(student)
        logger.info("Created student %s (%s)", student_id, student.name)
        return replace(student, student_id=student_id)

    def update_student(self, student_id: int, updates: Mapping[str, object]) -> Student:
        unknown = sorted(set(updates) - set(PROFILE_FIELDS))
        if unknown:
            raise ValidationError(f"Field tidak dapat diubah: {', '.join(unknown)}", field=unknown[0])
        clean = self._clean_profile(updates)
        if not clean:
            raise ValidationError("Tidak ada perubahan")

        student = self._get_student(student_id)
        self._students.update_student(student.student_id, clean)
        logger.info("Updated student %s: %s", student.student_id, ", ".join(sorted(clean)))
        return self._get_student(student.student_id)

    def soft_delete(self, student_id: int) -> None:
        if not self._students.set_deleted(int(student_id), is_deleted=True):
            raise NotFoundError("Siswa tidak ditemukan")
        logger.info("Soft deleted student %s", student_id)

    def restore(self, student_id: int) -> None:
        if not self._students.set_deleted(int(student_id), is_deleted=False):
            raise NotFoundError("Siswa tidak ditemukan")
        logger.info("Restored student %s", student_id)

    def hard_delete(self, student_id: int) -> None:
        if not self._students.hard_delete(int(student_id)):
            raise NotFoundError("Siswa tidak ditemukan")
        logger.warning("Permanently deleted student %s", student_id)
