from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from ..common.datetime_utils import parse_iso_date, period_key, to_calendar_date
from ..common.validators import require_month, require_year
from ..core.exceptions import DataShapeError, NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .engine import BillingCycleEngine
from .model import PaymentStatus

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("all", "unpaid", "paid")


@dataclass(frozen=True)
class PaymentRow:
    student: Student
    deadline: Optional[date]
    status: PaymentStatus

    def to_dict(self) -> dict:
        s = self.student
        return {
            "student_id": s.student_id,
            "name": s.name,
            "education_level": s.education_level.value,
            "registration_date": s.registration_date.isoformat() if s.registration_date else None,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            **self.status.to_dict(),
        }


@dataclass(frozen=True)
class PaymentOverview:
    month: int
    year: int
    rows: list[PaymentRow]
    total: int
    paid: int
    unpaid: int

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "summary": {"total": self.total, "paid": self.paid, "unpaid": self.unpaid},
            "rows": [r.to_dict() for r in self.rows],
        }


class PaymentService:
    """Use cases behind the admin payment monitoring screen."""

    def __init__(self, students: StudentRepository, engine: Optional[BillingCycleEngine] = None):
        self._students = students
        self._engine = engine or BillingCycleEngine()

    def _get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Siswa tidak ditemukan")
        return student

    def monthly_overview(self, *, month: int, year: int, search: str = "", status_filter: str = "all") -> PaymentOverview:
        month, year = require_month(month), require_year(year)
        if status_filter not in STATUS_FILTERS:
            raise ValidationError("Filter status tidak dikenal", field="status")

        needle = (search or "").strip().lower()
        rows: list[PaymentRow] = []
        for student in self._students.list_students():
            if needle and needle not in student.name.lower():
                continue
            status = self._engine.get_payment_status(student, month, year)
            if status_filter == "unpaid" and not status.state.is_unpaid:
                continue
            if status_filter == "paid" and not status.state.is_paid:
                continue
            rows.append(PaymentRow(student=student, deadline=self._engine.get_deadline(student, month, year), status=status))

        return PaymentOverview(
            month=month,
            year=year,
            rows=rows,
            total=len(rows),
            paid=sum(1 for r in rows if r.status.state.is_paid),
            unpaid=sum(1 for r in rows if r.status.state.is_unpaid),
        )

    def student_year_detail(self, *, student_id: int, year: int) -> list[dict]:
        year = require_year(year)
        student = self._get_student(student_id)
        out = []
        for month in range(1, 13):
            deadline = self._engine.get_deadline(student, month, year)
            out.append(
                {
                    "period": period_key(year, month),
                    "month": month,
                    "deadline": deadline.isoformat() if deadline else None,
                    **self._engine.get_payment_status(student, month, year).to_dict(),
                }
            )
        return out

    def record_payment(self, *, student_id: int, month: int, year: int, payment_date: Optional[str]) -> PaymentStatus:
        value = (payment_date or "").strip()
        if value:
            try:
                parse_iso_date(value)
            except ValueError:
                raise ValidationError("Tanggal bayar harus berformat YYYY-MM-DD", field="payment_date")

        student = self._get_student(student_id)
        payments = self._engine.record_payment(student, month, year, value)
        self._students.update_payments(student.student_id, payments)
        logger.info(
            "Payment %s for student %s period %s",
            "recorded" if value else "cleared",
            student.student_id,
            period_key(year, month),
        )

        return self._engine.get_payment_status(replace(student, payments=payments), month, year)

    def update_registration_date(self, *, student_id: int, registration_date) -> date:
        try:
            new_date = to_calendar_date(registration_date)
        except DataShapeError:
            raise ValidationError("Tanggal daftar tidak valid", field="registration_date")

        student = self._get_student(student_id)
        self._students.update_registration_date(student.student_id, new_date)
        logger.info("Registration date of student %s set to %s", student.student_id, new_date.isoformat())
        return new_date
