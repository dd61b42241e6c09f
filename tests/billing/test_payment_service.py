from __future__ import annotations

from datetime import date

import pytest

from bimbel_tracker.billing.engine import BillingCycleEngine
from bimbel_tracker.billing.service import PaymentService
from bimbel_tracker.core.enums import PaymentState
from bimbel_tracker.core.exceptions import NotFoundError, ValidationError
from bimbel_tracker.students.model import Student

from conftest import InMemoryStudents


def make_service(today=date(2025, 3, 20)):
    students = InMemoryStudents(
        [
            Student(student_id=1, name="Budi Santoso", registration_date=date(2025, 1, 10), payments={"2025-02": "2025-03-05"}),
            Student(student_id=2, name="Citra", registration_date=date(2025, 1, 15)),
            Student(student_id=3, name="Dewi", registration_date=date(2025, 4, 1)),
            Student(student_id=4, name="Budi Lama", registration_date=date(2024, 1, 1), is_deleted=True),
        ]
    )
    return PaymentService(students, BillingCycleEngine(today=lambda: today)), students


def test_monthly_overview_counts_paid_and_unpaid():
    svc, _ = make_service()

    overview = svc.monthly_overview(month=2, year=2025)

    by_name = {r.student.name: r.status.state for r in overview.rows}
    assert by_name == {
        "Budi Santoso": PaymentState.PAID,
        "Citra": PaymentState.OVERDUE,
        "Dewi": PaymentState.NONE,
    }
    assert (overview.total, overview.paid, overview.unpaid) == (3, 1, 1)


def test_monthly_overview_filters_by_search_and_status():
    svc, _ = make_service()

    assert [r.student.name for r in svc.monthly_overview(month=2, year=2025, search="budi").rows] == ["Budi Santoso"]
    assert [r.student.name for r in svc.monthly_overview(month=2, year=2025, status_filter="unpaid").rows] == ["Citra"]
    assert [r.student.name for r in svc.monthly_overview(month=2, year=2025, status_filter="paid").rows] == ["Budi Santoso"]

    with pytest.raises(ValidationError):
        svc.monthly_overview(month=2, year=2025, status_filter="late")


def test_overview_row_serializes_deadline_and_status():
    svc, _ = make_service()

    row = svc.monthly_overview(month=2, year=2025, search="citra").to_dict()["rows"][0]

    assert row["deadline"] == "2025-03-15"
    assert row["status"] == "overdue"
    assert row["label"] == "Telat"
    assert row["is_overdue"] is True


def test_student_year_detail_has_twelve_periods():
    svc, _ = make_service()

    months = svc.student_year_detail(student_id=1, year=2025)

    assert [m["period"] for m in months][:3] == ["2025-01", "2025-02", "2025-03"]
    assert len(months) == 12
    assert months[1]["status"] == "paid"
    assert months[0]["deadline"] == "2025-02-10"


def test_record_payment_persists_and_returns_new_status():
    svc, students = make_service()

    status = svc.record_payment(student_id=2, month=2, year=2025, payment_date="2025-03-16")

    assert status.state == PaymentState.PAID_LATE
    assert students.get_by_id(2).payments == {"2025-02": "2025-03-16"}


def test_clearing_payment_reverts_to_overdue():
    svc, students = make_service()

    status = svc.record_payment(student_id=1, month=2, year=2025, payment_date="")

    assert status.state == PaymentState.OVERDUE
    assert students.get_by_id(1).payments == {}


def test_record_payment_validates_input():
    svc, _ = make_service()

    with pytest.raises(ValidationError) as exc:
        svc.record_payment(student_id=1, month=2, year=2025, payment_date="16/03/2025")
    assert exc.value.field == "payment_date"

    with pytest.raises(NotFoundError):
        svc.record_payment(student_id=99, month=2, year=2025, payment_date="2025-03-16")


def test_update_registration_date():
    svc, students = make_service()

    assert svc.update_registration_date(student_id=3, registration_date="2025-02-01") == date(2025, 2, 1)
    assert students.get_by_id(3).registration_date == date(2025, 2, 1)

    with pytest.raises(ValidationError):
        svc.update_registration_date(student_id=3, registration_date="kemarin")
