from __future__ import annotations

from datetime import date

import pytest

from bimbel_tracker.container import assemble_container
from bimbel_tracker.core.enums import StudentStatus
from bimbel_tracker.main import create_app
from bimbel_tracker.students.model import Student

from conftest import InMemoryStudents


@pytest.fixture
def students():
    return InMemoryStudents(
        [
            Student(student_id=1, name="Budi", registration_date=date(2025, 1, 10), payments={"2025-02": "2025-03-01"}),
            Student(student_id=2, name="Citra", registration_date=date(2025, 1, 15)),
            Student(student_id=3, name="Dewi", registration_date=date(2025, 1, 5), status=StudentStatus.ON_LEAVE),
        ]
    )


@pytest.fixture
def app(monkeypatch, students, attendance_repo, fixed_clock):
    monkeypatch.setenv("APP_ENV", "testing")
    container = assemble_container(
        students_repo=students,
        attendance_repo=attendance_repo,
        class_options=["Matematika", "Fisika"],
        today=lambda: date(2025, 3, 20),
        clock=fixed_clock,
    )
    return create_app(container)


def login(client, name: str, role: str) -> None:
    with client.session_transaction() as sess:
        sess["name"] = name
        sess["role"] = role


@pytest.fixture
def admin(app):
    client = app.test_client()
    login(client, "Admin", "admin")
    return client


@pytest.fixture
def tutor(app):
    client = app.test_client()
    login(client, "Kak Rina", "tutor")
    return client


def test_requires_login(app):
    res = app.test_client().get("/api/attendance/draft/session")
    assert res.status_code == 401


def test_payments_are_admin_only(tutor):
    assert tutor.get("/api/payments").status_code == 403


def test_payment_overview(admin):
    res = admin.get("/api/payments?month=2&year=2025")

    body = res.get_json()
    assert res.status_code == 200
    assert body["summary"] == {"total": 3, "paid": 1, "unpaid": 2}
    assert {r["name"]: r["status"] for r in body["rows"]} == {"Budi": "paid", "Citra": "overdue", "Dewi": "overdue"}


def test_record_payment_and_bad_month(admin, students):
    res = admin.put("/api/payments/2", json={"month": 2, "year": 2025, "payment_date": "2025-03-14"})
    assert res.status_code == 200
    assert res.get_json()["status"] == "paid"
    assert students.get_by_id(2).payments == {"2025-02": "2025-03-14"}

    res = admin.put("/api/payments/2", json={"month": 13, "year": 2025, "payment_date": "2025-03-14"})
    assert res.status_code == 400
    assert res.get_json()["field"] == "month"

    assert admin.get("/api/payments/99?year=2025").status_code == 404


def test_tutor_stages_and_commits_a_session(tutor, attendance_repo):
    res = tutor.patch(
        "/api/attendance/draft/session",
        json={"education_level": "SD", "class_type": "Matematika", "location": "Sapphire"},
    )
    assert res.status_code == 200
    assert res.get_json()["context"]["date"] == "2025-03-10"

    assert tutor.post("/api/attendance/draft/time-slot", json={"value": "09:00-10:30"}).status_code == 200

    res = tutor.post("/api/attendance/draft/entries", json={"student_name": "Budi"})
    assert res.status_code == 201
    assert list(res.get_json()["drafts"]) == ["09:00-10:30"]

    res = tutor.post("/api/attendance/draft/entries", json={"student_name": "Dewi"})
    assert res.status_code == 400
    assert res.get_json()["field"] == "student_name"

    res = tutor.post("/api/attendance/draft/new-session", json={})
    assert res.status_code == 409
    assert res.get_json()["confirm_required"] is True

    res = tutor.post("/api/attendance/draft/commit")
    assert res.status_code == 200
    assert res.get_json()["count"] == 1

    saved = list(attendance_repo.records.values())
    assert [(r.student_name, r.tutor, r.date) for r in saved] == [("Budi", "Kak Rina", date(2025, 3, 10))]

    assert tutor.post("/api/attendance/draft/commit").status_code == 400


def test_tutor_cannot_change_session_date(tutor):
    res = tutor.patch("/api/attendance/draft/session", json={"date": "2025-01-01"})
    assert res.status_code == 403


def test_failed_commit_keeps_drafts(tutor, attendance_repo):
    tutor.patch(
        "/api/attendance/draft/session",
        json={"education_level": "TK", "class_type": "Calistung", "location": "Sapphire"},
    )
    tutor.post("/api/attendance/draft/custom-time", json={"time_start": "08:00", "time_end": "09:00"})
    tutor.post("/api/attendance/draft/entries", json={"student_name": "Citra"})
    attendance_repo.fail_with = "koneksi terputus"

    res = tutor.post("/api/attendance/draft/commit")

    assert res.status_code == 502
    assert res.get_json()["results"][0]["error"] == "koneksi terputus"
    assert tutor.get("/api/attendance/draft/session").get_json()["draft_count"] == 1


def test_records_listing_is_scoped_to_tutor(tutor, admin, attendance_repo):
    tutor.patch(
        "/api/attendance/draft/session",
        json={"education_level": "SMA", "class_type": "Fisika", "location": "Sapphire"},
    )
    tutor.post("/api/attendance/draft/custom-time", json={"time_start": "15:00", "time_end": "16:30"})
    tutor.post("/api/attendance/draft/entries", json={"student_name": "Budi"})
    tutor.post("/api/attendance/draft/commit")

    assert len(tutor.get("/api/attendance/records?tutor=Someone").get_json()["records"]) == 1
    assert tutor.delete("/api/attendance/records").status_code == 403

    res = admin.delete("/api/attendance/records")
    assert res.get_json()["deleted"] == 1


def test_invalid_session_patch_changes_nothing(tutor):
    tutor.patch("/api/attendance/draft/session", json={"class_type": "Fisika"})

    res = tutor.patch("/api/attendance/draft/session", json={"class_type": "Kimia", "status": "bad"})

    assert res.status_code == 400
    assert tutor.get("/api/attendance/draft/session").get_json()["context"]["class_type"] == "Fisika"


def test_options_list_classes_and_locations(tutor):
    body = tutor.get("/api/attendance/options").get_json()

    assert body["classes"] == ["Matematika", "Fisika"]
    assert "Sapphire" in body["locations"]
    assert {"name": "Dewi", "status": "Cuti"} in body["students"]


def test_unknown_session_role_is_forbidden(app):
    client = app.test_client()
    login(client, "Tamu", "guru")

    assert client.get("/api/attendance/draft/session").status_code == 403
    assert client.get("/api/attendance/records").status_code == 403


def test_out_of_range_year_is_a_validation_error(admin):
    res = admin.get("/api/payments?month=1&year=0")

    assert res.status_code == 400
    assert res.get_json()["field"] == "year"
    assert admin.get("/api/payments/1?year=10000").status_code == 400


def test_admin_manages_students_and_status_blocks_selection(admin, tutor, students):
    res = admin.post("/api/students", json={"name": "Fajar", "education_level": "SMA", "registration_date": "2025-02-01"})
    assert res.status_code == 201
    new_id = res.get_json()["student"]["student_id"]
    assert students.get_by_id(new_id).registration_date == date(2025, 2, 1)

    res = admin.patch(f"/api/students/{new_id}", json={"status": "Off"})
    assert res.get_json()["student"]["status"] == "Off"

    tutor.patch(
        "/api/attendance/draft/session",
        json={"education_level": "SMA", "class_type": "Fisika", "location": "Sapphire"},
    )
    tutor.post("/api/attendance/draft/custom-time", json={"time_start": "15:00", "time_end": "16:30"})
    res = tutor.post("/api/attendance/draft/entries", json={"student_name": "Fajar"})
    assert res.status_code == 400
    assert "OFF" in res.get_json()["message"]

    assert admin.post("/api/students", json={"name": ""}).status_code == 400
    assert tutor.post("/api/students", json={"name": "Gita"}).status_code == 403

    assert admin.delete(f"/api/students/{new_id}/permanent").status_code == 200
    assert students.get_by_id(new_id) is None
    assert admin.delete(f"/api/students/{new_id}/permanent").status_code == 404
