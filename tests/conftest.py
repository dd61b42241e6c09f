from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Mapping, Optional, Sequence

import pytest

from bimbel_tracker.attendance.model import AttendanceRecord, BatchResult, RecordFilters, RecordResult
from bimbel_tracker.core.enums import StudentStatus
from bimbel_tracker.students.model import RosterEntry, Student


class InMemoryStudents:
    def __init__(self, students: Sequence[Student] = ()):
        self.by_id: dict[int, Student] = {s.student_id: s for s in students}

    def list_students(self, *, include_deleted: bool = False):
        return [s for s in self.by_id.values() if include_deleted or not s.is_deleted]

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.by_id.get(int(student_id))

    def update_payments(self, student_id: int, payments: Mapping[str, str]) -> bool:
        s = self.by_id.get(int(student_id))
        if not s:
            return False
        self.by_id[s.student_id] = replace(s, payments=dict(payments))
        return True

    def update_registration_date(self, student_id: int, registration_date: date) -> bool:
        s = self.by_id.get(int(student_id))
        if not s:
            return False
        self.by_id[s.student_id] = replace(s, registration_date=registration_date)
        return True

    def set_deleted(self, student_id: int, *, is_deleted: bool) -> bool:
        s = self.by_id.get(int(student_id))
        if not s:
            return False
        self.by_id[s.student_id] = replace(s, is_deleted=is_deleted)
        return True

    def create_student(self, student: Student) -> int:
        student_id = max(self.by_id, default=0) + 1
        self.by_id[student_id] = replace(student, student_id=student_id)
        return student_id

    def update_student(self, student_id: int, fields: Mapping[str, object]) -> bool:
        s = self.by_id.get(int(student_id))
        if not s:
            return False
        self.by_id[s.student_id] = replace(s, **dict(fields))
        return True

    def hard_delete(self, student_id: int) -> bool:
        return self.by_id.pop(int(student_id), None) is not None


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self.batches: list[list[AttendanceRecord]] = []
        self.fail_with: Optional[str] = None
        self.report_per_record = True
        self._id = 0

    def submit_batch(self, records: Sequence[AttendanceRecord]) -> BatchResult:
        self.batches.append(list(records))
        if self.fail_with:
            results = ()
            if self.report_per_record:
                results = tuple(RecordResult(success=False, student_name=r.student_name, error=self.fail_with) for r in records)
            return BatchResult(success=False, error=self.fail_with, results=results)

        results = []
        for r in records:
            self._id += 1
            self.records[self._id] = replace(r, record_id=self._id)
            results.append(RecordResult(success=True, student_name=r.student_name, record_id=self._id))
        return BatchResult(success=True, results=tuple(results))

    def list_records(self, filters: RecordFilters):
        items = list(self.records.values())
        if filters.tutor:
            items = [r for r in items if r.tutor == filters.tutor]
        if filters.class_type:
            items = [r for r in items if r.class_type == filters.class_type]
        if filters.education_level:
            items = [r for r in items if r.education_level == filters.education_level]
        if filters.location:
            items = [r for r in items if r.location == filters.location]
        if filters.student_name:
            items = [r for r in items if filters.student_name.lower() in r.student_name.lower()]
        if filters.month and filters.year:
            items = [r for r in items if r.date.month == filters.month and r.date.year == filters.year]
        items.sort(key=lambda r: (r.date, r.record_id), reverse=True)
        return items[: filters.limit] if filters.limit else items

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(int(record_id))

    def update_record(self, record_id: int, updates: Mapping[str, object]) -> bool:
        rec = self.records.get(int(record_id))
        if not rec:
            return False
        self.records[rec.record_id] = replace(rec, **dict(updates))
        return True

    def delete_record(self, record_id: int) -> bool:
        return self.records.pop(int(record_id), None) is not None

    def delete_all(self) -> int:
        count = len(self.records)
        self.records.clear()
        return count


class FakeRoster:
    def __init__(self, entries: Sequence[RosterEntry] = (), classes: Sequence[str] = ("Matematika", "Fisika")):
        self.entries = list(entries)
        self.classes = list(classes)

    def fetch_active_students(self):
        return list(self.entries)

    def fetch_class_options(self):
        return list(self.classes)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def roster() -> FakeRoster:
    return FakeRoster(
        [
            RosterEntry("Budi", StudentStatus.ACTIVE),
            RosterEntry("Citra", StudentStatus.ACTIVE),
            RosterEntry("Dewi", StudentStatus.ON_LEAVE),
            RosterEntry("Eko", StudentStatus.INACTIVE),
        ]
    )


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2025, 3, 10, 9, 15, 0)
