from __future__ import annotations

import json
from datetime import date
from enum import Enum
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_all_as, fetch_one_as
from .model import Student
from .repository import StudentRepository

_COLUMNS = (
    "student_id, name, education_level, registration_date, payments, status, is_deleted, phone, parent_name, notes"
)

# Domain field -> column for profile edits.
PROFILE_COLUMNS = {
    "name": "name",
    "education_level": "education_level",
    "status": "status",
    "phone": "phone",
    "parent_name": "parent_name",
    "notes": "notes",
}


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_students(self, *, include_deleted: bool = False) -> Sequence[Student]:
        sql = f"SELECT {_COLUMNS} FROM students"
        if not include_deleted:
            sql += " WHERE is_deleted=0"
        sql += " ORDER BY name"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql)
            return fetch_all_as(cur, Student.from_document)

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            return fetch_one_as(cur, Student.from_document)

    def update_payments(self, student_id: int, payments: Mapping[str, str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET payments=%s WHERE student_id=%s",
                (json.dumps(dict(payments), sort_keys=True), int(student_id)),
            )
            return cur.rowcount > 0

    def update_registration_date(self, student_id: int, registration_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET registration_date=%s WHERE student_id=%s",
                (registration_date, int(student_id)),
            )
            return cur.rowcount > 0

    def set_deleted(self, student_id: int, *, is_deleted: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET is_deleted=%s, deleted_at=IF(%s, NOW(), NULL)
                WHERE student_id=%s
                """,
                (1 if is_deleted else 0, 1 if is_deleted else 0, int(student_id)),
            )
            return cur.rowcount > 0

    def create_student(self, student: Student) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students
                    (name, education_level, registration_date, payments, status, phone, parent_name, notes)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    student.name,
                    student.education_level.value,
                    student.registration_date,
                    json.dumps(dict(student.payments or {}), sort_keys=True),
                    student.status.value,
                    student.phone or None,
                    student.parent_name or None,
                    student.notes or None,
                ),
            )
            return int(cur.lastrowid)

    def update_student(self, student_id: int, fields: Mapping[str, object]) -> bool:
        columns = [(PROFILE_COLUMNS[k], v) for k, v in fields.items() if k in PROFILE_COLUMNS]
        if not columns:
            return False
        assignments = ", ".join(f"{col}=%s" for col, _ in columns)
        params = [v.value if isinstance(v, Enum) else v for _, v in columns]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE students SET {assignments} WHERE student_id=%s", (*params, int(student_id)))
            return cur.rowcount > 0

    def hard_delete(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0
