from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_all_as, fetch_one_as
from .model import AttendanceRecord, BatchResult, RecordFilters, RecordResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT record_id, session_date, education_level, class_type, location, time_start, time_end,
           student_name, tutor, status, notes, recorded_at
    FROM attendance_records
"""

# Domain field -> column. Only these can be changed after creation.
UPDATABLE_COLUMNS = {
    "date": "session_date",
    "education_level": "education_level",
    "class_type": "class_type",
    "location": "location",
    "time_start": "time_start",
    "time_end": "time_end",
    "student_name": "student_name",
    "tutor": "tutor",
    "status": "status",
    "notes": "notes",
}


def _to_record(r: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        date=r["session_date"],
        education_level=r["education_level"],
        class_type=r["class_type"],
        location=r["location"],
        time_start=r["time_start"],
        time_end=r["time_end"],
        student_name=r["student_name"],
        tutor=r["tutor"],
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes") or "",
        timestamp=r.get("recorded_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def submit_batch(self, records: Sequence[AttendanceRecord]) -> BatchResult:
        ids: list[int] = []
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for rec in records:
                    cur.execute(
                        """
                        INSERT INTO attendance_records
                            (session_date, education_level, class_type, location, time_start, time_end,
                             student_name, tutor, status, notes, recorded_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, COALESCE(%s, NOW()))
                        """,
                        (
                            rec.date,
                            rec.education_level,
                            rec.class_type,
                            rec.location,
                            rec.time_start,
                            rec.time_end,
                            rec.student_name,
                            rec.tutor,
                            rec.status.value,
                            rec.notes or None,
                            rec.timestamp,
                        ),
                    )
                    ids.append(int(cur.lastrowid))
        except mysql.connector.Error as e:
            logger.error("Bulk attendance write of %d records failed: %s", len(records), e)
            return BatchResult(
                success=False,
                error=str(e),
                results=tuple(RecordResult(success=False, student_name=r.student_name, error=str(e)) for r in records),
            )

        logger.info("Saved %d attendance records", len(ids))
        return BatchResult(
            success=True,
            results=tuple(
                RecordResult(success=True, student_name=r.student_name, record_id=rid) for r, rid in zip(records, ids)
            ),
        )

    def list_records(self, filters: RecordFilters) -> Sequence[AttendanceRecord]:
        where: list[str] = []
        params: list[Any] = []

        for value, clause in (
            (filters.tutor, "tutor=%s"),
            (filters.class_type, "class_type=%s"),
            (filters.education_level, "education_level=%s"),
            (filters.location, "location=%s"),
        ):
            if value:
                where.append(clause)
                params.append(value)

        if filters.student_name:
            where.append("student_name LIKE %s")
            params.append(f"%{filters.student_name}%")

        if filters.month and filters.year:
            where.append("MONTH(session_date)=%s AND YEAR(session_date)=%s")
            params.extend([int(filters.month), int(filters.year)])

        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY session_date DESC, time_start, record_id"
        if filters.limit:
            sql += " LIMIT %s"
            params.append(int(filters.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return fetch_all_as(cur, _to_record)

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE record_id=%s", (int(record_id),))
            return fetch_one_as(cur, _to_record)

    def update_record(self, record_id: int, updates: Mapping[str, object]) -> bool:
        columns = [(UPDATABLE_COLUMNS[k], v) for k, v in updates.items() if k in UPDATABLE_COLUMNS]
        if not columns:
            return False
        assignments = ", ".join(f"{col}=%s" for col, _ in columns)
        params = [v.value if isinstance(v, AttendanceStatus) else v for _, v in columns]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance_records SET {assignments} WHERE record_id=%s",
                (*params, int(record_id)),
            )
            return cur.rowcount > 0

    def delete_record(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (int(record_id),))
            return cur.rowcount > 0

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records")
            return int(cur.rowcount)
