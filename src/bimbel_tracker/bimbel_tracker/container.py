from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from .attendance.drafts import DraftSessionRegistry, SessionDraftAggregator
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .billing.engine import BillingCycleEngine
from .billing.service import PaymentService
from .core.constants import DEFAULT_CLASS_OPTIONS
from .database.connection import DBConfig, DatabaseConnection
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.roster import RepositoryStudentRoster
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    student_service: StudentService
    payment_service: PaymentService
    attendance_service: AttendanceService
    draft_sessions: DraftSessionRegistry


def assemble_container(
    *,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
    class_options: Sequence[str] = DEFAULT_CLASS_OPTIONS,
    today: Optional[Callable[[], date]] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    roster = RepositoryStudentRoster(students_repo, class_options=class_options)

    def new_draft_session(**options) -> SessionDraftAggregator:
        return SessionDraftAggregator(attendance_repo, roster=roster, clock=clock, **options)

    return Container(
        conn=conn,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        student_service=StudentService(students_repo, today=today),
        payment_service=PaymentService(students_repo, BillingCycleEngine(today=today)),
        attendance_service=AttendanceService(attendance_repo),
        draft_sessions=DraftSessionRegistry(new_draft_session),
    )


def build_container(*, db_config: dict, class_options: Sequence[str] = DEFAULT_CLASS_OPTIONS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble_container(
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        conn=conn,
        class_options=class_options,
    )
