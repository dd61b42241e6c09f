from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Repository interface for students.

    Note (DIP): services depend on this protocol, not on a concrete store.
    """

    def list_students(self, *, include_deleted: bool = False) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def update_payments(self, student_id: int, payments: Mapping[str, str]) -> bool:
        raise NotImplementedError

    def update_registration_date(self, student_id: int, registration_date: date) -> bool:
        raise NotImplementedError

    def set_deleted(self, student_id: int, *, is_deleted: bool) -> bool:
        raise NotImplementedError

    def create_student(self, student: Student) -> int:
        raise NotImplementedError

    def update_student(self, student_id: int, fields: Mapping[str, object]) -> bool:
        raise NotImplementedError

    def hard_delete(self, student_id: int) -> bool:
        raise NotImplementedError
