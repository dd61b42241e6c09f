from __future__ import annotations

from typing import Protocol, Sequence

from ..core.constants import DEFAULT_CLASS_OPTIONS
from .model import RosterEntry
from .repository import StudentRepository


class StudentRoster(Protocol):
    """What the attendance draft flow needs from the student roster."""

    def fetch_active_students(self) -> Sequence[RosterEntry]:
        raise NotImplementedError

    def fetch_class_options(self) -> Sequence[str]:
        raise NotImplementedError


class RepositoryStudentRoster(StudentRoster):
    """Roster backed by the student repository (non-deleted students only)."""

    def __init__(self, students: StudentRepository, *, class_options: Sequence[str] = DEFAULT_CLASS_OPTIONS):
        self._students = students
        self._class_options = tuple(class_options)

    def fetch_active_students(self) -> Sequence[RosterEntry]:
        return [
            RosterEntry(name=s.name, status=s.status)
            for s in self._students.list_students()
            if s.name and s.name.strip()
        ]

    def fetch_class_options(self) -> Sequence[str]:
        return list(self._class_options)
