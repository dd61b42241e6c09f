from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..core.enums import AttendanceStatus


def time_key(time_start: str, time_end: str) -> str:
    return f"{time_start}-{time_end}"


@dataclass(frozen=True)
class AttendanceRecord:
    """Entitas domain: one student's attendance in one session.

    ``student_name`` is denormalized on purpose; records are not linked to a
    student id. ``record_id`` is assigned by the store.
    """

    date: date
    education_level: str
    class_type: str
    location: str
    time_start: str
    time_end: str
    student_name: str
    tutor: str
    status: AttendanceStatus
    notes: str = ""
    timestamp: Optional[datetime] = None
    record_id: Optional[int] = None

    @property
    def time_slot(self) -> str:
        return time_key(self.time_start, self.time_end)

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "date": self.date.isoformat(),
            "education_level": self.education_level,
            "class_type": self.class_type,
            "location": self.location,
            "time_start": self.time_start,
            "time_end": self.time_end,
            "time_slot": self.time_slot,
            "student_name": self.student_name,
            "tutor": self.tutor,
            "status": self.status.value,
            "notes": self.notes or "",
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass
class SessionContext:
    """Shared settings under which drafts are staged. Values are raw form strings."""

    date: str = ""
    education_level: str = ""
    class_type: str = ""
    location: str = ""
    time_start: str = ""
    time_end: str = ""
    status: str = AttendanceStatus.PRESENT.value
    tutor: str = ""

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "education_level": self.education_level,
            "class_type": self.class_type,
            "location": self.location,
            "time_start": self.time_start,
            "time_end": self.time_end,
            "status": self.status,
            "tutor": self.tutor,
        }


@dataclass(frozen=True)
class ActiveSession:
    """Grouping lock taken when the first draft of a session is staged."""

    time_start: str
    time_end: str
    education_level: str
    class_type: str
    location: str

    @property
    def key(self) -> str:
        return time_key(self.time_start, self.time_end)


@dataclass(frozen=True)
class DraftEntry:
    local_id: str
    date: str
    education_level: str
    class_type: str
    location: str
    time_start: str
    time_end: str
    student_name: str
    tutor: str
    status: str
    notes: str
    timestamp: datetime
    is_draft: bool = True

    @property
    def time_slot(self) -> str:
        return time_key(self.time_start, self.time_end)

    def to_record(self) -> AttendanceRecord:
        """Drop the draft-only fields and produce the record to persist."""
        return AttendanceRecord(
            date=parse_iso_date(self.date),
            education_level=self.education_level,
            class_type=self.class_type,
            location=self.location,
            time_start=self.time_start,
            time_end=self.time_end,
            student_name=self.student_name,
            tutor=self.tutor,
            status=AttendanceStatus(self.status),
            notes=self.notes,
            timestamp=self.timestamp,
        )

    def to_dict(self) -> dict:
        return {
            "local_id": self.local_id,
            "date": self.date,
            "education_level": self.education_level,
            "class_type": self.class_type,
            "location": self.location,
            "time_start": self.time_start,
            "time_end": self.time_end,
            "time_slot": self.time_slot,
            "student_name": self.student_name,
            "tutor": self.tutor,
            "status": self.status,
            "notes": self.notes,
            "timestamp": self.timestamp.isoformat(),
            "is_draft": self.is_draft,
        }


@dataclass(frozen=True)
class RecordResult:
    success: bool
    student_name: str
    error: Optional[str] = None
    record_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "student_name": self.student_name,
            "error": self.error,
            "id": self.record_id,
        }


@dataclass(frozen=True)
class BatchResult:
    """Outcome reported by the store for one bulk write."""

    success: bool
    error: Optional[str] = None
    results: Sequence[RecordResult] = field(default_factory=tuple)


@dataclass(frozen=True)
class CommitResult:
    success: bool
    count: int
    results: Sequence[RecordResult] = field(default_factory=tuple)


@dataclass(frozen=True)
class RecordFilters:
    tutor: Optional[str] = None
    class_type: Optional[str] = None
    education_level: Optional[str] = None
    location: Optional[str] = None
    student_name: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    limit: Optional[int] = None
