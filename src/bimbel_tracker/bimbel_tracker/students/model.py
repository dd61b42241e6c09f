from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from ..common.datetime_utils import to_calendar_date
from ..core.enums import EducationLevel, StudentStatus
from ..core.exceptions import DataShapeError

logger = logging.getLogger(__name__)


def _parse_payments(raw: Any) -> dict[str, str]:
    if not raw:
        return {}
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        raw = json.loads(raw)
    return {str(k): str(v) for k, v in dict(raw).items() if v}


@dataclass(frozen=True)
class Student:
    """Entitas domain: siswa bimbel.

    ``payments`` maps a billing period key ('YYYY-MM') to the ISO date the
    payment was received. Keys exist only for recorded payments.
    """

    student_id: int
    name: str
    education_level: EducationLevel = EducationLevel.UNKNOWN
    registration_date: Optional[date] = None
    payments: Mapping[str, str] = field(default_factory=dict)
    status: StudentStatus = StudentStatus.ACTIVE
    is_deleted: bool = False
    phone: str = ""
    parent_name: str = ""
    notes: str = ""

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Student":
        """Build a Student from a stored row, normalizing the registration date once."""

        registration_date = None
        raw_date = doc.get("registration_date")
        if raw_date:
            try:
                registration_date = to_calendar_date(raw_date)
            except DataShapeError:
                logger.warning("Ignoring malformed registration date for student %s: %r", doc.get("student_id"), raw_date)

        try:
            status = StudentStatus(doc.get("status") or StudentStatus.ACTIVE.value)
        except ValueError:
            status = StudentStatus.ACTIVE

        return cls(
            student_id=int(doc["student_id"]),
            name=str(doc.get("name") or ""),
            education_level=EducationLevel.parse(doc.get("education_level")),
            registration_date=registration_date,
            payments=_parse_payments(doc.get("payments")),
            status=status,
            is_deleted=bool(doc.get("is_deleted")),
            phone=str(doc.get("phone") or ""),
            parent_name=str(doc.get("parent_name") or ""),
            notes=str(doc.get("notes") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "name": self.name,
            "education_level": self.education_level.value,
            "registration_date": self.registration_date.isoformat() if self.registration_date else None,
            "status": self.status.value,
            "phone": self.phone,
            "parent_name": self.parent_name,
            "notes": self.notes,
            "is_deleted": self.is_deleted,
        }


@dataclass(frozen=True)
class RosterEntry:
    """Read-model used by the attendance student picker."""

    name: str
    status: StudentStatus = StudentStatus.ACTIVE

    @property
    def is_selectable(self) -> bool:
        return self.status == StudentStatus.ACTIVE
