from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import (
    DAY_END_HOUR,
    DAY_START_HOUR,
    DEFAULT_SLOT_MINUTES,
    SLOT_OVERRUN_MINUTES,
    SLOT_STEP_MINUTES,
    TK_SLOT_MINUTES,
)
from ..core.enums import EducationLevel


@dataclass(frozen=True)
class TimeSlot:
    start: str
    end: str

    @property
    def value(self) -> str:
        return f"{self.start}-{self.end}"

    @property
    def label(self) -> str:
        return f"{self.start} - {self.end}"

    def to_dict(self) -> dict:
        return {"value": self.value, "label": self.label, "start": self.start, "end": self.end}


def _fmt(total_minutes: int) -> str:
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def slot_minutes(education_level: str) -> int:
    return TK_SLOT_MINUTES if education_level == EducationLevel.TK.value else DEFAULT_SLOT_MINUTES


def generate_time_slots(education_level: str) -> list[TimeSlot]:
    """Session slots for a level: starts every 30 minutes from 07:00 until 22:00.

    TK sessions last 60 minutes and must end by 22:00. Other levels last
    90 minutes and may run until 22:30.
    """

    duration = slot_minutes(education_level)
    limit = DAY_END_HOUR * 60
    if duration != TK_SLOT_MINUTES:
        limit += SLOT_OVERRUN_MINUTES

    slots = []
    for start in range(DAY_START_HOUR * 60, DAY_END_HOUR * 60, SLOT_STEP_MINUTES):
        end = start + duration
        if end <= limit:
            slots.append(TimeSlot(start=_fmt(start), end=_fmt(end)))
    return slots
